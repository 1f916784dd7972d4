"""Monte Carlo simulation of the stage-build and final-upgrade process."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .cost import attempts_cost
from .data import DEFAULT_MAX_ATTEMPTS_PER_RUN
from .errors import InvalidBatchRequest, NonTerminatingConfiguration
from .models import Configuration, RunOutcome
from .rng import LcgRandom

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


def ensure_terminating(config: Configuration) -> None:
    """Fail fast when the stochastic stage phase can never complete.

    With reset-on-any-failure every failure zeroes all stage pity counters, so a
    positive stage pity threshold is never reached and a stage whose probability is
    exactly 0 can never be built.

    Raises
    ------
    NonTerminatingConfiguration
        If some stage can neither succeed by chance nor by pity.
    """

    if not config.reset_all_stage_pity_on_any_failure or config.stage_pity_threshold == 0:
        return
    blocked = [
        index for index, probability in enumerate(config.stage_probabilities) if probability == 0.0
    ]
    if blocked:
        logger.warning(
            "Refusing to simulate: stages %s have probability 0 and pity resets on any failure",
            [index + 1 for index in blocked],
        )
        raise NonTerminatingConfiguration(
            "Stages "
            + ", ".join(str(index + 1) for index in blocked)
            + " have probability 0 while stage pity resets on any failure; "
            "the run would never terminate"
        )


class _RunState:
    """Mutable counters owned by a single run and discarded when it ends."""

    def __init__(
        self,
        config: Configuration,
        rng: RandomSource,
        max_attempts: Optional[int],
    ) -> None:
        self.config = config
        self.rng = rng
        self.max_attempts = max_attempts
        self.total_attempts = 0
        self.attempts_per_stage = [0] * config.stage_count
        self.stage_pity_fails = [0] * config.stage_count

    def charge_attempt(self) -> None:
        self.total_attempts += 1
        if self.max_attempts is not None and self.total_attempts > self.max_attempts:
            logger.warning("Run exceeded %d attempts without finishing", self.max_attempts)
            raise NonTerminatingConfiguration(
                f"Run did not finish within {self.max_attempts} attempts"
            )

    def apply_failure_reset(self) -> None:
        """Wipe every stage pity counter when the configuration asks for it."""

        if self.config.reset_all_stage_pity_on_any_failure:
            self.stage_pity_fails = [0] * self.config.stage_count

    def build_stages(self) -> None:
        """Attempt stages in order until all are built; any failure restarts at stage 1."""

        config = self.config
        current_stage_index = 0
        while current_stage_index < config.stage_count:
            self.charge_attempt()
            self.attempts_per_stage[current_stage_index] += 1
            guaranteed = self.stage_pity_fails[current_stage_index] >= config.stage_pity_threshold
            if guaranteed or self.rng.random() < config.stage_probabilities[current_stage_index]:
                self.stage_pity_fails[current_stage_index] = 0
                current_stage_index += 1
            else:
                self.stage_pity_fails[current_stage_index] += 1
                self.apply_failure_reset()
                current_stage_index = 0

    def outcome(self) -> RunOutcome:
        return RunOutcome(
            total_attempts=self.total_attempts,
            total_cost=attempts_cost(self.total_attempts, self.config.cost_per_attempt),
            attempts_per_stage=tuple(self.attempts_per_stage),
        )


def simulate_stages_only(
    config: Configuration,
    rng: RandomSource,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS_PER_RUN,
) -> RunOutcome:
    """Build every stage once without attempting the final upgrade.

    Parameters
    ----------
    config:
        Validated process configuration.
    rng:
        Live random source; every non-guaranteed attempt consumes one draw.
    max_attempts:
        Ceiling after which the run is reported as non-converging (``None``
        disables it).
    """

    ensure_terminating(config)
    state = _RunState(config, rng, max_attempts)
    state.build_stages()
    return state.outcome()


def simulate_full_run(
    config: Configuration,
    rng: RandomSource,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS_PER_RUN,
) -> RunOutcome:
    """Build all stages then attempt the final upgrade, repeating until it succeeds.

    The final pity counter survives every rebuild and is only cleared by the
    eventual success; a failed final attempt wipes the built stages and applies the
    same stage pity reset rule as a stage failure.
    """

    ensure_terminating(config)
    state = _RunState(config, rng, max_attempts)
    final_pity_fails = 0
    while True:
        state.build_stages()
        state.charge_attempt()
        guaranteed = final_pity_fails >= config.final_pity_threshold
        if guaranteed or rng.random() < config.final_probability:
            return state.outcome()
        final_pity_fails += 1
        state.apply_failure_reset()


def simulate_batch(
    config: Configuration,
    trial_count: int,
    seed: int,
    max_attempts: Optional[int] = DEFAULT_MAX_ATTEMPTS_PER_RUN,
) -> tuple[list[RunOutcome], list[RunOutcome]]:
    """Run ``trial_count`` stages-only and full-run pairs over one shared stream.

    Each trial draws its stages-only outcome first and its full-run outcome second;
    the order fixes which draws every later trial sees.

    Returns
    -------
    tuple[list[RunOutcome], list[RunOutcome]]
        Stages-only outcomes and full-run outcomes, in trial order.
    """

    if isinstance(trial_count, bool) or not isinstance(trial_count, int) or trial_count <= 0:
        raise InvalidBatchRequest(f"trial_count must be a positive integer, received {trial_count!r}")
    ensure_terminating(config)

    rng = LcgRandom(seed)
    stages_outcomes: list[RunOutcome] = []
    full_outcomes: list[RunOutcome] = []
    for _ in range(trial_count):
        stages_outcomes.append(simulate_stages_only(config, rng, max_attempts=max_attempts))
        full_outcomes.append(simulate_full_run(config, rng, max_attempts=max_attempts))
    return stages_outcomes, full_outcomes
