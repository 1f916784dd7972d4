"""Deterministic worst-case (full pity) attempt and cost calculators."""

from __future__ import annotations

from .cost import UNBOUNDED, attempts_cost
from .models import Configuration, WorstCaseOutcome


def _unbounded() -> WorstCaseOutcome:
    return WorstCaseOutcome(total_attempts=UNBOUNDED, total_cost=UNBOUNDED)


def adversarial_stage_attempts(stage_count: int, stage_pity_threshold: int) -> int:
    """Return the attempts needed to build ``stage_count`` stages when every try fails.

    Every non-guaranteed attempt fails and wipes progress back to stage 1, while
    each stage keeps its own pity counter. Reaching stage ``k + 1`` therefore takes
    ``T + 1`` tries on stage ``k``, each preceded by a full rebuild of stages
    ``1..k``; all stage counters are back at zero once the last stage is built.

    Parameters
    ----------
    stage_count:
        Number of stages to build.
    stage_pity_threshold:
        Failures after which a stage attempt is guaranteed.
    """

    tries_per_stage = stage_pity_threshold + 1
    attempts = 0
    for _ in range(stage_count):
        attempts = tries_per_stage * (attempts + 1)
    return attempts


def stages_only_worst_case(config: Configuration) -> WorstCaseOutcome:
    """Return the adversarial total for building every stage once.

    The result is unbounded whenever stage pity resets on any failure, since the
    reset keeps every pity counter below its threshold.
    """

    if config.reset_all_stage_pity_on_any_failure:
        return _unbounded()
    attempts = adversarial_stage_attempts(config.stage_count, config.stage_pity_threshold)
    return WorstCaseOutcome(
        total_attempts=attempts,
        total_cost=attempts_cost(attempts, config.cost_per_attempt),
    )


def full_run_worst_case(config: Configuration) -> WorstCaseOutcome:
    """Return the adversarial total for building stages and landing the final upgrade.

    Each repetition rebuilds every stage from zero pity and makes one final
    attempt; only the final pity counter carries over, so the final attempt
    succeeds on repetition ``final_pity_threshold + 1``.
    """

    if config.reset_all_stage_pity_on_any_failure:
        return _unbounded()
    per_repetition = (
        adversarial_stage_attempts(config.stage_count, config.stage_pity_threshold) + 1
    )
    attempts = per_repetition * (config.final_pity_threshold + 1)
    return WorstCaseOutcome(
        total_attempts=attempts,
        total_cost=attempts_cost(attempts, config.cost_per_attempt),
    )
