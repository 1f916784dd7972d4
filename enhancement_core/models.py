"""Dataclasses shared across simulation, worst-case and aggregation modules."""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Integral, Real

from .cost import Amount, is_unbounded, serialize_amount
from .errors import InvalidConfiguration


def _is_real(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_integer(value: object) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class Configuration:
    """Immutable description of one upgrade process.

    Parameters
    ----------
    stage_count:
        Number of ordered stages ("stars") to build before the final attempt.
    stage_probabilities:
        Base success probability for every stage, in build order.
    final_probability:
        Success probability of the terminal upgrade attempt.
    cost_per_attempt:
        Resource charged for every stage or final attempt.
    stage_pity_threshold:
        Consecutive failures on a stage after which its next attempt succeeds.
    final_pity_threshold:
        Same concept for the final attempt; its counter persists across the run.
    reset_all_stage_pity_on_any_failure:
        When True, every stage pity counter is wiped whenever any attempt fails.

    Raises
    ------
    InvalidConfiguration
        If any invariant is violated. Probability sequences are never truncated
        or padded to fit ``stage_count``.
    """

    stage_count: int
    stage_probabilities: tuple[float, ...]
    final_probability: float
    cost_per_attempt: float
    stage_pity_threshold: int
    final_pity_threshold: int
    reset_all_stage_pity_on_any_failure: bool = False

    def __post_init__(self) -> None:
        if not _is_integer(self.stage_count) or self.stage_count < 1:
            raise InvalidConfiguration(
                f"stage_count must be an integer >= 1, received {self.stage_count!r}"
            )
        object.__setattr__(self, "stage_count", int(self.stage_count))

        try:
            probabilities = tuple(self.stage_probabilities)
        except TypeError as exc:
            raise InvalidConfiguration("stage_probabilities must be a sequence of numbers") from exc
        if len(probabilities) != self.stage_count:
            raise InvalidConfiguration(
                f"stage_probabilities must contain {self.stage_count} entries, "
                f"received {len(probabilities)}"
            )
        for index, probability in enumerate(probabilities):
            if not _is_real(probability) or not 0.0 <= probability <= 1.0:
                raise InvalidConfiguration(
                    f"stage_probabilities[{index}] must lie in [0, 1], received {probability!r}"
                )
        object.__setattr__(
            self, "stage_probabilities", tuple(float(value) for value in probabilities)
        )

        if not _is_real(self.final_probability) or not 0.0 <= self.final_probability <= 1.0:
            raise InvalidConfiguration(
                f"final_probability must lie in [0, 1], received {self.final_probability!r}"
            )
        object.__setattr__(self, "final_probability", float(self.final_probability))

        if (
            not _is_real(self.cost_per_attempt)
            or not math.isfinite(self.cost_per_attempt)
            or self.cost_per_attempt < 0
        ):
            raise InvalidConfiguration(
                f"cost_per_attempt must be a finite number >= 0, received {self.cost_per_attempt!r}"
            )

        for name in ("stage_pity_threshold", "final_pity_threshold"):
            threshold = getattr(self, name)
            if not _is_integer(threshold) or threshold < 0:
                raise InvalidConfiguration(
                    f"{name} must be an integer >= 0, received {threshold!r}"
                )
            object.__setattr__(self, name, int(threshold))

        if not isinstance(self.reset_all_stage_pity_on_any_failure, bool):
            raise InvalidConfiguration(
                "reset_all_stage_pity_on_any_failure must be a bool, "
                f"received {self.reset_all_stage_pity_on_any_failure!r}"
            )


@dataclass(frozen=True)
class RunOutcome:
    """Counters accumulated by one stochastic run."""

    total_attempts: int
    total_cost: float
    attempts_per_stage: tuple[int, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "total_attempts": self.total_attempts,
            "total_cost": self.total_cost,
            "attempts_per_stage": list(self.attempts_per_stage),
        }


@dataclass(frozen=True)
class WorstCaseOutcome:
    """Adversarial attempt and cost totals; both may be ``UNBOUNDED``.

    Bounded attempt counts are exact ints. Costs are exact too: an int or
    ``Fraction`` when the product does not fit in a float.
    """

    total_attempts: int | float
    total_cost: Amount

    @property
    def is_unbounded(self) -> bool:
        """Return True when the adversarial process never provably terminates."""

        return is_unbounded(self.total_attempts)

    def to_dict(self) -> dict[str, object]:
        return {
            "total_attempts": serialize_amount(self.total_attempts),
            "total_cost": serialize_amount(self.total_cost),
        }


@dataclass
class MetricSummary:
    """Mean and percentiles of one sample family."""

    mean: float
    p50: float
    p90: float
    p99: float

    def to_dict(self) -> dict[str, float]:
        return {"mean": self.mean, "p50": self.p50, "p90": self.p90, "p99": self.p99}


@dataclass
class StageSummary:
    """Attempt statistics for a single stage across a batch."""

    stage_index: int
    attempts: MetricSummary

    @property
    def label(self) -> str:
        """Return the one-based display label of the stage."""

        return f"Stage {self.stage_index + 1}"

    def to_dict(self) -> dict[str, object]:
        return {"stage_index": self.stage_index, **self.attempts.to_dict()}


@dataclass
class HistogramBin:
    """Number of runs whose attempt count falls in ``[start, start + width)``."""

    start: float
    count: int


@dataclass
class AggregateStatistics:
    """Summary of one outcome family (stages-only or full run) over a batch."""

    trial_count: int
    attempts: MetricSummary
    cost: MetricSummary
    per_stage: list[StageSummary]
    histogram: list[HistogramBin]

    def to_dict(self) -> dict[str, object]:
        return {
            "trial_count": self.trial_count,
            "attempts": self.attempts.to_dict(),
            "cost": self.cost.to_dict(),
            "per_stage": [stage.to_dict() for stage in self.per_stage],
            "histogram": [{"start": item.start, "count": item.count} for item in self.histogram],
        }
