"""High-level entry points used by presentation layers and the command line."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Optional

from .aggregate import aggregate_outcomes
from .data import (
    DEFAULT_HISTOGRAM_BIN_WIDTH,
    DEFAULT_MAX_ATTEMPTS_PER_RUN,
    DEFAULT_SEED,
    DEFAULT_TRIAL_COUNT,
    MAX_RECOMMENDED_TRIALS,
    MIN_RECOMMENDED_TRIALS,
    configuration_to_mapping,
)
from .errors import InvalidBatchRequest
from .models import AggregateStatistics, Configuration, WorstCaseOutcome
from .simulation import ensure_terminating, simulate_batch
from .worst_case import full_run_worst_case, stages_only_worst_case

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Bundle returned by ``run_batch``."""

    config: Configuration
    trial_count: int
    seed: int
    bin_width: float
    stages_only: AggregateStatistics
    full_run: AggregateStatistics
    stages_only_worst_case: WorstCaseOutcome
    full_run_worst_case: WorstCaseOutcome
    compute_seconds: float

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-compatible view; unbounded amounts become ``"unbounded"``."""

        return {
            "config": configuration_to_mapping(self.config),
            "trial_count": self.trial_count,
            "seed": self.seed,
            "bin_width": self.bin_width,
            "stages_only": self.stages_only.to_dict(),
            "full_run": self.full_run.to_dict(),
            "stages_only_worst_case": self.stages_only_worst_case.to_dict(),
            "full_run_worst_case": self.full_run_worst_case.to_dict(),
            "compute_seconds": self.compute_seconds,
        }


def compute_worst_cases(config: Configuration) -> tuple[WorstCaseOutcome, WorstCaseOutcome]:
    """Return the stages-only and full-run worst cases for ``config``."""

    return stages_only_worst_case(config), full_run_worst_case(config)


def validate_batch_request(trial_count: int, bin_width: float) -> None:
    """Reject batch parameters before any simulation starts.

    Raises
    ------
    InvalidBatchRequest
        If ``trial_count`` is not a positive integer or ``bin_width`` is not positive.
    """

    if isinstance(trial_count, bool) or not isinstance(trial_count, int) or trial_count <= 0:
        raise InvalidBatchRequest(f"trial_count must be a positive integer, received {trial_count!r}")
    if isinstance(bin_width, bool) or not isinstance(bin_width, (int, float)) or bin_width <= 0:
        raise InvalidBatchRequest(f"bin_width must be a positive number, received {bin_width!r}")
    if not MIN_RECOMMENDED_TRIALS <= trial_count <= MAX_RECOMMENDED_TRIALS:
        logger.warning(
            "trial_count=%d is outside the recommended range %d-%d",
            trial_count,
            MIN_RECOMMENDED_TRIALS,
            MAX_RECOMMENDED_TRIALS,
        )


def run_batch(
    config: Configuration,
    trial_count: int = DEFAULT_TRIAL_COUNT,
    seed: int = DEFAULT_SEED,
    bin_width: float = DEFAULT_HISTOGRAM_BIN_WIDTH,
    max_attempts_per_run: Optional[int] = DEFAULT_MAX_ATTEMPTS_PER_RUN,
) -> BatchResult:
    """Run the Monte Carlo pass and attach deterministic worst-case bounds.

    Parameters
    ----------
    config:
        Validated process configuration.
    trial_count:
        Number of trials; each contributes one stages-only and one full-run outcome.
    seed:
        Seed of the single random stream shared by every trial.
    bin_width:
        Attempt width of the histogram bins.
    max_attempts_per_run:
        Per-run attempt ceiling reported as non-convergence (``None`` disables it).

    Returns
    -------
    BatchResult
        Aggregated statistics for both run modes plus both worst cases.

    Raises
    ------
    InvalidBatchRequest
        If the batch parameters are unusable.
    NonTerminatingConfiguration
        If a run can never finish or exceeds ``max_attempts_per_run``.
    """

    validate_batch_request(trial_count, bin_width)
    ensure_terminating(config)

    logger.info(
        "Running %d trials over %d stages (seed=%d)", trial_count, config.stage_count, seed
    )
    compute_start = perf_counter()
    stages_outcomes, full_outcomes = simulate_batch(
        config,
        trial_count,
        seed,
        max_attempts=max_attempts_per_run,
    )
    stages_only = aggregate_outcomes(stages_outcomes, bin_width)
    full_run = aggregate_outcomes(full_outcomes, bin_width)
    compute_seconds = perf_counter() - compute_start
    logger.info("Batch finished in %.3f s", compute_seconds)

    stages_worst, full_worst = compute_worst_cases(config)

    return BatchResult(
        config=config,
        trial_count=trial_count,
        seed=seed,
        bin_width=bin_width,
        stages_only=stages_only,
        full_run=full_run,
        stages_only_worst_case=stages_worst,
        full_run_worst_case=full_worst,
        compute_seconds=compute_seconds,
    )
