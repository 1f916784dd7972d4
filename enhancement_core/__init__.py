"""
Monte Carlo and worst-case engine for staged upgrades with pity.

Presentation layers build a ``Configuration`` and call ``run_batch`` (or the
individual simulators and calculators); the engine keeps no state between calls.
"""

from __future__ import annotations

import logging

from .aggregate import aggregate_outcomes, histogram, percentile, summarize, summarize_per_stage
from .api import BatchResult, compute_worst_cases, run_batch, validate_batch_request
from .cost import UNBOUNDED, attempts_cost, is_unbounded
from .data import (
    DEFAULT_FROM_LEVEL,
    DEFAULT_HISTOGRAM_BIN_WIDTH,
    DEFAULT_MAX_ATTEMPTS_PER_RUN,
    DEFAULT_SEED,
    DEFAULT_TRIAL_COUNT,
    QUICK_RATE_PRESETS,
    configuration_from_mapping,
    configuration_to_mapping,
    default_configuration,
    load_configuration_presets,
    resize_stage_probabilities,
    suggested_stage_count,
    with_uniform_rate,
)
from .diagnostics import DiagnosticResult, diagnostics_passed, run_diagnostics
from .errors import (
    EnhancementError,
    InvalidBatchRequest,
    InvalidConfiguration,
    NonTerminatingConfiguration,
)
from .models import (
    AggregateStatistics,
    Configuration,
    HistogramBin,
    MetricSummary,
    RunOutcome,
    StageSummary,
    WorstCaseOutcome,
)
from .rng import LcgRandom
from .simulation import ensure_terminating, simulate_batch, simulate_full_run, simulate_stages_only
from .worst_case import full_run_worst_case, stages_only_worst_case

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AggregateStatistics",
    "BatchResult",
    "Configuration",
    "DEFAULT_FROM_LEVEL",
    "DEFAULT_HISTOGRAM_BIN_WIDTH",
    "DEFAULT_MAX_ATTEMPTS_PER_RUN",
    "DEFAULT_SEED",
    "DEFAULT_TRIAL_COUNT",
    "DiagnosticResult",
    "EnhancementError",
    "HistogramBin",
    "InvalidBatchRequest",
    "InvalidConfiguration",
    "LcgRandom",
    "MetricSummary",
    "NonTerminatingConfiguration",
    "QUICK_RATE_PRESETS",
    "RunOutcome",
    "StageSummary",
    "UNBOUNDED",
    "WorstCaseOutcome",
    "aggregate_outcomes",
    "attempts_cost",
    "compute_worst_cases",
    "configuration_from_mapping",
    "configuration_to_mapping",
    "default_configuration",
    "diagnostics_passed",
    "ensure_terminating",
    "full_run_worst_case",
    "histogram",
    "is_unbounded",
    "load_configuration_presets",
    "percentile",
    "resize_stage_probabilities",
    "run_batch",
    "run_diagnostics",
    "simulate_batch",
    "simulate_full_run",
    "simulate_stages_only",
    "stages_only_worst_case",
    "suggested_stage_count",
    "summarize",
    "summarize_per_stage",
    "validate_batch_request",
    "with_uniform_rate",
]
