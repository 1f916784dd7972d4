"""Fixed-input regression checks for the simulator and calculators."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .aggregate import histogram
from .models import Configuration
from .rng import LcgRandom
from .simulation import simulate_batch, simulate_full_run, simulate_stages_only
from .worst_case import full_run_worst_case, stages_only_worst_case

logger = logging.getLogger(__name__)

DIAGNOSTIC_COST_PER_ATTEMPT = 100


@dataclass
class DiagnosticResult:
    """Outcome of one self-test."""

    name: str
    passed: bool
    detail: str


def check_certain_success() -> DiagnosticResult:
    """Every probability at 1: three stages take three attempts, the full run four."""

    config = Configuration(
        stage_count=3,
        stage_probabilities=(1.0, 1.0, 1.0),
        final_probability=1.0,
        cost_per_attempt=DIAGNOSTIC_COST_PER_ATTEMPT,
        stage_pity_threshold=6,
        final_pity_threshold=6,
    )
    rng = LcgRandom(1)
    stages = simulate_stages_only(config, rng)
    full = simulate_full_run(config, rng)
    per_stage_ok = stages.attempts_per_stage == (1, 1, 1) and full.attempts_per_stage == (1, 1, 1)
    return DiagnosticResult(
        name="p=1 deterministic (3 stages)",
        passed=stages.total_attempts == 3 and full.total_attempts == 4 and per_stage_ok,
        detail=(
            f"stages={stages.total_attempts} (exp 3), full={full.total_attempts} (exp 4), "
            f"per_stage_ok={per_stage_ok}"
        ),
    )


def check_zero_probability_matches_worst_case() -> DiagnosticResult:
    """With probability 0 only pity succeeds, so a run must equal the worst case."""

    config = Configuration(
        stage_count=2,
        stage_probabilities=(0.0, 0.0),
        final_probability=0.0,
        cost_per_attempt=DIAGNOSTIC_COST_PER_ATTEMPT,
        stage_pity_threshold=2,
        final_pity_threshold=2,
    )
    full = simulate_full_run(config, LcgRandom(42))
    worst = full_run_worst_case(config)
    return DiagnosticResult(
        name="p=0 equals worst case (2 stages)",
        passed=full.total_attempts == worst.total_attempts,
        detail=f"full={full.total_attempts}, worst={worst.total_attempts}",
    )


def check_reset_is_unbounded() -> DiagnosticResult:
    """Resetting all stage pity on any failure makes both worst cases unbounded."""

    config = Configuration(
        stage_count=3,
        stage_probabilities=(0.5, 0.5, 0.5),
        final_probability=0.5,
        cost_per_attempt=DIAGNOSTIC_COST_PER_ATTEMPT,
        stage_pity_threshold=3,
        final_pity_threshold=3,
        reset_all_stage_pity_on_any_failure=True,
    )
    stages = stages_only_worst_case(config)
    full = full_run_worst_case(config)
    return DiagnosticResult(
        name="reset on any failure is unbounded",
        passed=stages.is_unbounded and full.is_unbounded,
        detail=f"stages={stages.total_attempts}, full={full.total_attempts}",
    )


def check_cost_identity() -> DiagnosticResult:
    """Every outcome's cost equals its attempts times the per-attempt cost."""

    config = Configuration(
        stage_count=4,
        stage_probabilities=(0.3, 0.25, 0.2, 0.15),
        final_probability=0.2,
        cost_per_attempt=DIAGNOSTIC_COST_PER_ATTEMPT,
        stage_pity_threshold=4,
        final_pity_threshold=5,
    )
    stages_outcomes, full_outcomes = simulate_batch(config, trial_count=50, seed=7)
    mismatches = sum(
        1
        for outcome in (*stages_outcomes, *full_outcomes)
        if outcome.total_cost != outcome.total_attempts * config.cost_per_attempt
    )
    return DiagnosticResult(
        name="cost equals attempts x cost per attempt",
        passed=mismatches == 0,
        detail=f"mismatches={mismatches} of {len(stages_outcomes) + len(full_outcomes)}",
    )


def check_histogram_bins() -> DiagnosticResult:
    """Attempts [3, 3, 7, 12] in bins of 5 land at 0, 5 and 10."""

    bins = [(item.start, item.count) for item in histogram([3, 3, 7, 12], 5)]
    return DiagnosticResult(
        name="histogram bins (width 5)",
        passed=bins == [(0, 2), (5, 1), (10, 1)],
        detail=f"bins={bins}",
    )


DIAGNOSTIC_CHECKS: tuple[Callable[[], DiagnosticResult], ...] = (
    check_certain_success,
    check_zero_probability_matches_worst_case,
    check_reset_is_unbounded,
    check_cost_identity,
    check_histogram_bins,
)


def run_diagnostics() -> list[DiagnosticResult]:
    """Run every self-test and return their results in a fixed order."""

    results: list[DiagnosticResult] = []
    for check in DIAGNOSTIC_CHECKS:
        result = check()
        logger.debug("%s: %s (%s)", result.name, "pass" if result.passed else "FAIL", result.detail)
        if not result.passed:
            logger.warning("Diagnostic failed: %s (%s)", result.name, result.detail)
        results.append(result)
    return results


def diagnostics_passed(results: Sequence[DiagnosticResult]) -> bool:
    """Return True when every supplied diagnostic passed."""

    return all(result.passed for result in results)
