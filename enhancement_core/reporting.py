"""Tabular views of batch results for consumers that render tables."""

from __future__ import annotations

import pandas as pd

from .api import BatchResult
from .models import AggregateStatistics, MetricSummary

SUMMARY_METRICS: tuple[str, ...] = ("mean", "p50", "p90", "p99")


def _metric_values(summary: MetricSummary) -> list[float]:
    return [getattr(summary, name) for name in SUMMARY_METRICS]


def summary_frame(result: BatchResult) -> pd.DataFrame:
    """Return one row per run mode with attempt and cost statistics.

    Worst-case columns hold ``inf`` when the adversarial process is unbounded.
    """

    rows = []
    for mode, stats, worst in (
        ("stages_only", result.stages_only, result.stages_only_worst_case),
        ("full_run", result.full_run, result.full_run_worst_case),
    ):
        row: dict[str, object] = {"mode": mode}
        for name, value in zip(SUMMARY_METRICS, _metric_values(stats.attempts)):
            row[f"attempts_{name}"] = value
        for name, value in zip(SUMMARY_METRICS, _metric_values(stats.cost)):
            row[f"cost_{name}"] = value
        row["worst_attempts"] = worst.total_attempts
        row["worst_cost"] = worst.total_cost
        rows.append(row)
    return pd.DataFrame(rows).set_index("mode")


def per_stage_frame(stats: AggregateStatistics) -> pd.DataFrame:
    """Return per-stage attempt statistics indexed by one-based stage label."""

    return pd.DataFrame(
        [_metric_values(stage.attempts) for stage in stats.per_stage],
        index=pd.Index([stage.label for stage in stats.per_stage], name="stage"),
        columns=list(SUMMARY_METRICS),
    )


def histogram_frame(stats: AggregateStatistics) -> pd.DataFrame:
    """Return the sparse attempts histogram as ``attempts``/``runs`` columns."""

    return pd.DataFrame(
        {
            "attempts": [item.start for item in stats.histogram],
            "runs": [item.count for item in stats.histogram],
        }
    )


def format_result_tables(result: BatchResult) -> str:
    """Render the summary and per-stage tables as plain text."""

    sections = [
        "Summary",
        summary_frame(result).T.to_string(),
        "",
        "Per-stage attempts (stages only)",
        per_stage_frame(result.stages_only).to_string(),
        "",
        "Per-stage attempts (full run)",
        per_stage_frame(result.full_run).to_string(),
        "",
        f"Computed {result.trial_count} trials in {result.compute_seconds:.2f} s (seed {result.seed})",
    ]
    return "\n".join(sections)
