"""Percentiles, histograms and batch summaries over simulated outcomes."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from .data import DEFAULT_HISTOGRAM_BIN_WIDTH
from .errors import InvalidBatchRequest
from .models import (
    AggregateStatistics,
    HistogramBin,
    MetricSummary,
    RunOutcome,
    StageSummary,
)

PERCENTILE_LEVELS: tuple[float, float, float] = (0.5, 0.9, 0.99)


def percentile(sorted_samples: Sequence[float], p: float) -> float:
    """Return the ``p`` quantile of a non-decreasing sequence.

    Interpolates linearly between the two closest ranks at position
    ``(len - 1) * p``.

    Parameters
    ----------
    sorted_samples:
        Samples in non-decreasing order (list or numpy array).
    p:
        Quantile on the inclusive ``[0, 1]`` interval.

    Returns
    -------
    float
        The interpolated value, or 0 for an empty sequence.

    Raises
    ------
    ValueError
        If ``p`` lies outside ``[0, 1]``.
    """

    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Percentile must be between 0 and 1, received {p!r}")
    length = len(sorted_samples)
    if length == 0:
        return 0.0
    position = (length - 1) * p
    base = math.floor(position)
    rest = position - base
    if base + 1 < length:
        lower = float(sorted_samples[base])
        upper = float(sorted_samples[base + 1])
        return lower + rest * (upper - lower)
    return float(sorted_samples[base])


def histogram(samples: Sequence[float], bin_width: float) -> list[HistogramBin]:
    """Bucket samples into fixed-width bins, omitting empty bins.

    Each sample lands in the bin starting at ``floor(value / bin_width) * bin_width``;
    bins are returned in ascending order of their start.
    """

    if bin_width <= 0:
        raise InvalidBatchRequest(f"Histogram bin width must be positive, received {bin_width!r}")
    values = np.asarray(samples)
    if values.size == 0:
        return []
    # integer starts for integer attempts and widths
    if np.issubdtype(values.dtype, np.integer) and isinstance(bin_width, int):
        starts = np.floor_divide(values, bin_width) * bin_width
    else:
        starts = np.floor(values / bin_width) * bin_width
    bin_starts, counts = np.unique(starts, return_counts=True)
    return [
        HistogramBin(start=start.item(), count=int(count))
        for start, count in zip(bin_starts, counts)
    ]


def summarize(samples: Sequence[float]) -> MetricSummary:
    """Return the mean, p50, p90 and p99 of ``samples`` (all 0 when empty)."""

    values = np.sort(np.asarray(samples, dtype=float))
    mean = float(values.mean()) if values.size else 0.0
    p50, p90, p99 = (percentile(values, level) for level in PERCENTILE_LEVELS)
    return MetricSummary(mean=mean, p50=p50, p90=p90, p99=p99)


def summarize_per_stage(per_stage_samples: Sequence[Sequence[int]]) -> list[StageSummary]:
    """Summarise each stage's attempt counts across a batch, in stage order."""

    return [
        StageSummary(stage_index=index, attempts=summarize(samples))
        for index, samples in enumerate(per_stage_samples)
    ]


def aggregate_outcomes(
    outcomes: Sequence[RunOutcome],
    bin_width: float = DEFAULT_HISTOGRAM_BIN_WIDTH,
) -> AggregateStatistics:
    """Reduce a family of run outcomes into summary statistics.

    Parameters
    ----------
    outcomes:
        Outcomes of one run mode; all must share the same stage count.
    bin_width:
        Attempt width of each histogram bin.
    """

    attempts = [outcome.total_attempts for outcome in outcomes]
    costs = [outcome.total_cost for outcome in outcomes]
    if outcomes:
        per_stage = np.array([outcome.attempts_per_stage for outcome in outcomes], dtype=np.int64)
        per_stage_samples = [per_stage[:, index] for index in range(per_stage.shape[1])]
    else:
        per_stage_samples = []
    return AggregateStatistics(
        trial_count=len(outcomes),
        attempts=summarize(attempts),
        cost=summarize(costs),
        per_stage=summarize_per_stage(per_stage_samples),
        histogram=histogram(attempts, bin_width),
    )
