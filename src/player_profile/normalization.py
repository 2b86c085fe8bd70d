# ABOUTME: Maps raw metric values onto a fixed 0-100 scale anchored on p50/p75 benchmarks.
# ABOUTME: Optionally ranks a raw value against a population to report a percentile.

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from .metrics import MetricSpec

SCORE_FLOOR = 0.0
SCORE_CEILING = 100.0


def normalize_metric(spec: MetricSpec, raw: float) -> float:
    """
    Linear map through the benchmarks: p50 -> 50, p75 -> 75, clipped to [0, 100].

    Lower-is-better metrics carry p75 < p50, so the same formula inverts them.
    Raises ValueError when the benchmark range collapses or the result is not finite.
    """

    span = spec.p75 - spec.p50
    if span == 0:
        raise ValueError(f"benchmark range collapsed (p50 == p75 == {spec.p50})")
    value = abs(raw) if spec.magnitude else raw
    with np.errstate(all="ignore"):
        score = 50.0 + 25.0 * (np.float64(value) - spec.p50) / span
    if not np.isfinite(score):
        raise ValueError(f"non-finite score from raw value {raw!r}")
    return round(float(np.clip(score, SCORE_FLOOR, SCORE_CEILING)), 2)


def population_percentile(spec: MetricSpec, raw: float, population: Optional[Iterable[float]]) -> Optional[float]:
    """Share of the population this raw value beats, ties counted half."""

    if population is None:
        return None
    values = np.asarray([v for v in population if v is not None], dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return None

    value = abs(raw) if spec.magnitude else raw
    if spec.magnitude:
        values = np.abs(values)
    if spec.higher_is_better:
        beaten = np.count_nonzero(values < value)
    else:
        beaten = np.count_nonzero(values > value)
    ties = np.count_nonzero(values == value)
    return round(100.0 * (beaten + 0.5 * ties) / values.size, 1)
