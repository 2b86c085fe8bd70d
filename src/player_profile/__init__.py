# ABOUTME: Exposes the player profile engine entrypoints.
# ABOUTME: Groups score payload parsing, metric reducers, normalization, and snapshot computation.

from .compute import compute_profile, latest_snapshot, new_snapshot
from .metrics import METRIC_SPECS, derive_raw_metrics
from .normalization import normalize_metric, population_percentile

__all__ = [
    "compute_profile",
    "latest_snapshot",
    "new_snapshot",
    "METRIC_SPECS",
    "derive_raw_metrics",
    "normalize_metric",
    "population_percentile",
]
