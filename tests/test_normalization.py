# ABOUTME: Tests benchmark-anchored normalization and population percentiles.
# ABOUTME: Verifies direction handling, clipping, and failure on degenerate benchmarks.

import math

import pytest

from src.player_profile.metrics import MetricSpec
from src.player_profile.normalization import normalize_metric, population_percentile

HIGHER = MetricSpec("juggle_best", "Juggling", "touches", 30, 50)
LOWER = MetricSpec("agility_5_10_5_best_time", "5-10-5 Agility", "s", 8.5, 7.5)
ASYMMETRY = MetricSpec("shot_power_asymmetry_pct", "Power", "%", 20, 10, magnitude=True)


def test_benchmarks_anchor_fifty_and_seventy_five():
    assert normalize_metric(HIGHER, 30) == 50.0
    assert normalize_metric(HIGHER, 50) == 75.0
    assert normalize_metric(LOWER, 8.5) == 50.0
    assert normalize_metric(LOWER, 7.5) == 75.0


def test_scores_are_monotone_in_the_better_direction():
    juggles = [normalize_metric(HIGHER, v) for v in (10, 25, 40, 60)]
    assert juggles == sorted(juggles)
    times = [normalize_metric(LOWER, v) for v in (9.5, 8.8, 8.0, 7.2)]
    assert times == sorted(times)


def test_scores_are_clipped_to_scale():
    assert normalize_metric(HIGHER, 1000) == 100.0
    assert normalize_metric(HIGHER, -20) == 0.0
    assert normalize_metric(LOWER, 20) == 0.0


def test_asymmetry_uses_magnitude():
    assert normalize_metric(ASYMMETRY, -10) == normalize_metric(ASYMMETRY, 10) == 75.0


def test_collapsed_range_and_non_finite_raise():
    with pytest.raises(ValueError):
        normalize_metric(MetricSpec("x", "Juggling", "touches", 10, 10), 12)
    with pytest.raises(ValueError):
        normalize_metric(HIGHER, math.inf)


def test_population_percentile_counts_ties_half():
    assert population_percentile(HIGHER, 30, [10, 20, 30, 40]) == 62.5
    assert population_percentile(LOWER, 8.55, [8.0, 9.0, 8.55, 10.0]) == 62.5
    assert population_percentile(HIGHER, 30, None) is None
    assert population_percentile(HIGHER, 30, [None, math.nan]) is None
