# ABOUTME: Turns a player's chronological test records into an immutable profile snapshot.
# ABOUTME: Normalizes per-metric scores, rolls them up into skills and a composite, and tracks trends.

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from src.common.config import ProfileSettings
from src.common.schemas import (
    DECLINING,
    FLAT,
    IMPROVING,
    MetricScore,
    ProfileData,
    ProfileSnapshot,
    TestDefinition,
    TestProgression,
    TestRecord,
    Trend,
)
from src.common.test_catalog import get_definition

from .metrics import derive_raw_metrics, specs_for_test
from .normalization import normalize_metric, population_percentile

logger = logging.getLogger(__name__)

SKILL_UNIT = "score"
DEFAULT_SNAPSHOT_NAME = "Recompute stats"


def order_records(records: Sequence[TestRecord]) -> Dict[str, List[TestRecord]]:
    """
    Group records by test name, each group oldest first.

    Ties on test_date fall back to created_at, then to input position.
    """

    if not records:
        return {}

    frame = pd.DataFrame(
        {
            "position": range(len(records)),
            "test_name": [r.test_name for r in records],
            "test_date": pd.to_datetime([r.test_date for r in records]),
            "created_at": pd.to_datetime([r.created_at for r in records], utc=True),
        }
    )
    frame = frame.sort_values(["test_name", "test_date", "created_at", "position"], kind="mergesort", na_position="first")
    grouped: Dict[str, List[TestRecord]] = {}
    for test_name, group in frame.groupby("test_name", sort=True):
        grouped[str(test_name)] = [records[i] for i in group["position"].tolist()]
    return grouped


def classify_trend(delta: float, dead_zone: float) -> str:
    if delta > dead_zone:
        return IMPROVING
    if delta < -dead_zone:
        return DECLINING
    return FLAT


def _with_trend(score: MetricScore, previous: Optional[Mapping[str, MetricScore]], key: str, dead_zone: float) -> MetricScore:
    if not previous or key not in previous:
        return score
    delta = round(score.value - previous[key].value, 2)
    return replace(score, trend=Trend(delta=delta, direction=classify_trend(delta, dead_zone)))


def _score_family(
    definition: TestDefinition,
    raw: Mapping[str, float],
    population: Optional[Mapping[str, Iterable[float]]],
) -> Dict[str, MetricScore]:
    scored: Dict[str, MetricScore] = {}
    for spec in specs_for_test(definition.name):
        if spec.key not in raw:
            continue
        try:
            value = normalize_metric(spec, raw[spec.key])
            percentile = population_percentile(spec, raw[spec.key], (population or {}).get(spec.key))
        except (ValueError, ArithmeticError) as e:
            logger.debug(f"{spec.key} unavailable for {definition.name}: {e}")
            continue
        scored[spec.key] = MetricScore(
            value=value,
            unit=spec.unit,
            test_name=definition.name,
            percentile=percentile,
            raw=round(raw[spec.key], 4),
        )
    return scored


def _changes(current: Mapping[str, float], baseline: Mapping[str, float]) -> Dict[str, float]:
    return {key: round(value - baseline[key], 4) for key, value in current.items() if key in baseline}


def _progression(definition: TestDefinition, ordered: Sequence[TestRecord]) -> TestProgression:
    timeline = [(r.test_date, derive_raw_metrics(definition, r.scores)) for r in ordered]
    first, latest = timeline[0], timeline[-1]
    previous = timeline[-2] if len(timeline) > 1 else None
    return TestProgression(
        test_name=definition.name,
        test_count=len(ordered),
        first_test_date=first[0],
        latest_test_date=latest[0],
        previous_test_date=None if previous is None else previous[0],
        date_range_days=(latest[0] - first[0]).days,
        since_first=_changes(latest[1], first[1]),
        since_previous=None if previous is None else _changes(latest[1], previous[1]),
        timeline=tuple(timeline),
    )


def compute_profile(
    records: Sequence[TestRecord],
    previous: Optional[ProfileSnapshot],
    now: datetime,
    population: Optional[Mapping[str, Iterable[float]]] = None,
    settings: Optional[ProfileSettings] = None,
) -> ProfileData:
    """
    Compute a new profile from every test record on file for one player.

    The most recent record per test family is the current measurement. Families
    without records contribute nothing, so a missing test never reads as a
    poor score. An empty record list yields an empty profile, not an error.
    """

    settings = settings or ProfileSettings()
    prev_data = previous.data if previous is not None else None

    metrics: Dict[str, MetricScore] = {}
    skills: Dict[str, MetricScore] = {}
    raw_metrics: Dict[str, float] = {}
    progressions: Dict[str, TestProgression] = {}
    latest_tests = {}

    for test_name, ordered in order_records(records).items():
        definition = get_definition(test_name)
        if definition is None:
            logger.debug(f"Skipping {len(ordered)} record(s) for unknown test '{test_name}'")
            continue

        latest = ordered[-1]
        latest_tests[test_name] = latest.test_date
        raw = derive_raw_metrics(definition, latest.scores)
        raw_metrics.update(raw)
        progressions[test_name] = _progression(definition, ordered)

        family = _score_family(definition, raw, population)
        for key, score in family.items():
            metrics[key] = _with_trend(score, prev_data.metrics if prev_data else None, key, settings.trend_dead_zone)

        rollup = [family[spec.key].value for spec in specs_for_test(test_name) if spec.rollup and spec.key in family]
        if rollup:
            skill_value = round(float(np.mean(rollup)), 2)
            skill = MetricScore(value=skill_value, unit=SKILL_UNIT, test_name=test_name)
            skills[definition.skill] = _with_trend(
                skill, prev_data.skills if prev_data else None, definition.skill, settings.trend_dead_zone
            )

    composite = round(float(np.mean([s.value for s in skills.values()])), 2) if skills else None

    return ProfileData(
        computed_at=now,
        metrics=metrics,
        skills=skills,
        composite=composite,
        raw_metrics=raw_metrics,
        progressions=progressions,
        latest_tests=latest_tests,
        tests_total=len(records),
        previous_profile_id=previous.id if previous is not None else None,
    )


def new_snapshot(
    player_id: str,
    data: ProfileData,
    name: str = DEFAULT_SNAPSHOT_NAME,
    snapshot_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> ProfileSnapshot:
    """Wrap computed data in a fresh snapshot; snapshots are never updated in place."""
    return ProfileSnapshot(
        id=snapshot_id or str(uuid.uuid4()),
        player_id=player_id,
        name=(name or "").strip() or DEFAULT_SNAPSHOT_NAME,
        computed_at=data.computed_at,
        data=data,
        created_at=created_at or data.computed_at,
    )


def latest_snapshot(snapshots: Iterable[ProfileSnapshot]) -> Optional[ProfileSnapshot]:
    """The current profile: latest computed_at, ties broken by created_at."""
    candidates = list(snapshots)
    if not candidates:
        return None
    return max(candidates, key=lambda s: (s.computed_at, s.created_at or s.computed_at))
