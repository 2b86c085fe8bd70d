# ABOUTME: Defines canonical data structures shared by profiling and recommendation engines.
# ABOUTME: Centralizes test, profile snapshot, video, engagement, and pin schema definitions.

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Tuple

IMPROVING = "improving"
DECLINING = "declining"
FLAT = "flat"


@dataclass(frozen=True)
class TestField:
    __test__ = False

    key: str
    label: str
    type: str = "number"


@dataclass(frozen=True)
class TestDefinition:
    """Static description of one skill test and the score keys it accepts."""

    __test__ = False

    id: str
    name: str
    skill: str
    layout: str
    fields: Tuple[TestField, ...]
    categories: Tuple[str, ...] = ()
    max_entries: int = 50

    @property
    def field_keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields)


@dataclass(frozen=True)
class TestRecord:
    """One administered test. Never mutated; corrections are new records."""

    __test__ = False

    player_id: str
    test_name: str
    test_date: date
    scores: Mapping[str, Any] = field(default_factory=dict)
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Trend:
    delta: float
    direction: str


@dataclass(frozen=True)
class MetricScore:
    """Normalized 0-100 score for a metric or skill; higher is always better."""

    value: float
    unit: str
    test_name: str
    trend: Optional[Trend] = None
    percentile: Optional[float] = None
    raw: Optional[float] = None


@dataclass(frozen=True)
class TestProgression:
    """How a single test family moved from its first to its latest record."""

    __test__ = False

    test_name: str
    test_count: int
    first_test_date: date
    latest_test_date: date
    previous_test_date: Optional[date]
    date_range_days: int
    since_first: Mapping[str, float]
    since_previous: Optional[Mapping[str, float]]
    timeline: Tuple[Tuple[date, Mapping[str, float]], ...] = ()


@dataclass(frozen=True)
class ProfileData:
    computed_at: datetime
    metrics: Mapping[str, MetricScore] = field(default_factory=dict)
    skills: Mapping[str, MetricScore] = field(default_factory=dict)
    composite: Optional[float] = None
    raw_metrics: Mapping[str, float] = field(default_factory=dict)
    progressions: Mapping[str, TestProgression] = field(default_factory=dict)
    latest_tests: Mapping[str, date] = field(default_factory=dict)
    tests_total: int = 0
    previous_profile_id: Optional[str] = None
    version: int = 1


@dataclass(frozen=True)
class ProfileSnapshot:
    """Immutable stored profile; each recompute creates a new one."""

    id: str
    player_id: str
    name: str
    computed_at: datetime
    data: ProfileData
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Video:
    id: str
    title: str
    video_url: str
    category: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    channel: Optional[str] = None
    published: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EngagementRecord:
    """Per (player, video) aggregate of viewing behaviour."""

    player_id: str
    video_id: str
    watched: bool = False
    completed: bool = False
    rating_stars: Optional[int] = None
    watch_count: int = 0
    last_watched_at: Optional[datetime] = None


@dataclass(frozen=True)
class PinRecord:
    """Coach override forcing a video to the top of a player's list."""

    player_id: str
    video_id: str
    priority: int = 1
    note: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class RankedEntry:
    video: Video
    score: float
    rank: int
    reason: str
    alignment_score: float = 0.5
    engagement_score: float = 1.0
    pinned: bool = False


def profile_to_dict(data: ProfileData) -> Dict[str, Any]:
    """Render ProfileData as JSON-safe primitives for the caller to persist."""

    def _metric(m: MetricScore) -> Dict[str, Any]:
        return {
            "value": m.value,
            "unit": m.unit,
            "test_name": m.test_name,
            "trend": None if m.trend is None else {"delta": m.trend.delta, "direction": m.trend.direction},
            "percentile": m.percentile,
            "raw": m.raw,
        }

    def _progression(p: TestProgression) -> Dict[str, Any]:
        return {
            "test_name": p.test_name,
            "test_count": p.test_count,
            "first_test_date": p.first_test_date.isoformat(),
            "latest_test_date": p.latest_test_date.isoformat(),
            "previous_test_date": None if p.previous_test_date is None else p.previous_test_date.isoformat(),
            "date_range_days": p.date_range_days,
            "since_first": dict(p.since_first),
            "since_previous": None if p.since_previous is None else dict(p.since_previous),
            "timeline": [{"test_date": d.isoformat(), "metrics": dict(m)} for d, m in p.timeline],
        }

    return {
        "version": data.version,
        "computed_at": data.computed_at.isoformat(),
        "metrics": {k: _metric(v) for k, v in data.metrics.items()},
        "skills": {k: _metric(v) for k, v in data.skills.items()},
        "composite": data.composite,
        "raw_metrics": dict(data.raw_metrics),
        "progressions": {k: _progression(v) for k, v in data.progressions.items()},
        "latest_tests": {k: v.isoformat() for k, v in data.latest_tests.items()},
        "tests_total": data.tests_total,
        "previous_profile_id": data.previous_profile_id,
    }


def profile_from_dict(payload: Mapping[str, Any]) -> ProfileData:
    """Inverse of profile_to_dict."""

    def _metric(raw: Mapping[str, Any]) -> MetricScore:
        trend = raw.get("trend")
        return MetricScore(
            value=float(raw["value"]),
            unit=str(raw.get("unit", "")),
            test_name=str(raw.get("test_name", "")),
            trend=None if not trend else Trend(delta=float(trend["delta"]), direction=str(trend["direction"])),
            percentile=raw.get("percentile"),
            raw=raw.get("raw"),
        )

    def _progression(raw: Mapping[str, Any]) -> TestProgression:
        previous = raw.get("previous_test_date")
        since_previous = raw.get("since_previous")
        return TestProgression(
            test_name=raw["test_name"],
            test_count=int(raw["test_count"]),
            first_test_date=date.fromisoformat(raw["first_test_date"]),
            latest_test_date=date.fromisoformat(raw["latest_test_date"]),
            previous_test_date=None if previous is None else date.fromisoformat(previous),
            date_range_days=int(raw["date_range_days"]),
            since_first=dict(raw.get("since_first") or {}),
            since_previous=None if since_previous is None else dict(since_previous),
            timeline=tuple(
                (date.fromisoformat(point["test_date"]), dict(point["metrics"]))
                for point in raw.get("timeline") or []
            ),
        )

    return ProfileData(
        computed_at=datetime.fromisoformat(payload["computed_at"]),
        metrics={k: _metric(v) for k, v in (payload.get("metrics") or {}).items()},
        skills={k: _metric(v) for k, v in (payload.get("skills") or {}).items()},
        composite=payload.get("composite"),
        raw_metrics={k: float(v) for k, v in (payload.get("raw_metrics") or {}).items()},
        progressions={k: _progression(v) for k, v in (payload.get("progressions") or {}).items()},
        latest_tests={k: date.fromisoformat(v) for k, v in (payload.get("latest_tests") or {}).items()},
        tests_total=int(payload.get("tests_total", 0)),
        previous_profile_id=payload.get("previous_profile_id"),
        version=int(payload.get("version", 1)),
    )

