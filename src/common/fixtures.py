# ABOUTME: Converts JSON fixtures exported from the portal database into engine dataclasses.
# ABOUTME: Also flattens ranked recommendations into a DataFrame for display and export.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .schemas import (
    EngagementRecord,
    PinRecord,
    ProfileSnapshot,
    RankedEntry,
    TestRecord,
    Video,
    profile_from_dict,
    profile_to_dict,
)


def _timestamp(value: Any):
    if value in (None, ""):
        return None
    return pd.to_datetime(value).to_pydatetime()


def _date(value: Any):
    return pd.to_datetime(value).date()


def load_json(path: Path) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def record_from_dict(row: Mapping[str, Any]) -> TestRecord:
    return TestRecord(
        player_id=str(row.get("player_id", "")),
        test_name=str(row["test_name"]),
        test_date=_date(row["test_date"]),
        scores=dict(row.get("scores") or {}),
        id=row.get("id"),
        created_at=_timestamp(row.get("created_at")),
    )


def video_from_dict(row: Mapping[str, Any]) -> Video:
    return Video(
        id=str(row["id"]),
        title=str(row.get("title", "")),
        video_url=str(row.get("video_url", "")),
        category=row.get("category"),
        description=row.get("description"),
        thumbnail_url=row.get("thumbnail_url"),
        duration=row.get("duration"),
        channel=row.get("channel"),
        published=bool(row.get("published", True)),
        created_at=_timestamp(row.get("created_at")),
    )


def engagement_from_dict(row: Mapping[str, Any]) -> EngagementRecord:
    rating = row.get("rating_stars", row.get("rating"))
    return EngagementRecord(
        player_id=str(row.get("player_id", "")),
        video_id=str(row["video_id"]),
        watched=bool(row.get("watched", False)),
        completed=bool(row.get("completed", False)),
        rating_stars=None if rating is None else int(rating),
        watch_count=int(row.get("watch_count") or 0),
        last_watched_at=_timestamp(row.get("last_watched_at")),
    )


def pin_from_dict(row: Mapping[str, Any]) -> PinRecord:
    return PinRecord(
        player_id=str(row.get("player_id", "")),
        video_id=str(row["video_id"]),
        priority=int(row.get("priority") or 1),
        note=row.get("note"),
        created_at=_timestamp(row.get("created_at")),
    )


def snapshot_from_dict(row: Mapping[str, Any]) -> ProfileSnapshot:
    data = profile_from_dict(row["data"])
    return ProfileSnapshot(
        id=str(row["id"]),
        player_id=str(row.get("player_id", "")),
        name=str(row.get("name", "")),
        computed_at=_timestamp(row.get("computed_at")) or data.computed_at,
        data=data,
        created_at=_timestamp(row.get("created_at")),
    )


def snapshot_to_dict(snapshot: ProfileSnapshot) -> Dict[str, Any]:
    return {
        "id": snapshot.id,
        "player_id": snapshot.player_id,
        "name": snapshot.name,
        "computed_at": snapshot.computed_at.isoformat(),
        "created_at": None if snapshot.created_at is None else snapshot.created_at.isoformat(),
        "data": profile_to_dict(snapshot.data),
    }


def load_records(path: Path) -> List[TestRecord]:
    return [record_from_dict(row) for row in load_json(path)]


def load_videos(path: Path) -> List[Video]:
    return [video_from_dict(row) for row in load_json(path)]


def load_engagements(path: Optional[Path]) -> List[EngagementRecord]:
    if path is None:
        return []
    return [engagement_from_dict(row) for row in load_json(path)]


def load_pins(path: Optional[Path]) -> List[PinRecord]:
    if path is None:
        return []
    return [pin_from_dict(row) for row in load_json(path)]


def load_snapshot(path: Optional[Path]) -> Optional[ProfileSnapshot]:
    if path is None:
        return None
    return snapshot_from_dict(load_json(path))


def ranked_to_frame(entries: List[RankedEntry]) -> pd.DataFrame:
    columns = [
        "rank",
        "video_id",
        "title",
        "category",
        "score",
        "alignment_score",
        "engagement_score",
        "pinned",
        "reason",
    ]
    rows = [
        {
            "rank": e.rank,
            "video_id": e.video.id,
            "title": e.video.title,
            "category": e.video.category,
            "score": e.score,
            "alignment_score": e.alignment_score,
            "engagement_score": e.engagement_score,
            "pinned": e.pinned,
            "reason": e.reason,
        }
        for e in entries
    ]
    return pd.DataFrame(rows, columns=columns)
