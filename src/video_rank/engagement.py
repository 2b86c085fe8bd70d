# ABOUTME: Scores a player's viewing history for each video on the same 0-1 scale as alignment.
# ABOUTME: Favors unseen videos, de-prioritizes completed ones, and lets star ratings lift a category.

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from src.common.config import EngagementSettings
from src.common.schemas import EngagementRecord, Video

NEUTRAL_STARS = 3
MAX_STARS = 5


def _valid_stars(stars: Optional[int]) -> Optional[int]:
    if stars is None or not 1 <= stars <= MAX_STARS:
        return None
    return int(stars)


def category_affinities(videos: Iterable[Video], engagements: Iterable[EngagementRecord]) -> Dict[str, float]:
    """Mean star rating the player has given per video category."""

    category_by_video = {v.id: v.category for v in videos if v.category}
    ratings: Dict[str, List[int]] = defaultdict(list)
    for record in engagements:
        stars = _valid_stars(record.rating_stars)
        category = category_by_video.get(record.video_id)
        if stars is not None and category:
            ratings[category].append(stars)
    return {category: float(np.mean(stars)) for category, stars in ratings.items()}


def engagement_score(
    record: Optional[EngagementRecord],
    affinity: Optional[float] = None,
    settings: Optional[EngagementSettings] = None,
) -> float:
    """
    Behavioral score in [0, 1].

    Unseen videos get the full discovery score, partially watched ones sit in
    the middle, and completed ones drop to the bottom. The player's own rating
    nudges the score; unrated videos inherit the category's mean rating instead.
    """

    settings = settings or EngagementSettings()
    if record is None or not (record.watched or record.completed):
        score = settings.unwatched
    elif record.completed:
        score = settings.completed
    else:
        score = settings.in_progress

    stars = _valid_stars(record.rating_stars) if record is not None else None
    if stars is not None:
        score += (stars - NEUTRAL_STARS) * settings.rating_step
    elif affinity is not None:
        score += (affinity - NEUTRAL_STARS) / (MAX_STARS - NEUTRAL_STARS) * settings.category_affinity

    if record is not None and record.watch_count > 1:
        score -= min((record.watch_count - 1) * settings.rewatch_penalty, settings.max_rewatch_penalty)

    return round(float(np.clip(score, 0.0, 1.0)), 6)


def engagement_by_video(engagements: Iterable[EngagementRecord]) -> Mapping[str, EngagementRecord]:
    # At most one aggregate per (player, video); the last one wins if a caller sends duplicates.
    return {record.video_id: record for record in engagements}
