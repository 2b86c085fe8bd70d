# ABOUTME: Ranks the published video catalog for one player from profile weaknesses and engagement.
# ABOUTME: Produces a fully ordered list with a score, a 1-based rank, and one reason per video.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from src.common.config import EngagementSettings, RecommendationOptions
from src.common.schemas import EngagementRecord, ProfileData, RankedEntry, Video
from src.common.test_catalog import category_families, category_label, known_categories

from .engagement import category_affinities, engagement_by_video, engagement_score

logger = logging.getLogger(__name__)

NEUTRAL_ALIGNMENT = 0.5
STRENGTH_THRESHOLD = 75.0


@dataclass(frozen=True)
class CategoryStrength:
    category: str
    strength: float  # 0-100, mean skill score of the families that train it
    weakest_skill: str


@dataclass
class _Scored:
    video: Video
    alignment: float
    engagement: float
    score: float
    reason: str


def category_strengths(profile: Optional[ProfileData]) -> Dict[str, CategoryStrength]:
    """Per video category, how strong the player already is in the skills it trains."""

    if profile is None or not profile.skills:
        return {}

    strengths: Dict[str, CategoryStrength] = {}
    for category in known_categories():
        measured = [
            (d.skill, profile.skills[d.skill].value) for d in category_families(category) if d.skill in profile.skills
        ]
        if not measured:
            continue
        weakest_skill, _ = min(measured, key=lambda item: item[1])
        strengths[category] = CategoryStrength(
            category=category,
            strength=float(np.mean([value for _, value in measured])),
            weakest_skill=weakest_skill,
        )
    return strengths


def weakest_category(strengths: Dict[str, CategoryStrength]) -> Optional[str]:
    if not strengths:
        return None
    return min(strengths.values(), key=lambda s: s.strength).category


def alignment_score(video: Video, strengths: Dict[str, CategoryStrength]) -> float:
    """Inverse of the player's strength in the video's category; neutral when unknown."""
    strength = strengths.get(video.category or "")
    if strength is None:
        return NEUTRAL_ALIGNMENT
    return round((100.0 - strength.strength) / 100.0, 6)


def _engagement_reason(record: Optional[EngagementRecord]) -> str:
    if record is None or not (record.watched or record.completed):
        return "New video you haven't watched yet"
    if record.rating_stars is not None and record.rating_stars >= 4:
        return "You rated this highly"
    if not record.completed:
        return "Pick up where you left off"
    return "Recommended training"


def _reason(
    video: Video,
    alignment_part: float,
    engagement_part: float,
    record: Optional[EngagementRecord],
    strengths: Dict[str, CategoryStrength],
    weakest: Optional[str],
) -> str:
    strength = strengths.get(video.category or "")
    if strength is not None and alignment_part >= engagement_part:
        if video.category == weakest:
            return f"Targets your weakest skill: {strength.weakest_skill}"
        if strength.strength >= STRENGTH_THRESHOLD:
            return "Advanced training for your strengths"
        return f"Helps improve your {category_label(video.category)}"
    return _engagement_reason(record)


def compute_recommendations(
    videos: Sequence[Video],
    profile: Optional[ProfileData],
    engagements: Sequence[EngagementRecord],
    options: Optional[RecommendationOptions] = None,
    engagement_settings: Optional[EngagementSettings] = None,
) -> List[RankedEntry]:
    """
    Score every published video and return them best first.

    score = test_weight * alignment + engagement_weight * engagement. Without a
    profile the ranking falls back to engagement alone. Ties keep catalog
    order, so identical inputs always produce the identical list.
    """

    options = (options or RecommendationOptions()).validate()
    published = [v for v in videos if v.published]
    if not published:
        return []

    strengths = category_strengths(profile)
    weakest = weakest_category(strengths)
    records = engagement_by_video(engagements)
    affinities = category_affinities(published, engagements)

    scored: List[_Scored] = []
    for video in published:
        record = records.get(video.id)
        engagement = engagement_score(record, affinities.get(video.category or ""), engagement_settings)
        alignment = alignment_score(video, strengths)
        if strengths:
            alignment_part = options.test_weight * alignment
            engagement_part = options.engagement_weight * engagement
        else:
            alignment_part, engagement_part = 0.0, engagement
        scored.append(
            _Scored(
                video=video,
                alignment=alignment,
                engagement=engagement,
                score=round(alignment_part + engagement_part, 6),
                reason=_reason(video, alignment_part, engagement_part, record, strengths, weakest),
            )
        )

    scored.sort(key=lambda s: s.score, reverse=True)
    ranked = [
        RankedEntry(
            video=s.video,
            score=s.score,
            rank=idx,
            reason=s.reason,
            alignment_score=s.alignment,
            engagement_score=s.engagement,
        )
        for idx, s in enumerate(scored, 1)
    ]
    logger.debug(
        f"Ranked {len(ranked)} videos (profile={'yes' if strengths else 'no'}, engagements={len(records)})"
    )

    if options.max_results:
        return ranked[: options.max_results]
    return ranked
