# ABOUTME: Tests engagement scoring from viewing history and star ratings.
# ABOUTME: Ensures unseen videos lead, completed ones trail, and scores stay within [0, 1].

import pytest

from src.common.config import EngagementSettings
from src.common.schemas import EngagementRecord, Video
from src.video_rank.engagement import category_affinities, engagement_by_video, engagement_score


def _record(video_id="v1", **kwargs):
    return EngagementRecord(player_id="p1", video_id=video_id, **kwargs)


def test_watch_state_orders_scores():
    unseen = engagement_score(None)
    in_progress = engagement_score(_record(watched=True))
    completed = engagement_score(_record(watched=True, completed=True))
    assert (unseen, in_progress, completed) == (1.0, 0.6, 0.2)


def test_rating_and_rewatch_adjustments():
    assert engagement_score(_record(watched=True, completed=True, rating_stars=5)) == pytest.approx(0.3)
    assert engagement_score(_record(watched=True, watch_count=3)) == pytest.approx(0.5)
    assert engagement_score(_record(watched=True, completed=True, watch_count=10)) == pytest.approx(0.05)
    assert engagement_score(_record(watched=True, completed=True, watch_count=10, rating_stars=1)) == 0.0


def test_out_of_range_rating_is_ignored():
    assert engagement_score(_record(watched=True, rating_stars=9)) == 0.6


def test_category_affinity_applies_to_unrated_videos():
    assert engagement_score(_record(watched=True), affinity=1.0) == pytest.approx(0.5)
    assert engagement_score(None, affinity=5.0) == 1.0
    # The player's own rating wins over the category mean.
    assert engagement_score(_record(watched=True, rating_stars=3), affinity=5.0) == pytest.approx(0.6)


def test_category_affinities_average_ratings_per_category():
    videos = [
        Video("v1", "Cone weaves", "https://example.com/1", category="dribbling"),
        Video("v2", "Drop step", "https://example.com/2", category="dribbling"),
        Video("v3", "Plank ladder", "https://example.com/3", category="core_strength"),
    ]
    engagements = [_record("v1", rating_stars=5), _record("v2", rating_stars=2), _record("v3")]
    assert category_affinities(videos, engagements) == {"dribbling": 3.5}


def test_custom_settings_are_respected():
    settings = EngagementSettings(unwatched=0.9, completed=0.1)
    assert engagement_score(None, settings=settings) == 0.9
    assert engagement_score(_record(completed=True), settings=settings) == 0.1


def test_engagement_by_video_indexes_records():
    indexed = engagement_by_video([_record("v1"), _record("v2", watched=True)])
    assert set(indexed) == {"v1", "v2"}
    assert indexed["v2"].watched
