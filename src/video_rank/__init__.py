# ABOUTME: Exposes the video recommendation engine entrypoints.
# ABOUTME: Groups engagement scoring, catalog ranking, and coach pin overrides.

from .engagement import engagement_score
from .pins import COACH_RECOMMENDED, apply_pins
from .ranking import compute_recommendations

__all__ = [
    "engagement_score",
    "COACH_RECOMMENDED",
    "apply_pins",
    "compute_recommendations",
]
