# ABOUTME: Makes the shared common package importable across both engines.
# ABOUTME: Re-exports schema types, the test catalog lookup, and config loading for convenience.

from .config import EngineConfig, RecommendationOptions, load_engine_config
from .schemas import (
    EngagementRecord,
    PinRecord,
    ProfileData,
    ProfileSnapshot,
    RankedEntry,
    TestRecord,
    Video,
)
from .test_catalog import TEST_DEFINITIONS, get_definition

__all__ = [
    "EngineConfig",
    "RecommendationOptions",
    "load_engine_config",
    "EngagementRecord",
    "PinRecord",
    "ProfileData",
    "ProfileSnapshot",
    "RankedEntry",
    "TestRecord",
    "Video",
    "TEST_DEFINITIONS",
    "get_definition",
]
