# ABOUTME: Loads engine tuning (ranking weights, engagement boosts, trend dead zone) from YAML.
# ABOUTME: Validates weights so callers fail fast on a misconfigured deployment.

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

CONFIG_ENV_VAR = "PLAYER_ENGINE_CONFIG"
WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class RecommendationOptions:
    """Blend of test alignment and engagement; the two weights must sum to 1.0."""

    test_weight: float = 0.7
    engagement_weight: float = 0.3
    max_results: Optional[int] = None

    def validate(self) -> "RecommendationOptions":
        for name in ("test_weight", "engagement_weight"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}.")
        total = self.test_weight + self.engagement_weight
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"test_weight + engagement_weight must equal 1.0, got {total:.4f}.")
        if self.max_results is not None and self.max_results < 1:
            raise ValueError(f"max_results must be a positive integer, got {self.max_results}.")
        return self


@dataclass(frozen=True)
class EngagementSettings:
    unwatched: float = 1.0
    in_progress: float = 0.6
    completed: float = 0.2
    rating_step: float = 0.05
    rewatch_penalty: float = 0.05
    max_rewatch_penalty: float = 0.15
    category_affinity: float = 0.1


@dataclass(frozen=True)
class ProfileSettings:
    trend_dead_zone: float = 2.0


@dataclass(frozen=True)
class EngineConfig:
    recommendations: RecommendationOptions = field(default_factory=RecommendationOptions)
    engagement: EngagementSettings = field(default_factory=EngagementSettings)
    profile: ProfileSettings = field(default_factory=ProfileSettings)


def _build(cls, section: Optional[Mapping[str, Any]]):
    section = section or {}
    allowed = {f.name for f in fields(cls)}
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unsupported {cls.__name__} keys: {', '.join(sorted(unknown))}.")
    return cls(**section)


def config_from_mapping(cfg: Optional[Mapping[str, Any]]) -> EngineConfig:
    cfg = cfg or {}
    unknown = set(cfg) - {"recommendations", "engagement", "profile"}
    if unknown:
        raise ValueError(f"Unsupported config sections: {', '.join(sorted(unknown))}.")
    options = _build(RecommendationOptions, cfg.get("recommendations")).validate()
    return EngineConfig(
        recommendations=options,
        engagement=_build(EngagementSettings, cfg.get("engagement")),
        profile=_build(ProfileSettings, cfg.get("profile")),
    )


def load_engine_config(config_path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load engine config from YAML.

    Falls back to $PLAYER_ENGINE_CONFIG, then to built-in defaults when no path
    is given at all.
    """

    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return EngineConfig()
        config_path = env_path

    with open(config_path) as f:
        cfg = yaml.safe_load(f)
    return config_from_mapping(cfg)
