# ABOUTME: Parses raw test score payloads into one of three tagged variants.
# ABOUTME: Fixed fields, rounds arrays (1v1), and named move arrays (Skill Moves) each get one reducer entry point.

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from src.common.schemas import TestDefinition
from src.common.test_catalog import LAYOUT_MOVES, LAYOUT_ROUNDS


def to_finite(value: Any) -> Optional[float]:
    """Coerce a stored score to a finite float; anything else is absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
        return parsed if math.isfinite(parsed) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


@dataclass(frozen=True)
class FixedFields:
    values: Mapping[str, Optional[float]]

    def get(self, key: str) -> Optional[float]:
        return self.values.get(key)

    def series(self, prefix: str, count: int) -> List[Optional[float]]:
        return [self.values.get(f"{prefix}{i}") for i in range(1, count + 1)]


@dataclass(frozen=True)
class RoundsArray:
    rounds: Tuple[Optional[float], ...]

    def present(self) -> List[float]:
        return [r for r in self.rounds if r is not None]


@dataclass(frozen=True)
class NamedMove:
    name: str
    score: Optional[float]


@dataclass(frozen=True)
class NamedMovesArray:
    moves: Tuple[NamedMove, ...]

    def present(self) -> List[float]:
        return [m.score for m in self.moves if m.score is not None]


ScorePayload = Union[FixedFields, RoundsArray, NamedMovesArray]


def _indexed_values(scores: Mapping[str, Any], prefix: str) -> List[Tuple[int, Optional[float]]]:
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    entries = []
    for key, value in scores.items():
        match = pattern.match(str(key))
        if match:
            entries.append((int(match.group(1)), to_finite(value)))
    entries.sort(key=lambda e: e[0])
    return entries


def _field_prefix(definition: TestDefinition) -> str:
    # Variable-arity tests number their keys as "<prefix><n>".
    return definition.fields[0].key.rstrip("0123456789")


def parse_rounds(definition: TestDefinition, scores: Mapping[str, Any]) -> RoundsArray:
    raw = scores.get("rounds")
    if isinstance(raw, list):
        rounds = [to_finite(v) for v in raw[: definition.max_entries]]
    else:
        indexed = _indexed_values(scores, _field_prefix(definition))[: definition.max_entries]
        rounds = [v for _, v in indexed]
    return RoundsArray(rounds=tuple(rounds))


def parse_moves(definition: TestDefinition, scores: Mapping[str, Any]) -> NamedMovesArray:
    raw = scores.get("moves")
    moves: List[NamedMove] = []
    if isinstance(raw, list):
        for idx, item in enumerate(raw[: definition.max_entries], 1):
            if isinstance(item, Mapping):
                name = str(item.get("name") or "").strip() or f"Move {idx}"
                moves.append(NamedMove(name=name, score=to_finite(item.get("score"))))
            else:
                moves.append(NamedMove(name=f"Move {idx}", score=to_finite(item)))
    if not moves:
        indexed = _indexed_values(scores, _field_prefix(definition))[: definition.max_entries]
        moves = [NamedMove(name=f"Move {n}", score=v) for n, v in indexed]
    return NamedMovesArray(moves=tuple(moves))


def parse_scores(definition: TestDefinition, scores: Optional[Mapping[str, Any]]) -> ScorePayload:
    """
    Build the payload variant matching the definition's layout.

    Keys the definition does not declare are ignored for fixed-field tests.
    """

    scores = scores or {}
    if definition.layout == LAYOUT_ROUNDS:
        return parse_rounds(definition, scores)
    if definition.layout == LAYOUT_MOVES:
        return parse_moves(definition, scores)
    return FixedFields(values={key: to_finite(scores.get(key)) for key in definition.field_keys})
