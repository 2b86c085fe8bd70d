# ABOUTME: Static registry of the skill tests a coach can administer.
# ABOUTME: Maps test names to field layouts, skill labels, and the video categories they train.

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .schemas import TestDefinition, TestField

LAYOUT_FIXED = "fixed"
LAYOUT_ROUNDS = "rounds"
LAYOUT_MOVES = "moves"

ONE_V_ONE_ROUNDS = 5
SKILL_MOVES_COUNT = 6
MAX_VARIABLE_ENTRIES = 50


def _numbered(prefix: str, label: str, count: int) -> List[TestField]:
    return [TestField(key=f"{prefix}{i}", label=label.format(i=i)) for i in range(1, count + 1)]


def _reaction_fields() -> List[TestField]:
    fields: List[TestField] = []
    for i in range(1, 4):
        fields.append(TestField(key=f"reaction_cue_{i}", label=f"Reaction trial {i} time"))
        fields.append(TestField(key=f"reaction_total_{i}", label=f"Reaction total trial {i} time"))
    return fields


TEST_DEFINITIONS: Tuple[TestDefinition, ...] = (
    TestDefinition(
        id="power",
        name="Power",
        skill="Power",
        layout=LAYOUT_FIXED,
        fields=tuple(
            _numbered("power_strong_", "Strong attempt {i}", 4) + _numbered("power_weak_", "Weak attempt {i}", 4)
        ),
        categories=("shooting", "core_strength"),
    ),
    TestDefinition(
        id="serve_distance",
        name="Serve Distance",
        skill="Serve Distance",
        layout=LAYOUT_FIXED,
        fields=tuple(
            _numbered("serve_strong_", "Strong attempt {i}", 4) + _numbered("serve_weak_", "Weak attempt {i}", 4)
        ),
        categories=("shooting", "passing_first_touch"),
    ),
    TestDefinition(
        id="figure_8_loops",
        name="Figure 8 Loops",
        skill="Ball Control",
        layout=LAYOUT_FIXED,
        fields=(
            TestField("figure8_strong", "Strong foot"),
            TestField("figure8_weak", "Weak foot"),
            TestField("figure8_both", "Both feet"),
        ),
        categories=("ball_mastery", "dribbling"),
    ),
    TestDefinition(
        id="passing_gates",
        name="Passing Gates",
        skill="Passing",
        layout=LAYOUT_FIXED,
        fields=(TestField("passing_strong", "Strong foot"), TestField("passing_weak", "Weak foot")),
        categories=("passing_first_touch", "first_touch"),
    ),
    TestDefinition(
        id="one_v_one",
        name="1v1",
        skill="1v1",
        layout=LAYOUT_ROUNDS,
        fields=tuple(_numbered("onevone_round_", "Round {i} score", ONE_V_ONE_ROUNDS)),
        categories=("dribbling", "defending_shape"),
        max_entries=MAX_VARIABLE_ENTRIES,
    ),
    TestDefinition(
        id="juggling",
        name="Juggling",
        skill="Juggling",
        layout=LAYOUT_FIXED,
        fields=tuple(_numbered("juggling_", "Attempt {i} touches", 4)),
        categories=("ball_mastery", "first_touch"),
    ),
    TestDefinition(
        id="skill_moves",
        name="Skill Moves",
        skill="Skill Moves",
        layout=LAYOUT_MOVES,
        fields=tuple(_numbered("skillmove_", "Move {i} rating", SKILL_MOVES_COUNT)),
        categories=("dribbling", "ball_mastery"),
        max_entries=MAX_VARIABLE_ENTRIES,
    ),
    TestDefinition(
        id="agility_5_10_5",
        name="5-10-5 Agility",
        skill="Agility",
        layout=LAYOUT_FIXED,
        fields=tuple(_numbered("agility_", "Trial {i} time", 3)),
        categories=("speed_agility",),
    ),
    TestDefinition(
        id="reaction_sprint",
        name="Reaction Sprint",
        skill="Reaction",
        layout=LAYOUT_FIXED,
        fields=tuple(_reaction_fields()),
        categories=("speed_agility",),
    ),
    TestDefinition(
        id="single_leg_hop",
        name="Single-leg Hop",
        skill="Single-leg Power",
        layout=LAYOUT_FIXED,
        fields=tuple(
            _numbered("hop_left_", "Left attempt {i} distance", 3)
            + _numbered("hop_right_", "Right attempt {i} distance", 3)
        ),
        categories=("speed_agility", "core_strength"),
    ),
    TestDefinition(
        id="double_leg_jumps",
        name="Double-leg Jumps",
        skill="Endurance",
        layout=LAYOUT_FIXED,
        fields=(
            TestField("jumps_10s", "Count at 10 seconds"),
            TestField("jumps_20s", "Count at 20 seconds"),
            TestField("jumps_30s", "Count at 30 seconds"),
        ),
        categories=("speed_agility", "core_strength"),
    ),
    TestDefinition(
        id="ankle_dorsiflexion",
        name="Ankle Dorsiflexion",
        skill="Mobility",
        layout=LAYOUT_FIXED,
        fields=(TestField("ankle_left", "Left distance"), TestField("ankle_right", "Right distance")),
        categories=("stretching", "speed_agility"),
    ),
    TestDefinition(
        id="core_plank",
        name="Core Plank",
        skill="Core Strength",
        layout=LAYOUT_FIXED,
        fields=(TestField("plank_time", "Hold time"), TestField("plank_form", "Form flag")),
        categories=("core_strength",),
    ),
)

_BY_NAME: Dict[str, TestDefinition] = {d.name: d for d in TEST_DEFINITIONS}
_BY_ID: Dict[str, TestDefinition] = {d.id: d for d in TEST_DEFINITIONS}


def get_definition(test_name: str) -> Optional[TestDefinition]:
    return _BY_NAME.get(test_name)


def get_definition_by_id(test_id: str) -> Optional[TestDefinition]:
    return _BY_ID.get(test_id)


def category_families(category: Optional[str]) -> List[TestDefinition]:
    """Test definitions whose skill a video in `category` trains."""
    if not category:
        return []
    return [d for d in TEST_DEFINITIONS if category in d.categories]


def known_categories() -> List[str]:
    seen: List[str] = []
    for definition in TEST_DEFINITIONS:
        for category in definition.categories:
            if category not in seen:
                seen.append(category)
    return seen


def category_label(category: Optional[str]) -> str:
    if not category:
        return "general training"
    return category.replace("_", " ")
