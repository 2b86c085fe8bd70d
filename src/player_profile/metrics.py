# ABOUTME: Reduces a parsed score payload into raw derived metrics for one test family.
# ABOUTME: Also declares which metrics are benchmarked, their units, and p50/p75 anchors.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from src.common.schemas import TestDefinition

from .payloads import FixedFields, NamedMovesArray, RoundsArray, ScorePayload, parse_scores

INCH_TO_CM = 2.54


@dataclass(frozen=True)
class MetricSpec:
    """
    Benchmark anchors for a normalized metric (p75 < p50 means lower is better).

    Only rollup metrics feed the skill score; the rest are per-metric diagnostics.
    """

    key: str
    test_name: str
    unit: str
    p50: float
    p75: float
    magnitude: bool = False
    rollup: bool = True

    @property
    def higher_is_better(self) -> bool:
        return self.p75 > self.p50


# Benchmarks are population estimates for youth players, not computed from data.
METRIC_SPECS: Sequence[MetricSpec] = (
    MetricSpec("shot_power_strong_avg", "Power", "mph", 45, 55),
    MetricSpec("shot_power_weak_avg", "Power", "mph", 35, 45),
    MetricSpec("shot_power_asymmetry_pct", "Power", "%", 20, 10, magnitude=True, rollup=False),
    MetricSpec("serve_distance_strong_avg", "Serve Distance", "yd", 40, 50),
    MetricSpec("serve_distance_weak_avg", "Serve Distance", "yd", 30, 40),
    MetricSpec("figure8_loops_strong", "Figure 8 Loops", "loops", 15, 20),
    MetricSpec("figure8_loops_weak", "Figure 8 Loops", "loops", 12, 17),
    MetricSpec("figure8_asymmetry_pct", "Figure 8 Loops", "%", 15, 8, magnitude=True, rollup=False),
    MetricSpec("passing_gates_total_hits", "Passing Gates", "hits", 20, 28),
    MetricSpec("passing_gates_asymmetry_pct", "Passing Gates", "%", 20, 10, magnitude=True, rollup=False),
    MetricSpec("one_v_one_avg_score", "1v1", "pts", 1.5, 2.0),
    MetricSpec("one_v_one_consistency_range", "1v1", "pts", 2.0, 1.5, rollup=False),
    MetricSpec("juggle_best", "Juggling", "touches", 30, 50),
    MetricSpec("juggle_avg_all", "Juggling", "touches", 20, 35),
    MetricSpec("skill_moves_avg_rating", "Skill Moves", "rating", 3.0, 4.0),
    MetricSpec("skill_moves_consistency_range", "Skill Moves", "rating", 2.0, 1.5, rollup=False),
    MetricSpec("agility_5_10_5_best_time", "5-10-5 Agility", "s", 8.5, 7.5),
    MetricSpec("agility_5_10_5_avg_time", "5-10-5 Agility", "s", 9.0, 8.0),
    MetricSpec("reaction_5m_reaction_time_avg", "Reaction Sprint", "s", 0.5, 0.4),
    MetricSpec("reaction_5m_total_time_avg", "Reaction Sprint", "s", 3.5, 3.0),
    MetricSpec("single_leg_hop_left", "Single-leg Hop", "cm", 150, 180),
    MetricSpec("single_leg_hop_right", "Single-leg Hop", "cm", 150, 180),
    MetricSpec("single_leg_hop_asymmetry_pct", "Single-leg Hop", "%", 10, 5, magnitude=True, rollup=False),
    MetricSpec("double_leg_jumps_total_reps", "Double-leg Jumps", "reps", 50, 65),
    MetricSpec("double_leg_jumps_dropoff_pct", "Double-leg Jumps", "%", 30, 20, rollup=False),
    MetricSpec("ankle_dorsiflex_avg_cm", "Ankle Dorsiflexion", "cm", 10, 12),
    MetricSpec("ankle_dorsiflex_asymmetry_pct", "Ankle Dorsiflexion", "%", 15, 8, magnitude=True, rollup=False),
    MetricSpec("core_plank_hold_sec", "Core Plank", "s", 30, 45),
    MetricSpec("core_plank_hold_sec_if_good_form", "Core Plank", "s", 30, 45),
)


def specs_for_test(test_name: str) -> List[MetricSpec]:
    return [spec for spec in METRIC_SPECS if spec.test_name == test_name]


def _present(values: Sequence[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]


def _mean(values: Sequence[Optional[float]]) -> Optional[float]:
    nums = _present(values)
    return sum(nums) / len(nums) if nums else None


def _max(values: Sequence[Optional[float]]) -> Optional[float]:
    nums = _present(values)
    return max(nums) if nums else None


def _min(values: Sequence[Optional[float]]) -> Optional[float]:
    nums = _present(values)
    return min(nums) if nums else None


def _sum_complete(values: Sequence[Optional[float]]) -> Optional[float]:
    # A total over a partial set of attempts would read as a poor score.
    if not values or any(v is None for v in values):
        return None
    return float(sum(values))


def _spread(values: Sequence[Optional[float]]) -> Optional[float]:
    hi, lo = _max(values), _min(values)
    return None if hi is None or lo is None else hi - lo


def _ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def _asymmetry_pct(strong: Optional[float], weak: Optional[float]) -> Optional[float]:
    if strong is None or weak is None or strong == 0:
        return None
    return (strong - weak) / strong * 100


def _side_asymmetry_pct(left: Optional[float], right: Optional[float]) -> Optional[float]:
    if left is None or right is None:
        return None
    top = max(left, right)
    if top == 0:
        return None
    return abs(left - right) / top * 100


def _diff(a: Optional[float], b: Optional[float]) -> Optional[float]:
    return None if a is None or b is None else a - b


def _two_footed(prefix: str, payload: FixedFields, field_prefix: str) -> Dict[str, Optional[float]]:
    strong = payload.series(f"{field_prefix}_strong_", 4)
    weak = payload.series(f"{field_prefix}_weak_", 4)
    strong_avg, weak_avg = _mean(strong), _mean(weak)
    strong_max, weak_max = _max(strong), _max(weak)
    return {
        f"{prefix}_strong_avg": strong_avg,
        f"{prefix}_weak_avg": weak_avg,
        f"{prefix}_strong_max": strong_max,
        f"{prefix}_weak_max": weak_max,
        f"{prefix}_weak_to_strong_ratio": _ratio(weak_avg, strong_avg),
        f"{prefix}_asymmetry_pct": _asymmetry_pct(strong_avg, weak_avg),
        f"{prefix}_weak_to_strong_ratio_max": _ratio(weak_max, strong_max),
        f"{prefix}_asymmetry_pct_max": _asymmetry_pct(strong_max, weak_max),
    }


def _power(payload: FixedFields) -> Dict[str, Optional[float]]:
    return _two_footed("shot_power", payload, "power")


def _serve(payload: FixedFields) -> Dict[str, Optional[float]]:
    return _two_footed("serve_distance", payload, "serve")


def _figure8(payload: FixedFields) -> Dict[str, Optional[float]]:
    strong, weak, both = payload.get("figure8_strong"), payload.get("figure8_weak"), payload.get("figure8_both")
    return {
        "figure8_loops_strong": strong,
        "figure8_loops_weak": weak,
        "figure8_loops_both": both,
        "figure8_weak_to_strong_ratio": _ratio(weak, strong),
        "figure8_both_to_strong_ratio": _ratio(both, strong),
        "figure8_asymmetry_pct": _asymmetry_pct(strong, weak),
    }


def _passing(payload: FixedFields) -> Dict[str, Optional[float]]:
    strong, weak = payload.get("passing_strong"), payload.get("passing_weak")
    total = _sum_complete([strong, weak])
    weak_share = _ratio(weak, total)
    return {
        "passing_gates_strong_hits": strong,
        "passing_gates_weak_hits": weak,
        "passing_gates_total_hits": total,
        "passing_gates_weak_to_strong_ratio": _ratio(weak, strong),
        "passing_gates_asymmetry_pct": _asymmetry_pct(strong, weak),
        "passing_gates_weak_share_pct": None if weak_share is None else weak_share * 100,
    }


def _one_v_one(payload: RoundsArray) -> Dict[str, Optional[float]]:
    rounds = payload.present()
    return {
        "one_v_one_avg_score": _mean(rounds),
        "one_v_one_total_score": float(sum(rounds)) if rounds else None,
        "one_v_one_best_round": _max(rounds),
        "one_v_one_worst_round": _min(rounds),
        "one_v_one_consistency_range": _spread(rounds),
    }


def _juggling(payload: FixedFields) -> Dict[str, Optional[float]]:
    attempts = payload.series("juggling_", 4)
    top = sorted(_present(attempts), reverse=True)
    return {
        "juggle_best": _max(attempts),
        "juggle_best2_sum": top[0] + top[1] if len(top) >= 2 else None,
        "juggle_avg_all": _mean(attempts),
        "juggle_total": _sum_complete(attempts),
        "juggle_consistency_range": _spread(attempts),
    }


def _skill_moves(payload: NamedMovesArray) -> Dict[str, Optional[float]]:
    ratings = payload.present()
    return {
        "skill_moves_avg_rating": _mean(ratings),
        "skill_moves_total_rating": float(sum(ratings)) if ratings else None,
        "skill_moves_best_rating": _max(ratings),
        "skill_moves_worst_rating": _min(ratings),
        "skill_moves_consistency_range": _spread(ratings),
    }


def _agility(payload: FixedFields) -> Dict[str, Optional[float]]:
    trials = payload.series("agility_", 3)
    return {
        "agility_5_10_5_best_time": _min(trials),
        "agility_5_10_5_avg_time": _mean(trials),
        "agility_5_10_5_worst_time": _max(trials),
        "agility_5_10_5_consistency_range": _spread(trials),
    }


def _reaction(payload: FixedFields) -> Dict[str, Optional[float]]:
    cue = payload.series("reaction_cue_", 3)
    total = payload.series("reaction_total_", 3)
    return {
        "reaction_5m_reaction_time_avg": _mean(cue),
        "reaction_5m_total_time_avg": _mean(total),
        "reaction_5m_reaction_time_best": _min(cue),
        "reaction_5m_total_time_best": _min(total),
        "reaction_5m_reaction_time_worst": _max(cue),
        "reaction_5m_total_time_worst": _max(total),
        "reaction_5m_reaction_consistency_range": _spread(cue),
        "reaction_5m_total_consistency_range": _spread(total),
    }


def _hop(payload: FixedFields) -> Dict[str, Optional[float]]:
    left = payload.series("hop_left_", 3)
    right = payload.series("hop_right_", 3)
    left_max, right_max = _max(left), _max(right)
    return {
        "single_leg_hop_left": left_max,
        "single_leg_hop_right": right_max,
        "single_leg_hop_asymmetry_pct": _side_asymmetry_pct(left_max, right_max),
        "single_leg_hop_left_avg": _mean(left),
        "single_leg_hop_right_avg": _mean(right),
        "single_leg_hop_left_consistency_range": _spread(left),
        "single_leg_hop_right_consistency_range": _spread(right),
    }


def _jumps(payload: FixedFields) -> Dict[str, Optional[float]]:
    c10, c20, c30 = payload.get("jumps_10s"), payload.get("jumps_20s"), payload.get("jumps_30s")
    last10 = _diff(c30, c20)
    dropoff = None
    if c10 is not None and last10 is not None and c10 != 0:
        dropoff = (c10 - last10) / c10 * 100
    return {
        "double_leg_jumps_first10": c10,
        "double_leg_jumps_total_reps": c30,
        "double_leg_jumps_last10": last10,
        "double_leg_jumps_dropoff_pct": dropoff,
        "double_leg_jumps_mid10": _diff(c20, c10),
        "double_leg_jumps_first20": c20,
        "double_leg_jumps_last20": _diff(c30, c10),
    }


def _ankle(payload: FixedFields) -> Dict[str, Optional[float]]:
    # Recorded in inches.
    left_in, right_in = payload.get("ankle_left"), payload.get("ankle_right")
    left = None if left_in is None else left_in * INCH_TO_CM
    right = None if right_in is None else right_in * INCH_TO_CM
    return {
        "ankle_dorsiflex_left_cm": left,
        "ankle_dorsiflex_right_cm": right,
        "ankle_dorsiflex_avg_cm": _mean([left, right]) if left is not None and right is not None else None,
        "ankle_dorsiflex_asymmetry_pct": _side_asymmetry_pct(left, right),
        "ankle_dorsiflex_left_minus_right_cm": _diff(left, right),
    }


def _plank(payload: FixedFields) -> Dict[str, Optional[float]]:
    hold, form = payload.get("plank_time"), payload.get("plank_form")
    good_form_hold = None
    if hold is not None and form is not None:
        good_form_hold = hold if form == 1 else 0.0
    return {
        "core_plank_hold_sec": hold,
        "core_plank_form_flag": form,
        "core_plank_hold_sec_if_good_form": good_form_hold,
    }


REDUCERS: Dict[str, Callable[[ScorePayload], Dict[str, Optional[float]]]] = {
    "power": _power,
    "serve_distance": _serve,
    "figure_8_loops": _figure8,
    "passing_gates": _passing,
    "one_v_one": _one_v_one,
    "juggling": _juggling,
    "skill_moves": _skill_moves,
    "agility_5_10_5": _agility,
    "reaction_sprint": _reaction,
    "single_leg_hop": _hop,
    "double_leg_jumps": _jumps,
    "ankle_dorsiflexion": _ankle,
    "core_plank": _plank,
}


def derive_raw_metrics(definition: TestDefinition, scores) -> Dict[str, float]:
    """Raw metrics for one record; unavailable values are omitted, never zeroed."""

    payload = parse_scores(definition, scores)
    reducer = REDUCERS[definition.id]
    return {key: float(value) for key, value in reducer(payload).items() if value is not None}
