"""
Per-skill ability model and the windowed adaptive difficulty controller.

The model is a plain dict of dicts so callers can store it as JSON and hand
it back unchanged:

    {"add": {"level": 2, "recent": [True, False]}, "sub": {...}, ...}

Every update returns a new model; nothing here mutates its input.
"""

from typing import Iterable, List, Optional
import math

ABILITY_GROUPS = ("add", "sub", "mul", "div", "unknown", "mixed", "fraction")

OP_TO_GROUP = {
    "+": "add",
    "-": "sub",
    "×": "mul",
    "÷": "div",
    "mixed2": "mixed",
    "mixed3": "mixed",
    "mixed4": "mixed",
    "unknown1": "unknown",
    "unknown2": "unknown",
    "unknown3": "unknown",
    "unknown4": "unknown",
    "frac_cmp": "fraction",
    "frac_same": "fraction",
    "frac_diff": "fraction",
    "frac_muldiv": "fraction",
}

MIN_LEVEL = 0
MAX_LEVEL = 4
DEFAULT_LEVEL = 2
DEFAULT_WINDOW_SIZE = 6
MIN_SAMPLES = 4
RAISE_RATE = 0.8
LOWER_RATE = 0.35


def clamp_level(level: int, min_level: int = MIN_LEVEL, max_level: int = MAX_LEVEL) -> int:
    return max(min_level, min(max_level, level))


def _as_level(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


# --- Adaptive controller ---


def update_adaptive_difficulty(
    current_level: int,
    recent_answers: Iterable[bool],
    correct: bool,
    window_size: int = DEFAULT_WINDOW_SIZE,
    min_level: int = MIN_LEVEL,
    max_level: int = MAX_LEVEL,
) -> dict:
    """
    Append the new outcome, keep the last ``window_size`` answers and move the
    level one step when the windowed accuracy leaves the 0.35-0.8 band.
    Fewer than 4 answers in the window never changes the level.
    """
    window_size = max(1, int(window_size))
    next_recent = (list(recent_answers or []) + [bool(correct)])[-window_size:]
    if len(next_recent) < MIN_SAMPLES:
        return {"next_level": current_level, "next_recent": next_recent}

    rate = sum(1 for ok in next_recent if ok) / len(next_recent)
    next_level = current_level
    if rate >= RAISE_RATE and next_level < max_level:
        next_level += 1
    elif rate <= LOWER_RATE and next_level > min_level:
        next_level -= 1
    return {"next_level": next_level, "next_recent": next_recent}


# --- Ability model ---


def map_op_to_ability_group(op) -> str:
    if not isinstance(op, str) or not op:
        op = "mixed2"
    return OP_TO_GROUP.get(op, "mixed")


def create_ability_model(initial_level: int = DEFAULT_LEVEL) -> dict:
    level = _as_level(initial_level)
    level = clamp_level(DEFAULT_LEVEL if level is None else level)
    return {group: {"level": level, "recent": []} for group in ABILITY_GROUPS}


def get_bucket(model, group: str, fallback_level: int = DEFAULT_LEVEL) -> dict:
    bucket = model.get(group) if isinstance(model, dict) else None
    if not isinstance(bucket, dict):
        return {"level": fallback_level, "recent": []}

    level = _as_level(bucket.get("level"))
    recent = bucket.get("recent")
    return {
        "level": fallback_level if level is None else level,
        "recent": list(recent) if isinstance(recent, list) else [],
    }


def get_difficulty_level_for_op(model, op, fallback_level: int = DEFAULT_LEVEL) -> int:
    return get_bucket(model, map_op_to_ability_group(op), fallback_level)["level"]


def get_difficulty_level_for_ops(model, ops, fallback_level: int = DEFAULT_LEVEL) -> int:
    """Rounded mean level across the groups a multi-op move touches."""
    if not isinstance(ops, (list, tuple)) or not ops:
        return fallback_level
    levels: List[int] = [get_difficulty_level_for_op(model, op, fallback_level) for op in ops]
    avg = sum(levels) / len(levels)
    return clamp_level(int(avg + 0.5))


def update_ability_model(
    model,
    op,
    correct: bool,
    window_size: int = DEFAULT_WINDOW_SIZE,
    min_level: int = MIN_LEVEL,
    max_level: int = MAX_LEVEL,
    fallback_level: int = DEFAULT_LEVEL,
) -> dict:
    group = map_op_to_ability_group(op)
    bucket = get_bucket(model, group, fallback_level)
    result = update_adaptive_difficulty(
        current_level=bucket["level"],
        recent_answers=bucket["recent"],
        correct=correct,
        window_size=window_size,
        min_level=min_level,
        max_level=max_level,
    )

    next_model = {g: get_bucket(model, g, fallback_level) for g in ABILITY_GROUPS}
    next_model[group] = {"level": result["next_level"], "recent": result["next_recent"]}

    return {
        "group": group,
        "next_level": result["next_level"],
        "next_recent": result["next_recent"],
        "next_model": next_model,
    }
