from api.utils.maths_generators import generate_addition_question
from api.utils.maths_generators import generate_subtraction_question
from api.utils.maths_generators import generate_multiplication_question
from api.utils.maths_generators import generate_division_question
from api.utils.maths_generators import generate_mixed2_question
from api.utils.maths_generators import generate_mixed3_question
from api.utils.maths_generators import generate_mixed4_question
from api.utils.maths_generators import generate_unknown1_question
from api.utils.maths_generators import generate_unknown2_question
from api.utils.maths_generators import generate_unknown3_question
from api.utils.maths_generators import generate_unknown4_question
from api.utils.fraction_generators import generate_fraction_compare_question
from api.utils.fraction_generators import generate_same_denominator_question
from api.utils.fraction_generators import generate_different_denominator_question
from api.utils.fraction_generators import generate_fraction_muldiv_question
from api.utils.ability import DEFAULT_LEVEL, get_difficulty_level_for_ops, map_op_to_ability_group
from api.utils.choices import make_choices, make_labeled_choices
from api.utils.randomness import pick_one, resolve_rng
from api.utils.settings import ENGINE_QUESTION_TIMER_SEC
from api.utils.translator import create_translator
import logging, math

logger = logging.getLogger(__name__)

OPERATION_GENERATORS = {
    "+": generate_addition_question,
    "-": generate_subtraction_question,
    "×": generate_multiplication_question,
    "÷": generate_division_question,
    "mixed2": generate_mixed2_question,
    "mixed3": generate_mixed3_question,
    "mixed4": generate_mixed4_question,
    "unknown1": generate_unknown1_question,
    "unknown2": generate_unknown2_question,
    "unknown3": generate_unknown3_question,
    "unknown4": generate_unknown4_question,
    "frac_cmp": generate_fraction_compare_question,
    "frac_same": generate_same_denominator_question,
    "frac_diff": generate_different_denominator_question,
    "frac_muldiv": generate_fraction_muldiv_question,
}

# Answered by label index rather than by numeric value
LABELED_OPERATIONS = {"frac_cmp", "frac_same", "frac_diff", "frac_muldiv"}

DEFAULT_OPERATION = "+"
DEFAULT_RANGE = (1, 10)

# Range multipliers indexed by ability level 0..4
DIFF_MODS = (0.7, 0.85, 1.0, 1.15, 1.3)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def move_range(move) -> tuple:
    raw = move.get("range") if isinstance(move, dict) else None
    try:
        lo, hi = int(raw[0]), int(raw[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return DEFAULT_RANGE
    return lo, hi


def scale_range(value_range, diff_mod: float = 1) -> tuple:
    low = max(1, round_half_up(value_range[0] * diff_mod))
    high = max(low, max(2, round_half_up(value_range[1] * diff_mod)))
    return low, high


def resolve_operations(move_ops, allowed_ops=None) -> list:
    ops = [op for op in (move_ops or []) if isinstance(op, str) and op] or [DEFAULT_OPERATION]
    allowed = [op for op in (allowed_ops or []) if isinstance(op, str) and op]
    if not allowed:
        return ops
    narrowed = [op for op in ops if op in allowed]
    return narrowed or allowed


def diff_mod_for_level(level) -> float:
    if isinstance(level, int) and not isinstance(level, bool) and 0 <= level < len(DIFF_MODS):
        return DIFF_MODS[level]
    return DIFF_MODS[DEFAULT_LEVEL]


def gen_q(move, diff_mod: float = 1, t=None, allowed_ops=None, rng=None) -> dict:
    """
    Generate one multiple-choice question for a move.

    ``move`` is ``{"range": [lo, hi], "ops": [...]}``; ``diff_mod`` scales
    the range, ``allowed_ops`` narrows the move's operations (a challenge's
    question focus) and ``t`` localizes the explanation steps.
    """
    rng = resolve_rng(rng)
    tr = create_translator(t)

    value_range = scale_range(move_range(move), diff_mod)
    move_ops = move.get("ops") if isinstance(move, dict) else None
    op = pick_one(rng, resolve_operations(move_ops, allowed_ops)) or DEFAULT_OPERATION

    generator = OPERATION_GENERATORS.get(op)
    if generator is None:
        logger.debug("Unknown operation %r, using %s", op, DEFAULT_OPERATION)
        op, generator = DEFAULT_OPERATION, OPERATION_GENERATORS[DEFAULT_OPERATION]

    draft = generator(value_range, rng, tr)
    if op in LABELED_OPERATIONS:
        return make_labeled_choices(draft, value_range, rng)
    return make_choices(draft, rng)


def gen_q_for_model(move, model, t=None, allowed_ops=None, rng=None, fallback_level: int = DEFAULT_LEVEL) -> dict:
    """Pick the difficulty from the ability model, then generate."""
    move_ops = move.get("ops") if isinstance(move, dict) else None
    level = get_difficulty_level_for_ops(model, move_ops, fallback_level)
    diff_mod = diff_mod_for_level(level)
    return {
        "difficulty_level": level,
        "diff_mod": diff_mod,
        "question": gen_q(move, diff_mod, t=t, allowed_ops=allowed_ops, rng=rng),
    }


def resolve_question_config(rule, fallback_timer_sec: int = ENGINE_QUESTION_TIMER_SEC) -> dict:
    """Timer and operation focus for a daily challenge rule (or none)."""
    rule = rule if isinstance(rule, dict) else {}

    raw = rule.get("time_limit_sec")
    timer = fallback_timer_sec
    if isinstance(raw, (int, float)) and not isinstance(raw, bool) and math.isfinite(raw) and raw > 0:
        timer = raw

    focus = rule.get("question_focus")
    allowed_ops = list(focus) if isinstance(focus, (list, tuple)) and focus else None
    return {"question_timer_sec": timer, "question_allowed_ops": allowed_ops}


def list_operations() -> list:
    return [
        {"op": op, "group": map_op_to_ability_group(op), "labeled": op in LABELED_OPERATIONS}
        for op in OPERATION_GENERATORS
    ]
