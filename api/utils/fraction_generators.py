"""
Fraction question family.

These drafts answer with a label (``answer_label``) instead of a number:
two different fraction strings can name the same value, so the finished
question stores its options as ``choice_labels`` and ``answer`` becomes the
index of the correct label. Each arithmetic draft also lists the labels a
learner gets from the usual slips so they can be offered as distractors.
"""

from typing import List, Optional, Tuple
import logging

from api.utils.fractions_math import (
    DENOMINATOR_MAX,
    denominator_bounds,
    fraction_text,
    lcm,
    simplify_fraction,
)
from api.utils.maths_generators import UNKNOWN_RETRY_LIMIT, ValueRange
from api.utils.randomness import coin, resolve_rng, rr
from api.utils.translator import Translator, create_translator, op_word

logger = logging.getLogger(__name__)

COMPARE_SYMBOLS = [">", "<", "="]
# Share of comparisons built as scaled-equal pairs so "=" turns up often enough
EQUAL_PAIR_RATE = 0.22
FRACTION_RETRY_LIMIT = UNKNOWN_RETRY_LIMIT


def _draw_fraction(rng, d_lo: int, d_hi: int) -> Tuple[int, int]:
    d = rr(rng, d_lo, d_hi)
    return rr(rng, 1, d - 1), d


def _label(n: int, d: int) -> str:
    return fraction_text(simplify_fraction(n, d))


def _simplify_step(tr: Translator, n: int, d: int) -> str:
    return tr(
        "question.step.fracSimplify",
        "Simplify: {n}/{d} = {result}",
        {"n": n, "d": d, "result": _label(n, d)},
    )


def generate_fraction_compare_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    d_lo, d_hi = denominator_bounds(value_range)

    # Scaled pairs need a base denominator that still fits after doubling
    base_hi = d_hi // 2
    if base_hi >= 2 and coin(rng, EQUAL_PAIR_RATE):
        a, b = _draw_fraction(rng, max(2, min(d_lo, base_hi)), base_hi)
        k = rr(rng, 2, d_hi // b)
        c, d = a * k, b * k
        if coin(rng):
            a, b, c, d = c, d, a, b
    else:
        a, b = _draw_fraction(rng, d_lo, d_hi)
        c, d = _draw_fraction(rng, d_lo, d_hi)

    left, right = a * d, c * b
    if left > right:
        symbol = ">"
    elif left < right:
        symbol = "<"
    else:
        symbol = "="

    steps = [
        tr(
            "question.step.fracCross",
            "Cross-multiply: {a} × {d} = {left}, {c} × {b} = {right}",
            {"a": a, "b": b, "c": c, "d": d, "left": left, "right": right},
        ),
        tr(
            "question.step.fracCompare",
            "{left} {symbol} {right}, so {lhs} {symbol} {rhs}",
            {"left": left, "right": right, "symbol": symbol, "lhs": f"{a}/{b}", "rhs": f"{c}/{d}"},
        ),
    ]
    return {
        "display": f"{a}/{b} ○ {c}/{d}",
        "answer_label": symbol,
        "choice_labels": list(COMPARE_SYMBOLS),
        "op": "frac_cmp",
        "steps": steps,
    }


def generate_same_denominator_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    d_lo, d_hi = denominator_bounds(value_range)

    for _ in range(FRACTION_RETRY_LIMIT + 1):
        d = rr(rng, d_lo, d_hi)
        a, b = rr(rng, 1, d - 1), rr(rng, 1, d - 1)
        op = "+" if coin(rng) else "-"
        raw = a + b if op == "+" else a - b
        if raw <= 0:
            continue
        return _same_denominator_draft(a, b, d, op, raw, tr)

    logger.debug("frac_same retry limit reached for range %s", value_range)
    d = rr(rng, d_lo, d_hi)
    a, b = rr(rng, 1, d - 1), rr(rng, 1, d - 1)
    return _same_denominator_draft(a, b, d, "+", a + b, tr)


def _same_denominator_draft(a: int, b: int, d: int, op: str, raw: int, tr: Translator) -> dict:
    mistakes: List[str] = [
        _label(raw, d + d),  # combined the denominators as well
        _label(raw + 1, d),
        _label(a * b, d),
    ]
    steps = [
        tr(
            "question.step.fracSameDen",
            "Same denominator, so {opWord} the numerators: {a} {op} {b} = {result}",
            {"opWord": op_word(op, tr), "a": a, "op": op, "b": b, "result": raw},
        ),
        _simplify_step(tr, raw, d),
    ]
    return {
        "display": f"{a}/{d} {op} {b}/{d}",
        "answer_label": _label(raw, d),
        "op": "frac_same",
        "steps": steps,
        "mistakes": mistakes,
    }


def generate_different_denominator_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    d_lo, d_hi = denominator_bounds(value_range)

    def draw():
        a, d1 = _draw_fraction(rng, d_lo, d_hi)
        b, d2 = _draw_fraction(rng, d_lo, d_hi)
        if d1 == d2:
            d2 = d1 + 1 if d1 < DENOMINATOR_MAX else d1 - 1
            b = rr(rng, 1, d2 - 1)
        return a, d1, b, d2

    for _ in range(FRACTION_RETRY_LIMIT + 1):
        a, d1, b, d2 = draw()
        op = "+" if coin(rng) else "-"
        common = lcm(d1, d2)
        ma, mb = a * (common // d1), b * (common // d2)
        raw = ma + mb if op == "+" else ma - mb
        if raw <= 0:
            continue
        return _different_denominator_draft(a, d1, b, d2, op, tr)

    logger.debug("frac_diff retry limit reached for range %s", value_range)
    a, d1, b, d2 = draw()
    return _different_denominator_draft(a, d1, b, d2, "+", tr)


def _different_denominator_draft(a: int, d1: int, b: int, d2: int, op: str, tr: Translator) -> dict:
    common = lcm(d1, d2)
    ma, mb = a * (common // d1), b * (common // d2)
    raw = ma + mb if op == "+" else ma - mb
    naive = a + b if op == "+" else abs(a - b)

    mistakes: List[str] = [
        _label(naive, d1 + d2),  # straight across, no common denominator
        _label(naive, common),  # numerators left unscaled
        _label(raw, d1 * d2),
    ]
    steps = [
        tr(
            "question.step.fracLcm",
            "Common denominator: LCM({d1}, {d2}) = {lcm}",
            {"d1": d1, "d2": d2, "lcm": common},
        ),
        tr(
            "question.step.fracConvert",
            "Convert: {a}/{d1} = {ma}/{lcm}, {b}/{d2} = {mb}/{lcm}",
            {"a": a, "d1": d1, "ma": ma, "b": b, "d2": d2, "mb": mb, "lcm": common},
        ),
        tr(
            "question.step.fracCombine",
            "Then {opWord}: {ma} {op} {mb} = {result}",
            {"opWord": op_word(op, tr), "ma": ma, "op": op, "mb": mb, "result": raw},
        ),
        _simplify_step(tr, raw, common),
    ]
    return {
        "display": f"{a}/{d1} {op} {b}/{d2}",
        "answer_label": _label(raw, common),
        "op": "frac_diff",
        "steps": steps,
        "mistakes": mistakes,
    }


def generate_fraction_muldiv_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    d_lo, d_hi = denominator_bounds(value_range)

    a, b = _draw_fraction(rng, d_lo, d_hi)
    c, d = _draw_fraction(rng, d_lo, d_hi)

    if coin(rng):
        n, den = a * c, b * d
        mistakes = [
            _label(a * d, b * c),  # cross-multiplied instead
            _label(a + c, b + d),
            _label(den, n),
        ]
        steps = [
            tr(
                "question.step.fracMul",
                "Multiply across: ({a} × {c}) / ({b} × {d}) = {n}/{den}",
                {"a": a, "b": b, "c": c, "d": d, "n": n, "den": den},
            ),
            _simplify_step(tr, n, den),
        ]
        display = f"{a}/{b} × {c}/{d}"
    else:
        n, den = a * d, b * c
        mistakes = [
            _label(a * c, b * d),  # divisor never flipped
            _label(den, n),
            _label(b * c, a * c),
        ]
        steps = [
            tr(
                "question.step.fracReciprocal",
                "Flip the divisor: {c}/{d} becomes {d}/{c}",
                {"c": c, "d": d},
            ),
            tr(
                "question.step.fracMul",
                "Multiply across: ({a} × {c}) / ({b} × {d}) = {n}/{den}",
                {"a": a, "b": b, "c": d, "d": c, "n": n, "den": den},
            ),
            _simplify_step(tr, n, den),
        ]
        display = f"{a}/{b} ÷ {c}/{d}"

    return {
        "display": display,
        "answer_label": _label(n, den),
        "op": "frac_muldiv",
        "steps": steps,
        "mistakes": mistakes,
    }
