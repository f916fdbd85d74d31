from typing import Optional, Tuple
import logging

from api.utils.choices import build_multiplication_distractors
from api.utils.randomness import coin, resolve_rng, rr
from api.utils.translator import Translator, create_translator, op_word

logger = logging.getLogger(__name__)

# Retry ceilings for draws that can come out negative. Past these a fixed,
# always-valid expression shape is produced instead.
MIXED_RETRY_LIMIT = 15
UNKNOWN_RETRY_LIMIT = 20

ValueRange = Tuple[int, int]


def _draft(display: str, answer: int, op: str, steps: list, **extra) -> dict:
    draft = {"display": display, "answer": answer, "op": op, "steps": steps}
    draft.update(extra)
    return draft


def _mul_first(tr: Translator, a, b, result) -> str:
    return tr(
        "question.step.mulFirst",
        "Multiply first: {a} × {b} = {result}",
        {"a": a, "b": b, "result": result},
    )


def _add_sub_then(tr: Translator, op: str, left, right, result) -> str:
    return tr(
        "question.step.addSubThen",
        "Then {opWord}: {left} {op} {right} = {result}",
        {"opWord": op_word(op, tr), "left": left, "op": op, "right": right, "result": result},
    )


def _add_sub_final(tr: Translator, op: str, left, right, result) -> str:
    return tr(
        "question.step.addSubFinal",
        "Finally {opWord}: {left} {op} {right} = {result}",
        {"opWord": op_word(op, tr), "left": left, "op": op, "right": right, "result": result},
    )


def _apply(op: str, left: int, right: int) -> int:
    return left + right if op == "+" else left - right


# ── Single operations ──


def generate_addition_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    low, high = value_range
    a = rr(rng, low, high)
    b = rr(rng, low, high)
    correct = a + b
    return _draft(f"{a} + {b}", correct, "+", [f"{a} + {b} = {correct}"])


def generate_subtraction_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    low, high = value_range
    x = rr(rng, low, high)
    y = rr(rng, low, high)
    if x == y:
        y = min(high, y + 1)
    # Larger value first so the difference is never negative
    a, b = max(x, y), min(x, y)
    correct = a - b
    return _draft(f"{a} - {b}", correct, "-", [f"{a} - {b} = {correct}"])


def generate_multiplication_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    low, high = value_range
    a = rr(rng, low, high)
    b = rr(rng, low, high)
    correct = a * b
    return _draft(
        f"{a} × {b}",
        correct,
        "×",
        [f"{a} × {b} = {correct}"],
        distractor_candidates=build_multiplication_distractors(a, b, correct, rng),
    )


def generate_division_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    low, high = value_range

    # Build the dividend from divisor × quotient so it always divides exactly
    divisor = max(1, rr(rng, low, high))
    quotient = max(1, rr(rng, low, high))
    dividend = divisor * quotient

    steps = [
        tr("question.step.think", "Think: {expr}", {"expr": f"{divisor} × ? = {dividend}"}),
        f"{divisor} × {quotient} = {dividend}",
        tr("question.step.therefore", "Therefore {expr}", {"expr": f"{dividend} ÷ {divisor} = {quotient}"}),
    ]
    return _draft(f"{dividend} ÷ {divisor}", quotient, "÷", steps)


# ── Mixed operations ──


def generate_mixed2_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """a ± b ± c, evaluated left to right."""
    rng = resolve_rng(rng)
    low, high = value_range

    for _ in range(MIXED_RETRY_LIMIT + 1):
        a, b, c = rr(rng, low, high), rr(rng, low, high), rr(rng, low, high)
        op1 = "+" if coin(rng) else "-"
        op2 = "+" if coin(rng) else "-"
        step1 = _apply(op1, a, b)
        correct = _apply(op2, step1, c)
        if correct < 0:
            continue
        return _draft(
            f"{a} {op1} {b} {op2} {c}",
            correct,
            "mixed2",
            [f"{a} {op1} {b} = {step1}", f"{step1} {op2} {c} = {correct}"],
        )

    logger.debug("mixed2 retry limit reached for range %s", value_range)
    a, b, c = rr(rng, low, high), rr(rng, low, high), rr(rng, low, high)
    correct = a + b + c
    return _draft(
        f"{a} + {b} + {c}",
        correct,
        "mixed2",
        [f"{a} + {b} = {a + b}", f"{a + b} + {c} = {correct}"],
    )


def generate_mixed3_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """a × b ± c: multiplication before the additive step."""
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    low, high = value_range

    for _ in range(MIXED_RETRY_LIMIT + 1):
        a, b, c = rr(rng, low, high), rr(rng, low, high), rr(rng, low, high)
        op = "+" if coin(rng) else "-"
        product = a * b
        correct = _apply(op, product, c)
        if correct < 0:
            continue
        return _draft(
            f"{a} × {b} {op} {c}",
            correct,
            "mixed3",
            [_mul_first(tr, a, b, product), _add_sub_then(tr, op, product, c, correct)],
        )

    logger.debug("mixed3 retry limit reached for range %s", value_range)
    a, b, c = rr(rng, low, high), rr(rng, low, high), rr(rng, low, high)
    product = a * b
    correct = product + c
    return _draft(
        f"{a} × {b} + {c}",
        correct,
        "mixed3",
        [_mul_first(tr, a, b, product), _add_sub_then(tr, "+", product, c, correct)],
    )


def generate_mixed4_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """
    Four-operation expressions respecting order of operations. The shape is
    chosen per attempt: 40% a ± b × c, 30% a × b ± c × d, 30% a ± b × c ± d.
    """
    rng = resolve_rng(rng)
    tr = tr or create_translator()
    low, high = value_range

    for _ in range(MIXED_RETRY_LIMIT + 1):
        pattern = rng.random()

        if pattern < 0.4:
            a = rr(rng, low + 3, high * 2)
            b, c = rr(rng, low, high), rr(rng, low, high)
            op = "+" if coin(rng) else "-"
            product = b * c
            correct = _apply(op, a, product)
            if correct < 0:
                continue
            return _draft(
                f"{a} {op} {b} × {c}",
                correct,
                "mixed4",
                [_mul_first(tr, b, c, product), _add_sub_then(tr, op, a, product, correct)],
            )

        if pattern < 0.7:
            small = min(high, 6)
            a, b = rr(rng, low, small), rr(rng, low, small)
            c, d = rr(rng, low, small), rr(rng, low, small)
            op = "+" if coin(rng, 0.6) else "-"
            p1, p2 = a * b, c * d
            correct = _apply(op, p1, p2)
            if correct < 0:
                continue
            return _draft(
                f"{a} × {b} {op} {c} × {d}",
                correct,
                "mixed4",
                [
                    _mul_first(tr, a, b, p1),
                    tr(
                        "question.step.mulThen",
                        "Then multiply: {a} × {b} = {result}",
                        {"a": c, "b": d, "result": p2},
                    ),
                    _add_sub_final(tr, op, p1, p2, correct),
                ],
            )

        a = rr(rng, low + 5, high * 3)
        b, c, d = rr(rng, low, high), rr(rng, low, high), rr(rng, low, high)
        op1 = "+" if coin(rng) else "-"
        op2 = "+" if coin(rng) else "-"
        product = b * c
        mid = _apply(op1, a, product)
        correct = _apply(op2, mid, d)
        if correct < 0:
            continue
        return _draft(
            f"{a} {op1} {b} × {c} {op2} {d}",
            correct,
            "mixed4",
            [
                _mul_first(tr, b, c, product),
                _add_sub_then(tr, op1, a, product, mid),
                _add_sub_final(tr, op2, mid, d, correct),
            ],
        )

    logger.debug("mixed4 retry limit reached for range %s", value_range)
    a, b = rr(rng, low, high), rr(rng, low, high)
    c, d = rr(rng, low, high), rr(rng, low, high)
    product = a * b
    correct = product + c + d
    return _draft(
        f"{a} × {b} + {c} + {d}",
        correct,
        "mixed4",
        [_mul_first(tr, a, b, product), _add_sub_then(tr, "+", f"{product} + {c}", d, correct)],
    )


# ── Solve for the unknown ──
# The answer is drawn first and the visible constant derived from it, so the
# equation is always consistent.


def _unknown_add(ans: int, b: int, op: str) -> dict:
    c = ans + b
    return _draft(f"? + {b} = {c}", ans, op, [f"? + {b} = {c}", f"? = {c} - {b}", f"? = {ans}"])


def _unknown_sub(ans: int, b: int, op: str) -> dict:
    c = ans - b
    return _draft(f"? - {b} = {c}", ans, op, [f"? - {b} = {c}", f"? = {c} + {b}", f"? = {ans}"])


def _unknown_mul(ans: int, b: int, op: str) -> dict:
    c = ans * b
    return _draft(f"? × {b} = {c}", ans, op, [f"? × {b} = {c}", f"? = {c} ÷ {b}", f"? = {ans}"])


def generate_unknown1_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """? + b = c or ? - b = c."""
    rng = resolve_rng(rng)
    low, high = value_range

    for _ in range(UNKNOWN_RETRY_LIMIT + 1):
        if coin(rng):
            ans = rr(rng, low, high)
            b = rr(rng, low, high)
            return _unknown_add(ans, b, "unknown1")
        b = rr(rng, low, high)
        ans = rr(rng, low, high)
        if ans - b < 0:
            continue
        return _unknown_sub(ans, b, "unknown1")

    logger.debug("unknown1 retry limit reached for range %s", value_range)
    return _unknown_add(rr(rng, low, high), rr(rng, low, high), "unknown1")


def generate_unknown2_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """? × b = c or ? ÷ b = c, with b at least 2."""
    rng = resolve_rng(rng)
    low, high = value_range

    if coin(rng):
        ans = rr(rng, low, high)
        b = max(2, rr(rng, low, high))
        return _unknown_mul(ans, b, "unknown2")

    b = max(2, rr(rng, low, high))
    c = rr(rng, low, high)
    ans = b * c
    return _draft(
        f"? ÷ {b} = {c}",
        ans,
        "unknown2",
        [f"? ÷ {b} = {c}", f"? = {c} × {b}", f"? = {ans}"],
    )


def generate_unknown3_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """Larger-number unknowns: 35% ? + b, 30% ? - b, 35% ? × b."""
    rng = resolve_rng(rng)
    low, high = value_range

    for _ in range(UNKNOWN_RETRY_LIMIT + 1):
        pattern = rng.random()
        if pattern < 0.35:
            return _unknown_add(rr(rng, low, high), rr(rng, low, high), "unknown3")
        if pattern < 0.65:
            b = rr(rng, low, high)
            ans = rr(rng, max(low, b + 1), high + b)
            if ans - b < 0:
                continue
            return _unknown_sub(ans, b, "unknown3")
        # capped multiplier keeps the product readable
        b = max(2, rr(rng, 2, min(high, 9)))
        ans = rr(rng, low, min(high, 15))
        return _unknown_mul(ans, b, "unknown3")

    logger.debug("unknown3 retry limit reached for range %s", value_range)
    return _unknown_add(rr(rng, low, high), rr(rng, low, high), "unknown3")


def generate_unknown4_question(value_range: ValueRange, rng=None, tr: Optional[Translator] = None) -> dict:
    """Two-step equations: (? + a) × b = c or ? × a + b = c."""
    rng = resolve_rng(rng)
    low, high = value_range

    if coin(rng):
        a = rr(rng, 1, min(high, 6))
        b = max(2, rr(rng, 2, min(high, 6)))
        ans = rr(rng, low, high)
        inner = ans + a
        c = inner * b
        return _draft(
            f"(? + {a}) × {b} = {c}",
            ans,
            "unknown4",
            [
                f"(? + {a}) × {b} = {c}",
                f"? + {a} = {c} ÷ {b} = {inner}",
                f"? = {inner} - {a} = {ans}",
            ],
        )

    a = max(2, rr(rng, 2, min(high, 6)))
    b = rr(rng, 1, min(high, 10))
    ans = rr(rng, low, high)
    c = ans * a + b
    return _draft(
        f"? × {a} + {b} = {c}",
        ans,
        "unknown4",
        [
            f"? × {a} + {b} = {c}",
            f"? × {a} = {c} - {b} = {c - b}",
            f"? = {c - b} ÷ {a} = {ans}",
        ],
    )
