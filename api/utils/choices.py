from fractions import Fraction
from typing import List, Optional
import logging, math

from api.utils.fractions_math import (
    denominator_bounds,
    fraction_text,
    normalize_fraction_label,
    parse_fraction_label,
)
from api.utils.randomness import resolve_rng, rr

logger = logging.getLogger(__name__)

CHOICE_COUNT = 4
MAX_FILL_ATTEMPTS = 50


def make_choices(draft: dict, rng=None) -> dict:
    """
    Wrap a numeric draft ({display, answer, op, steps}) with 4 shuffled
    answer choices. Generator-supplied distractor candidates are used first,
    then random values near the answer, then deterministic padding.
    """
    rng = resolve_rng(rng)
    answer = draft["answer"]
    spread = max(5, math.ceil(abs(answer) * 0.2))

    choices = [answer]
    for candidate in draft.get("distractor_candidates") or []:
        if len(choices) >= CHOICE_COUNT:
            break
        if candidate >= 0 and candidate not in choices:
            choices.append(candidate)

    guard = 0
    while len(choices) < CHOICE_COUNT and guard < MAX_FILL_ATTEMPTS:
        guard += 1
        wrong = answer + rng.randint(-spread, spread)
        if wrong >= 0 and wrong not in choices:
            choices.append(wrong)

    if len(choices) < CHOICE_COUNT:
        logger.debug("Padding choices deterministically for answer %s", answer)
    offset = 1
    while len(choices) < CHOICE_COUNT:
        padded = max(0, answer + offset)
        if padded not in choices:
            choices.append(padded)
        offset += 1

    rng.shuffle(choices)

    return {
        "display": draft["display"],
        "answer": answer,
        "choices": choices,
        "op": draft["op"],
        "steps": list(draft.get("steps") or []),
    }


def build_multiplication_distractors(a: int, b: int, answer: int, rng=None) -> List[int]:
    # Neighbouring times-table cells first: the slip a learner actually makes
    rng = resolve_rng(rng)
    neighbours = [
        (a + da) * (b + db)
        for da in (-1, 0, 1)
        for db in (-1, 0, 1)
        if da or db
    ]
    rng.shuffle(neighbours)

    step = max(1, round(abs(answer) * 0.1))
    offsets = [answer + step, answer - step, answer + 2 * step, answer - 2 * step]

    distractors: List[int] = []
    for value in neighbours + offsets:
        if value >= 0 and value != answer and value not in distractors:
            distractors.append(value)
    return distractors


def build_fraction_choice_labels(
    correct: str,
    candidates: Optional[List[str]],
    value_range,
    rng=None,
    count: int = CHOICE_COUNT,
) -> List[str]:
    rng = resolve_rng(rng)
    correct_label = normalize_fraction_label(correct)
    correct_value = parse_fraction_label(correct_label) or Fraction(0)

    labels = [correct_label]
    values = [correct_value]

    def push(label) -> None:
        if len(labels) >= count:
            return
        norm = normalize_fraction_label(label)
        value = parse_fraction_label(norm)
        if value is None or value < 0 or value in values:
            return
        labels.append(norm)
        values.append(value)

    # 1. Common mistakes supplied by the generator
    for candidate in candidates or []:
        push(candidate)

    # 2. Random fillers around the size of the answer
    d_lo, d_hi = denominator_bounds(value_range)
    guard = 0
    while len(labels) < count and guard < MAX_FILL_ATTEMPTS:
        guard += 1
        d = rr(rng, d_lo, d_hi)
        n_hi = max(2, math.ceil(correct_value * d) + d)
        push(fraction_text(Fraction(rr(rng, 1, n_hi), d)))

    # 3. Deterministic walk upwards from the answer
    if len(labels) < count:
        logger.debug("Padding fraction labels deterministically for %s", correct_label)
    step = Fraction(1, correct_value.denominator)
    k = 1
    while len(labels) < count:
        push(fraction_text(correct_value + k * step))
        k += 1

    rng.shuffle(labels)
    return labels


def make_labeled_choices(draft: dict, value_range, rng=None) -> dict:
    """
    Finish a label-based draft. Drafts that already carry a fixed
    ``choice_labels`` row (fraction comparison symbols) keep it in order.
    """
    rng = resolve_rng(rng)
    if draft.get("choice_labels"):
        labels = list(draft["choice_labels"])
        answer_label = draft["answer_label"]
    else:
        labels = build_fraction_choice_labels(
            draft["answer_label"], draft.get("mistakes"), value_range, rng
        )
        answer_label = normalize_fraction_label(draft["answer_label"])

    return {
        "display": draft["display"],
        "answer": labels.index(answer_label),
        "choices": list(range(len(labels))),
        "op": draft["op"],
        "steps": list(draft.get("steps") or []),
        "choice_labels": labels,
        "answer_label": answer_label,
    }
