from fractions import Fraction
from typing import Optional
import math, re

FRACTION_LABEL_RE = re.compile(r"^\s*(-?\d+)\s*(?:/\s*(-?\d+)\s*)?$")
DENOMINATOR_MIN = 2
DENOMINATOR_MAX = 12


def gcd(a: int, b: int) -> int:
    # 1 instead of 0 keeps callers that divide by the result safe
    return math.gcd(a, b) or 1


def lcm(a: int, b: int) -> int:
    return abs(a * b) // gcd(a, b)


def simplify_fraction(n: int, d: int) -> Fraction:
    """Lowest terms, sign carried by the numerator, 0 always as 0/1."""
    if n == 0:
        return Fraction(0, 1)
    g = gcd(n, d)
    n, d = n // g, d // g
    if d < 0:
        n, d = -n, -d
    return Fraction(n, d)


def fraction_text(frac: Fraction) -> str:
    if frac.denominator == 1:
        return str(frac.numerator)
    return f"{frac.numerator}/{frac.denominator}"


def parse_fraction_label(label: str) -> Optional[Fraction]:
    match = FRACTION_LABEL_RE.match(str(label or ""))
    if not match:
        return None
    n = int(match.group(1))
    d = int(match.group(2)) if match.group(2) is not None else 1
    if d == 0:
        return None
    return simplify_fraction(n, d)


def denominator_bounds(value_range) -> tuple:
    """Clamp a move range to the denominators fraction questions may use."""
    lo = min(max(int(value_range[0]), DENOMINATOR_MIN), DENOMINATOR_MAX)
    hi = min(max(int(value_range[1]), DENOMINATOR_MIN), DENOMINATOR_MAX)
    return lo, max(lo, hi)


def normalize_fraction_label(label: str) -> str:
    frac = parse_fraction_label(label)
    if frac is None:
        # comparison symbols and other non-fraction labels
        return str(label or "").strip()
    return fraction_text(frac)
