"""
Random source helpers shared by the question generators.

Every generator takes an ``rng`` argument that behaves like ``random.Random``
(``randint``, ``random``, ``choice``, ``shuffle``). Passing ``None`` uses the
module-level ``random`` functions, so production calls stay one-liners while
tests hand in a seeded instance.
"""

import random

FNV_OFFSET = 2166136261
FNV_PRIME = 16777619


def resolve_rng(rng=None):
    return rng if rng is not None else random


def rr(rng, lo: int, hi: int) -> int:
    """Random int in [lo, hi]; a reversed or empty span collapses to lo."""
    lo, hi = int(lo), int(hi)
    if lo >= hi:
        return lo
    return rng.randint(lo, hi)


def coin(rng, probability: float = 0.5) -> bool:
    if probability <= 0:
        return False
    if probability >= 1:
        return True
    return rng.random() < probability


def pick_one(rng, items):
    if not items:
        return None
    return items[rr(rng, 0, len(items) - 1)]


def shuffle_in_place(rng, items: list) -> list:
    rng.shuffle(items)
    return items


def hash_seed(seed) -> int:
    """32-bit FNV-1a over the seed's text, so any value can seed a battle."""
    h = FNV_OFFSET
    for ch in str(seed):
        h ^= ord(ch)
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def create_seeded_random(seed) -> random.Random:
    if isinstance(seed, int):
        return random.Random(seed)
    return random.Random(hash_seed(seed))
