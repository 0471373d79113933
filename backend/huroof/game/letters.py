from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


ARABIC_LETTERS: tuple[str, ...] = (
    "أ", "ب", "ت", "ث", "ج", "ح", "خ", "د", "ذ", "ر", "ز", "س", "ش", "ص",
    "ض", "ط", "ظ", "ع", "غ", "ف", "ق", "ك", "ل", "م", "ن", "هـ", "و", "ي",
)


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random
    arr = list(items)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


def letter_pool(letters: Sequence[str], count: int, rng: random.Random | None = None) -> list[str]:
    """At least ``count`` letters made of back-to-back shuffled alphabets."""
    if not letters:
        raise ValueError("alphabet is empty")
    pool: list[str] = []
    while len(pool) < count:
        pool.extend(shuffled(letters, rng))
    return pool[:count]
