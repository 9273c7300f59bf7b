# src/core/similarity.py — v1
"""String and set similarity used for source conflict detection."""

from __future__ import annotations

from collections.abc import Iterable


def _bigrams(text: str) -> set[str]:
    lowered = text.lower()
    return {lowered[i : i + 2] for i in range(len(lowered) - 1)}


def dice_similarity(a: str, b: str) -> float:
    """Dice coefficient over the character bigram sets of two strings.

    Returns:
        1.0 for identical strings, 0.0 when either string is shorter
        than two characters, otherwise 2|A∩B| / (|A| + |B|).
    """
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    first, second = _bigrams(a), _bigrams(b)
    return 2 * len(first & second) / (len(first) + len(second))


def set_overlap(a: Iterable[object], b: Iterable[object]) -> float:
    """Shared members over the size of the larger set (string-compared).

    Two empty collections overlap fully.
    """
    first = {str(x) for x in a}
    second = {str(x) for x in b}
    largest = max(len(first), len(second))
    if largest == 0:
        return 1.0
    return len(first & second) / largest
