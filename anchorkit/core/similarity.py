"""
Edit-distance similarity scoring.

similarity(a, b) = (max_len - levenshtein(a, b)) / max_len, with two empty
strings scoring 1.0. Cost is O(len(a) * len(b)), so callers pre-filter
candidates by length before scoring.

Dependencies: rapidfuzz
System role: Fuzzy and context tier scoring for the anchor resolver
"""

from rapidfuzz.distance import Levenshtein


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Similarity ratio between two strings in [0.0, 1.0].

    Args:
        a: First string
        b: Second string

    Returns:
        float: 1.0 for identical (including both empty) strings
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - edit_distance(a, b)) / longest


def length_ratio(a: str, b: str) -> float:
    """
    Shorter length over longer length.

    This is an upper bound on ``similarity(a, b)``: at least the length
    difference in edits is always needed.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return min(len(a), len(b)) / longest
