"""Edit-distance similarity used by every matching tier."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

# Length mismatch above this ratio is treated as "not a typo" and scored 0.
DEFAULT_QUICK_REJECT_RATIO = 0.5


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance, every insert/delete/substitute costs 1."""
    return Levenshtein.distance(a, b)


def similarity(
    a: str, b: str, quick_reject_ratio: float = DEFAULT_QUICK_REJECT_RATIO
) -> float:
    """Normalized similarity in [0, 1].

    1.0 for identical strings, 0.0 if either side is empty or the lengths
    differ by more than ``quick_reject_ratio`` of the longer one. Otherwise
    ``1 - distance / max_len``. Thresholds downstream depend on this exact
    value, including the quick-reject short-circuit.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    max_len = max(len(a), len(b))
    min_len = min(len(a), len(b))
    if (max_len - min_len) / max_len > quick_reject_ratio:
        return 0.0

    return 1.0 - levenshtein(a, b) / max_len
