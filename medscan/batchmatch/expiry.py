"""Expiry date verification against OCR text."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .similarity import DEFAULT_QUICK_REJECT_RATIO, similarity
from .text import NormalizedText, normalize_code

logger = logging.getLogger(__name__)


class ExpiryMatcher:
    """Checks generated date formats against normalized OCR text."""

    def __init__(self, quick_reject_ratio: float = DEFAULT_QUICK_REJECT_RATIO) -> None:
        self._quick_reject_ratio = quick_reject_ratio

    def matches(self, formats: Iterable[str], text: NormalizedText) -> bool:
        """True on the first format found verbatim (case-insensitive) in ``text``."""
        for fmt in formats:
            candidate = normalize_code(fmt)
            if candidate and candidate in text.text:
                logger.debug("Expiry format %r found in text", fmt)
                return True
        logger.debug("No expiry format found in text")
        return False

    def score(self, formats: Iterable[str], text: NormalizedText) -> float:
        """Graded expiry evidence in [0, 1].

        1.0 when any format occurs verbatim, otherwise the best similarity
        between any format and any OCR word.
        """
        candidates = [c for c in (normalize_code(f) for f in formats) if c]
        if self.matches(candidates, text):
            return 1.0

        best = 0.0
        for candidate in candidates:
            for word in text.words:
                best = max(best, similarity(candidate, word, self._quick_reject_ratio))
        return best
