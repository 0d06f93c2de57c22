"""Tiered batch-number search over normalized OCR text."""

from __future__ import annotations

import logging
from dataclasses import astuple

from .cache import MatchCache
from .config import SearchConfig
from .similarity import similarity
from .text import NormalizedText

logger = logging.getLogger(__name__)


class BatchNumberLocator:
    """Finds how well a batch number appears in OCR text.

    Three tiers, first success wins:

    1. exact substring of the whole text (1.0)
    2. fuzzy match against each word of similar length
    3. a sliding window over the raw text, for short codes only

    Tiers 2 and 3 stop as soon as a score reaches ``early_exit_score``, so
    the result is "good enough" rather than guaranteed global best.
    """

    def __init__(
        self,
        search: SearchConfig | None = None,
        cache: MatchCache | None = None,
    ) -> None:
        self._search = search or SearchConfig()
        self._cache = cache if cache is not None else MatchCache()
        self.cache_scope = astuple(self._search)

    def locate(self, code: str, text: NormalizedText) -> float:
        """Best similarity of ``code`` (already normalized) within ``text``."""
        if not code:
            return 0.0

        cached = self._cache.get_similarity(code, text.text, self.cache_scope)
        if cached is not None:
            return cached

        if code in text.text:
            score = 1.0
        else:
            score = self._word_scan(code, text.words)
            if (
                score < self._search.window_trigger_score
                and len(code) <= self._search.window_max_code_length
            ):
                score = max(score, self._window_scan(code, text.text))

        logger.debug("Best similarity for %s: %.0f%%", code, score * 100)
        self._cache.put_similarity(code, text.text, score, self.cache_scope)
        return score

    def _word_scan(self, code: str, words: tuple[str, ...]) -> float:
        best = 0.0
        for word in words:
            if abs(len(word) - len(code)) > self._search.word_length_tolerance:
                continue
            score = similarity(code, word, self._search.quick_reject_ratio)
            if score > best:
                best = score
                if best >= self._search.early_exit_score:
                    break
        return best

    def _window_scan(self, code: str, text: str) -> float:
        best = 0.0
        width = len(code)
        # Half-resolution scan: alignments at odd offsets are skipped
        for start in range(0, len(text) - width + 1, self._search.window_step):
            score = similarity(
                code, text[start:start + width], self._search.quick_reject_ratio
            )
            if score > best:
                best = score
                if best >= self._search.early_exit_score:
                    break
        return best
