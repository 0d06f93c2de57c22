"""Session-scoped memoization for batch similarity and date formats."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class MatchCache:
    """Holds the similarity and date-format caches for one matching session.

    Values are only stored once fully computed. Writes go through a lock
    so the orchestrator can be shared between worker threads.

    Similarity scores are keyed by ``scope`` as well as code and text.
    Locators pass their search settings as the scope, so one cache can be
    shared by locators tuned differently.
    """

    def __init__(self) -> None:
        self._similarity: dict[tuple[tuple, str, str], float] = {}
        self._date_formats: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    # -- similarity --------------------------------------------------------

    def get_similarity(self, code: str, text: str, scope: tuple = ()) -> float | None:
        return self._similarity.get((scope, code, text))

    def put_similarity(
        self, code: str, text: str, score: float, scope: tuple = ()
    ) -> None:
        with self._lock:
            self._similarity[(scope, code, text)] = score

    # -- date formats ------------------------------------------------------

    def get_formats(self, expiry_date: str) -> list[str] | None:
        formats = self._date_formats.get(expiry_date)
        return list(formats) if formats is not None else None

    def put_formats(self, expiry_date: str, formats: list[str]) -> None:
        with self._lock:
            self._date_formats[expiry_date] = list(formats)

    # -- lifecycle ---------------------------------------------------------

    @property
    def similarity_size(self) -> int:
        return len(self._similarity)

    @property
    def date_format_size(self) -> int:
        return len(self._date_formats)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            dropped = len(self._similarity) + len(self._date_formats)
            self._similarity.clear()
            self._date_formats.clear()
        logger.info("Match caches cleared (%d entries)", dropped)
