"""Batch matching session: turns per-candidate scores into ranked matches."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .cache import MatchCache
from .config import MatchingConfig
from .dates import DateFormatExpander
from .expiry import ExpiryMatcher
from .locator import BatchNumberLocator
from .models import (
    BatchRecord,
    MatchOutcome,
    MatchResult,
    RankedMatch,
    ScanOutcome,
    coerce_records,
)
from .ranking import QuantityAssigner, QuantityAssignment, composite_score
from .text import NormalizedText, normalize_code, normalize_text

logger = logging.getLogger(__name__)


def _by_similarity(result: MatchResult) -> float:
    return result.similarity


class MatchOrchestrator:
    """Matches OCR text against a catalog of candidate batches.

    Owns the session caches; call :meth:`clear_caches` or :meth:`reset`
    between sessions, or use the orchestrator as a context manager.
    """

    def __init__(
        self,
        config: MatchingConfig | None = None,
        cache: MatchCache | None = None,
    ) -> None:
        self.config = (config or MatchingConfig()).validate()
        self.cache = cache if cache is not None else MatchCache()
        self.locator = BatchNumberLocator(self.config.search, self.cache)
        self.expander = DateFormatExpander(self.cache)
        self.expiry_matcher = ExpiryMatcher(self.config.search.quick_reject_ratio)
        self._last_extracted_text: str | None = None
        self._last_processed_at: datetime | None = None

    def __enter__(self) -> MatchOrchestrator:
        return self

    def __exit__(self, *exc) -> None:
        self.clear_caches()

    # -- Policy A ----------------------------------------------------------

    def find_matches(
        self,
        extracted_text: str,
        candidates: Any,
        similarity_threshold: float | None = None,
    ) -> MatchOutcome:
        """Exact matches (batch number and expiry), else the nearest fallback.

        A candidate is exact when its batch number scores at least the
        threshold and its expiry date is found in the text (or it has none).
        Strong batch matches with a missing expiry and weak matches above
        the nearest floor go to the nearest list, which is only returned,
        capped, when no exact match exists.

        Raises:
            TypeError: If ``candidates`` is not a sequence of records.
        """
        records = coerce_records(candidates)
        if similarity_threshold is None:
            similarity_threshold = self.config.matching.similarity_threshold
        text = normalize_text(extracted_text)
        logger.debug("Matching %d candidate batches", len(records))

        exact: list[MatchResult] = []
        nearest: list[MatchResult] = []
        for record in records:
            code = normalize_code(record.batch_number)
            if not code:
                continue

            score = self.locator.locate(code, text)
            if score >= similarity_threshold:
                if self.expiry_verified(record, text):
                    exact.append(MatchResult(record, score, expiry_valid=True))
                    logger.debug("Exact match %s (%.2f)", code, score)
                else:
                    nearest.append(MatchResult(record, score, expiry_valid=False))
                    logger.debug("Batch %s found but expiry missing", code)
            elif score > self.config.matching.nearest_floor:
                nearest.append(MatchResult(record, score, expiry_valid=False))

        if exact:
            exact.sort(key=_by_similarity, reverse=True)
            logger.info("Found %d exact matches", len(exact))
            return MatchOutcome(exact_matches=exact)

        nearest.sort(key=_by_similarity, reverse=True)
        top = nearest[: self.config.matching.nearest_limit]
        logger.info("No exact matches, returning %d nearest for review", len(top))
        return MatchOutcome(nearest_matches=top)

    def expiry_verified(self, record: BatchRecord, text: NormalizedText) -> bool:
        """True if the record's expiry appears in ``text``; vacuously true without one."""
        if not record.expiry_date:
            return True
        formats = self.expander.expand(record.expiry_date)
        return self.expiry_matcher.matches(formats, text)

    def find_nearest_matches(
        self,
        extracted_text: str,
        candidates: Any,
        max_results: int = 2,
    ) -> list[MatchResult]:
        """Batch-number-only fallback; ignores expiry dates entirely.

        Raises:
            TypeError: If ``candidates`` is not a sequence of records.
            ValueError: If ``max_results`` is less than 1.
        """
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results!r}")
        records = coerce_records(candidates)
        text = normalize_text(extracted_text)

        results: list[MatchResult] = []
        for record in records:
            code = normalize_code(record.batch_number)
            if not code:
                continue
            score = self.locator.locate(code, text)
            if score > self.config.matching.fallback_floor:
                results.append(MatchResult(record, score, expiry_valid=False))

        results.sort(key=_by_similarity, reverse=True)
        return results[:max_results]

    def process_text(
        self,
        extracted_text: str | None,
        candidates: Any,
        similarity_threshold: float | None = None,
    ) -> ScanOutcome:
        """Full capture flow for one frame of recognized text."""
        started = time.perf_counter()
        if extracted_text is None or not extracted_text.strip():
            logger.info("No text extracted from image")
            return ScanOutcome(success=False, error="No text extracted from image")

        outcome = self.find_matches(extracted_text, candidates, similarity_threshold)
        nearest = outcome.nearest_matches
        if not outcome.has_exact_match and not nearest:
            nearest = self.find_nearest_matches(
                extracted_text,
                candidates,
                max_results=self.config.matching.nearest_limit,
            )

        self._last_extracted_text = extracted_text
        self._last_processed_at = datetime.now(timezone.utc)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug("Matched capture in %.1f ms", elapsed_ms)
        return ScanOutcome(
            success=True,
            extracted_text=extracted_text,
            matches=outcome.exact_matches,
            nearest_matches=nearest,
            elapsed_ms=elapsed_ms,
        )

    # -- Policy B ----------------------------------------------------------

    def composite_score(self, batch_similarity: float, expiry_similarity: float) -> float:
        return composite_score(batch_similarity, expiry_similarity, self.config.ranking)

    def expiry_score(self, record: BatchRecord, text: NormalizedText) -> float:
        if not record.expiry_date:
            return 0.0
        formats = self.expander.expand(record.expiry_date)
        return self.expiry_matcher.score(formats, text)

    def find_top_ranked(
        self,
        extracted_text: str,
        candidates: Any,
        quantity_hints: Mapping[str, int] | None = None,
        purchase_order_number: str | None = None,
        sale_order_number: str | None = None,
    ) -> list[RankedMatch]:
        """Weighted composite ranking for the card view, best first.

        Quantities for admitted candidates come from ``quantity_hints``;
        see :class:`QuantityAssigner` for the round-robin fallback, whose
        results carry ``quantity_inferred=True``.
        """
        records = coerce_records(candidates)
        text = normalize_text(extracted_text)
        ranking = self.config.ranking
        assigner = QuantityAssigner(quantity_hints)

        admitted: list[tuple[float, BatchRecord, QuantityAssignment]] = []
        for record in records:
            code = normalize_code(record.batch_number)
            if not code:
                continue

            batch_similarity = self.locator.locate(code, text)
            expiry_similarity = self.expiry_score(record, text)
            combined = self.composite_score(batch_similarity, expiry_similarity)
            if combined < ranking.admission_score:
                continue

            assignment = assigner.assign(record, len(admitted))
            admitted.append((combined * 100, record, assignment))

        admitted.sort(key=lambda entry: entry[0], reverse=True)
        ranked = [
            RankedMatch(
                batch=record,
                composite_score=score,
                requested_quantity=assignment.requested_quantity,
                rank=position,
                item_code=assignment.item_code,
                quantity_inferred=assignment.inferred,
                purchase_order_number=purchase_order_number,
                sale_order_number=sale_order_number,
            )
            for position, (score, record, assignment) in enumerate(
                admitted[: ranking.top_k], start=1
            )
        ]
        logger.info("Ranked %d of %d admitted candidates", len(ranked), len(admitted))
        return ranked

    # -- lifecycle ---------------------------------------------------------

    def clear_caches(self) -> None:
        self.cache.clear()

    def reset(self) -> None:
        """Forget the last scan and drop cached scores."""
        self._last_extracted_text = None
        self._last_processed_at = None
        self.clear_caches()

    def status(self) -> dict:
        return {
            "similarity_cache_size": self.cache.similarity_size,
            "date_format_cache_size": self.cache.date_format_size,
            "last_extracted_text": self._last_extracted_text,
            "last_processed_at": (
                self._last_processed_at.isoformat()
                if self._last_processed_at
                else None
            ),
        }
