"""Composite scoring and requested-quantity assignment for card ranking."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .config import RankingConfig
from .models import BatchRecord

logger = logging.getLogger(__name__)


def composite_score(
    batch_similarity: float,
    expiry_similarity: float,
    ranking: RankingConfig | None = None,
) -> float:
    """Weighted blend of batch-number and expiry evidence, in [0, 1]."""
    ranking = ranking or RankingConfig()
    return (
        batch_similarity * ranking.batch_weight
        + expiry_similarity * ranking.expiry_weight
    )


@dataclass(frozen=True)
class QuantityAssignment:
    requested_quantity: int
    item_code: str | None
    inferred: bool


class QuantityAssigner:
    """Links accepted matches to requested quantities.

    ``hints`` maps item codes to requested quantities, in catalog order.
    A record whose own item code is in the hints gets that quantity.
    Otherwise the codes are handed out round-robin by the number of
    matches accepted so far. The round-robin result is a guess and is
    marked ``inferred``.
    """

    def __init__(self, hints: Mapping[str, int] | None = None) -> None:
        self._hints: dict[str, int] = dict(hints or {})
        self._codes = list(self._hints)

    def assign(self, record: BatchRecord, accepted_count: int) -> QuantityAssignment:
        if record.item_code and record.item_code in self._hints:
            return QuantityAssignment(
                requested_quantity=_to_quantity(self._hints[record.item_code]),
                item_code=record.item_code,
                inferred=False,
            )

        if not self._codes:
            return QuantityAssignment(
                requested_quantity=record.quantity or 0,
                item_code=record.item_code,
                inferred=False,
            )

        code = self._codes[accepted_count % len(self._codes)]
        logger.warning(
            "Quantity for batch %s inferred round-robin from item %s",
            record.batch_number,
            code,
        )
        return QuantityAssignment(
            requested_quantity=_to_quantity(self._hints[code]),
            item_code=code,
            inferred=True,
        )


def _to_quantity(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
