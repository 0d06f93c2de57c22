"""Data models for catalog batches and match results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Field aliases accepted from catalog providers, checked in order.
BATCH_NUMBER_KEYS = ("batchNumber", "batch_number", "batchId", "batch_id")
BATCH_ID_KEYS = ("batchId", "batch_id")
EXPIRY_DATE_KEYS = ("expiryDate", "expiry_date")
ITEM_NAME_KEYS = ("itemName", "item_name", "productName", "product_name")
ITEM_CODE_KEYS = ("itemCode", "item_code")
QUANTITY_KEYS = ("quantity",)


def _lookup(source: Any, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if isinstance(source, Mapping):
            value = source.get(key)
        else:
            value = getattr(source, key, None)
        if value is not None:
            return value
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class BatchRecord:
    """A catalog batch in canonical form.

    ``source`` keeps the object the catalog handed us so callers get their
    own record back from a match.
    """

    batch_number: str = ""
    batch_id: str | None = None
    expiry_date: str | None = None
    item_name: str | None = None
    item_code: str | None = None
    quantity: int | None = None
    source: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_source(cls, source: Any) -> BatchRecord:
        """Build a record from a typed object or a key-value mapping."""
        if isinstance(source, BatchRecord):
            return source
        return cls(
            batch_number=_as_text(_lookup(source, BATCH_NUMBER_KEYS)) or "",
            batch_id=_as_text(_lookup(source, BATCH_ID_KEYS)),
            expiry_date=_as_text(_lookup(source, EXPIRY_DATE_KEYS)),
            item_name=_as_text(_lookup(source, ITEM_NAME_KEYS)),
            item_code=_as_text(_lookup(source, ITEM_CODE_KEYS)),
            quantity=_as_int(_lookup(source, QUANTITY_KEYS)),
            source=source,
        )

    def to_dict(self) -> dict:
        return {
            "batchNumber": self.batch_number,
            "batchId": self.batch_id,
            "expiryDate": self.expiry_date,
            "itemName": self.item_name,
            "itemCode": self.item_code,
            "quantity": self.quantity,
        }


def coerce_records(candidates: Any) -> list[BatchRecord]:
    """Canonicalize a catalog sequence at the matching boundary.

    Raises:
        TypeError: If ``candidates`` is None, a string/mapping, or not iterable.
    """
    if candidates is None:
        raise TypeError("candidates must be a sequence of batch records, got None")
    if isinstance(candidates, (str, bytes, Mapping)):
        raise TypeError(
            f"candidates must be a sequence of batch records, "
            f"got {type(candidates).__name__}"
        )
    try:
        items = list(candidates)
    except TypeError:
        raise TypeError(
            f"candidates must be iterable, got {type(candidates).__name__}"
        ) from None
    return [BatchRecord.from_source(item) for item in items]


@dataclass(frozen=True)
class MatchResult:
    """One candidate's outcome from exact/nearest matching."""

    batch: BatchRecord
    similarity: float
    expiry_valid: bool

    def to_dict(self) -> dict:
        return {
            "batch": self.batch.to_dict(),
            "similarity": self.similarity,
            "expiryValid": self.expiry_valid,
        }


@dataclass(frozen=True)
class MatchOutcome:
    """Exact matches, or the capped nearest fallback when there are none."""

    exact_matches: list[MatchResult] = field(default_factory=list)
    nearest_matches: list[MatchResult] = field(default_factory=list)

    @property
    def primary(self) -> list[MatchResult]:
        """The list the caller should present."""
        return self.exact_matches if self.exact_matches else self.nearest_matches

    @property
    def has_exact_match(self) -> bool:
        return bool(self.exact_matches)


@dataclass(frozen=True)
class RankedMatch:
    """A card-view candidate from weighted composite ranking."""

    batch: BatchRecord
    composite_score: float  # 0-100
    requested_quantity: int
    rank: int
    item_code: str | None = None
    quantity_inferred: bool = False
    purchase_order_number: str | None = None
    sale_order_number: str | None = None

    @property
    def confidence(self) -> float:
        return self.composite_score

    @property
    def rank_display(self) -> str:
        match self.rank:
            case 1:
                return "1st"
            case 2:
                return "2nd"
            case 3:
                return "3rd"
            case _:
                return f"{self.rank}th"

    def to_dict(self) -> dict:
        return {
            "batchNumber": self.batch.batch_number or self.batch.batch_id or "",
            "itemName": self.batch.item_name or "",
            "expiryDate": self.batch.expiry_date or "",
            "confidence": self.composite_score,
            "requestedQuantity": self.requested_quantity,
            "rank": self.rank,
            "itemCode": self.item_code,
            "purchaseOrderNumber": self.purchase_order_number,
            "saleOrderNumber": self.sale_order_number,
            "quantityInferred": self.quantity_inferred,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> RankedMatch:
        batch = BatchRecord(
            batch_number=data.get("batchNumber") or "",
            expiry_date=data.get("expiryDate") or None,
            item_name=data.get("itemName") or None,
            item_code=data.get("itemCode"),
        )
        return cls(
            batch=batch,
            composite_score=float(data.get("confidence") or 0),
            requested_quantity=int(data.get("requestedQuantity") or 0),
            rank=int(data.get("rank") or 1),
            item_code=data.get("itemCode"),
            quantity_inferred=bool(data.get("quantityInferred", False)),
            purchase_order_number=data.get("purchaseOrderNumber"),
            sale_order_number=data.get("saleOrderNumber"),
        )


@dataclass
class ScanOutcome:
    """Result of matching one capture's extracted text."""

    success: bool
    extracted_text: str = ""
    matches: list[MatchResult] = field(default_factory=list)
    nearest_matches: list[MatchResult] = field(default_factory=list)
    error: str | None = None
    elapsed_ms: float = 0.0
