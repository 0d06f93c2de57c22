"""Regex extraction of printed label fields from OCR text."""

from __future__ import annotations

import re
from dataclasses import dataclass

_BATCH = re.compile(r"BATCH[:\s]*([A-Z0-9]+)", re.IGNORECASE)
_LOT = re.compile(r"LOT[:\s]*([A-Z0-9]+)", re.IGNORECASE)
_MFG = re.compile(r"MFG[:\s]*(\d{2}/\d{2}/\d{4})", re.IGNORECASE)

# Tried in order; labelled forms beat bare dates.
_EXPIRY_PATTERNS: list[re.Pattern] = [
    re.compile(r"EXP[:\s]*(\d{2}/\d{2}/\d{4})", re.IGNORECASE),
    re.compile(r"EXPIRY[:\s]*(\d{2}/\d{2}/\d{4})", re.IGNORECASE),
    re.compile(r"(\d{2}/\d{2}/\d{4})"),
    re.compile(r"(\d{4}-\d{2}-\d{2})"),
]


@dataclass
class LabelFields:
    batch_number: str | None = None
    lot_number: str | None = None
    expiry_date: str | None = None
    manufacturing_date: str | None = None


def _first_group(pattern: re.Pattern, text: str) -> str | None:
    m = pattern.search(text)
    return m.group(1) if m else None


def extract_batch_information(text: str) -> LabelFields:
    """Pull batch, lot, expiry and manufacturing fields out of label text.

    Missing fields are None.
    """
    if not text:
        return LabelFields()

    expiry = None
    for pattern in _EXPIRY_PATTERNS:
        expiry = _first_group(pattern, text)
        if expiry:
            break

    return LabelFields(
        batch_number=_first_group(_BATCH, text),
        lot_number=_first_group(_LOT, text),
        expiry_date=expiry,
        manufacturing_date=_first_group(_MFG, text),
    )
