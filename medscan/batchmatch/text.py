"""OCR text normalization and tokenization."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedText:
    """Uppercased, trimmed OCR text with its word tokens."""

    text: str
    words: tuple[str, ...] = ()
    word_set: frozenset[str] = field(default_factory=frozenset)


def normalize_code(value: str | None) -> str:
    """Trim and uppercase a single identifier (batch number, date format)."""
    if value is None:
        return ""
    return str(value).strip().upper()


def normalize_text(raw: str | NormalizedText | None) -> NormalizedText:
    """Normalize raw OCR output for matching.

    Multi-line output is handled like any other whitespace. Passing an
    already normalized value returns it unchanged, so calling this twice
    is the same as calling it once.
    """
    if isinstance(raw, NormalizedText):
        return raw
    text = normalize_code(raw)
    if not text:
        return NormalizedText(text="")
    words = tuple(_WHITESPACE.split(text))
    return NormalizedText(text=text, words=words, word_set=frozenset(words))
