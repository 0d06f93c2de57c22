"""Expiry date expansion into every textual form a label may print."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

from .cache import MatchCache

logger = logging.getLogger(__name__)

# Recognized input patterns, tried in order. Day-first wins over
# month-first for ambiguous numeric dates.
INPUT_PATTERNS: tuple[str, ...] = (
    "yyyy-MM-dd", "dd/MM/yyyy", "MM/dd/yyyy", "dd-MM-yyyy",
    "MM-dd-yyyy", "yyyy/MM/dd", "dd MMM yyyy", "MMM dd yyyy",
    "dd-MMM-yyyy", "yyyy-MMM-dd", "ddMMyyyy", "MMyyyy",
    "dd.MM.yyyy", "MM.yyyy", "yyyy.MM.dd", "ddMMyy", "MMyy",
    "dd/MM/yy", "MM/yy", "yyyy-MM", "yyyyMMdd",
)

OUTPUT_PATTERNS: tuple[str, ...] = (
    # FDA medical device standard
    "yyyy-MM-dd",
    # US hospital
    "MM/dd/yyyy", "MM/dd/yy", "MM/yyyy", "MM/yy",
    "MM-dd-yyyy", "MM-yyyy", "MM.yyyy",
    # European
    "dd/MM/yyyy", "dd/MM/yy", "dd.MM.yyyy", "dd.MM.yy",
    "dd-MM-yyyy", "dd-MM-yy",
    # International
    "yyyy/MM/dd", "yyyy.MM.dd", "yyyy MM dd", "yyyy-MM", "yyyy/MM",
    # NDC / barcode compact
    "yyyyMMdd", "ddMMyyyy", "MMyyyy", "ddMMyy", "MMyy", "yyMM",
    "yyyyMM", "yyMMdd",
    # Month names
    "dd MMM yyyy", "MMM dd yyyy", "dd-MMM-yyyy", "MMM-yyyy",
    "yyyy-MMM-dd", "yyyy MMM dd", "dd MMM yy", "MMM dd yy",
    "MMM yy", "MMMyyyy", "MMMdd", "MMM yyyy", "MMM-yy", "MMM/yyyy",
    "MMMyy", "ddMMMyyyy", "ddMMMyy", "dd/MMM/yyyy", "MMM dd, yyyy",
    "MMMM yyyy", "dd MMMM yyyy", "MMMM dd, yyyy",
    # Short label forms
    "MM.yy", "MM-yy", "yy.MM", "yy-MM", "yy/MM",
    # Unpadded month / day
    "Myy", "M/yy", "M/yyyy", "dd/M/yy", "dd/M/yyyy",
    "M/dd/yy", "M/dd/yyyy", "d/M/yyyy", "M/d/yyyy", "d.M.yyyy",
)

# Hospital label keywords and the rendered form each one precedes.
CONTEXT_PREFIXES: tuple[tuple[str, str], ...] = (
    ("EXP", "basic"),
    ("EXP", "short"),
    ("EXP", "iso"),
    ("EXP", "month_year"),
    ("EXPIRY", "basic"),
    ("EXPIRES", "basic"),
    ("USE BY", "basic"),
    ("BEST BY", "basic"),
    ("DISCARD AFTER", "basic"),
    ("VALID UNTIL", "basic"),
    ("GOOD UNTIL", "basic"),
    ("LOT", "short"),
    ("BATCH", "short"),
    ("MFG", "basic"),
    ("STERILE UNTIL", "basic"),
    ("DO NOT USE AFTER", "basic"),
)

_CONTEXT_FORMS: dict[str, str] = {
    "basic": "MM/dd/yyyy",
    "short": "MM/yy",
    "iso": "yyyy-MM-dd",
    "month_year": "MMM yyyy",
}

_MONTH_ABBR = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)
_MONTH_NAMES = (
    "JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
    "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER",
)

_TOKEN = re.compile(r"y+|M+|d+")

_STRPTIME_TOKENS = {"yyyy": "%Y", "yy": "%y", "MMM": "%b", "MM": "%m", "dd": "%d"}


def _to_strptime(pattern: str) -> str:
    def repl(m: re.Match) -> str:
        try:
            return _STRPTIME_TOKENS[m.group(0)]
        except KeyError:
            raise ValueError(f"unsupported input token {m.group(0)!r}") from None

    return _TOKEN.sub(repl, pattern)


def _render_token(token: str, d: date) -> str:
    match token:
        case "yyyy":
            return f"{d.year:04d}"
        case "yy":
            return f"{d.year % 100:02d}"
        case "MMMM":
            return _MONTH_NAMES[d.month - 1]
        case "MMM":
            return _MONTH_ABBR[d.month - 1]
        case "MM":
            return f"{d.month:02d}"
        case "M":
            return str(d.month)
        case "dd":
            return f"{d.day:02d}"
        case "d":
            return str(d.day)
        case _:
            raise ValueError(f"unsupported output token {token!r}")


def render(pattern: str, d: date) -> str:
    """Render ``d`` using a yyyy/MM/dd style pattern.

    Raises:
        ValueError: If the pattern contains an unsupported token.
    """
    return _TOKEN.sub(lambda m: _render_token(m.group(0), d), pattern)


def parse_date(value: str) -> date | None:
    """Parse ``value`` with the first matching input pattern, else None."""
    cleaned = value.strip()
    if not cleaned:
        return None

    for pattern in INPUT_PATTERNS:
        try:
            return datetime.strptime(cleaned, _to_strptime(pattern)).date()
        except ValueError:
            continue

    # Catalog exports sometimes carry full ISO timestamps
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00")).date()
    except ValueError:
        return None


class DateFormatExpander:
    """Generates the textual representations of an expiry date."""

    def __init__(self, cache: MatchCache | None = None) -> None:
        self._cache = cache if cache is not None else MatchCache()

    def expand(self, expiry_date: str) -> list[str]:
        """Return every rendering of ``expiry_date``, shortest first.

        Unparsable input yields ``[expiry_date]``. Never raises.
        """
        cached = self._cache.get_formats(expiry_date)
        if cached is not None:
            return cached

        formats = self._generate(expiry_date)
        self._cache.put_formats(expiry_date, formats)
        logger.debug(
            "Generated %d date formats from %r", len(formats), expiry_date
        )
        return formats

    def _generate(self, expiry_date: str) -> list[str]:
        try:
            parsed = parse_date(expiry_date)
        except (ValueError, TypeError, OverflowError, AttributeError):
            logger.exception("Date parsing failed for %r", expiry_date)
            return [expiry_date]

        if parsed is None:
            logger.info("Could not parse expiry date %r, using as-is", expiry_date)
            return [expiry_date]

        formats: list[str] = []
        for pattern in OUTPUT_PATTERNS:
            try:
                formats.append(render(pattern, parsed))
            except (ValueError, IndexError):
                continue
        formats.extend(self._context_variants(parsed))

        # dict.fromkeys keeps first-seen order; the sort is stable
        unique = list(dict.fromkeys(formats))
        unique.sort(key=len)
        return unique

    @staticmethod
    def _context_variants(d: date) -> list[str]:
        forms = {name: render(pattern, d) for name, pattern in _CONTEXT_FORMS.items()}
        return [f"{keyword} {forms[form]}" for keyword, form in CONTEXT_PREFIXES]
