"""Batch-number and expiry matching of OCR text against a batch catalog."""

from .cache import MatchCache
from .config import (
    LoggingConfig,
    MatchingConfig,
    RankingConfig,
    SearchConfig,
    ThresholdConfig,
    load_config,
)
from .dates import DateFormatExpander
from .expiry import ExpiryMatcher
from .label_fields import LabelFields, extract_batch_information
from .locator import BatchNumberLocator
from .models import (
    BatchRecord,
    MatchOutcome,
    MatchResult,
    RankedMatch,
    ScanOutcome,
    coerce_records,
)
from .orchestrator import MatchOrchestrator
from .similarity import levenshtein, similarity
from .text import NormalizedText, normalize_code, normalize_text

__all__ = [
    "MatchOrchestrator",
    "BatchNumberLocator",
    "DateFormatExpander",
    "ExpiryMatcher",
    "MatchCache",
    "BatchRecord",
    "MatchResult",
    "MatchOutcome",
    "RankedMatch",
    "ScanOutcome",
    "coerce_records",
    "LabelFields",
    "extract_batch_information",
    "NormalizedText",
    "normalize_text",
    "normalize_code",
    "levenshtein",
    "similarity",
    "MatchingConfig",
    "ThresholdConfig",
    "SearchConfig",
    "RankingConfig",
    "LoggingConfig",
    "load_config",
]
