"""TOML configuration loader for batch matching."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class ThresholdConfig:
    similarity_threshold: float = 0.85  # exact match: score >= threshold
    nearest_floor: float = 0.60  # weak candidate: score > floor
    fallback_floor: float = 0.5  # nearest-only search: score > floor
    nearest_limit: int = 2


@dataclass
class SearchConfig:
    word_length_tolerance: int = 3
    early_exit_score: float = 0.95
    window_max_code_length: int = 6
    window_trigger_score: float = 0.8
    window_step: int = 2
    quick_reject_ratio: float = 0.5


@dataclass
class RankingConfig:
    batch_weight: float = 0.7
    expiry_weight: float = 0.3
    admission_score: float = 0.76
    top_k: int = 5


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class MatchingConfig:
    matching: ThresholdConfig = field(default_factory=ThresholdConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> MatchingConfig:
        """Raise ValueError for values the matchers cannot work with."""
        scores = {
            "matching.similarity_threshold": self.matching.similarity_threshold,
            "matching.nearest_floor": self.matching.nearest_floor,
            "matching.fallback_floor": self.matching.fallback_floor,
            "search.early_exit_score": self.search.early_exit_score,
            "search.window_trigger_score": self.search.window_trigger_score,
            "search.quick_reject_ratio": self.search.quick_reject_ratio,
            "ranking.batch_weight": self.ranking.batch_weight,
            "ranking.expiry_weight": self.ranking.expiry_weight,
            "ranking.admission_score": self.ranking.admission_score,
        }
        for name, value in scores.items():
            if not _is_number(value):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value!r}")

        counts = {
            "matching.nearest_limit": self.matching.nearest_limit,
            "search.window_step": self.search.window_step,
            "ranking.top_k": self.ranking.top_k,
        }
        for name, value in counts.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value!r}")

        lengths = {
            "search.word_length_tolerance": self.search.word_length_tolerance,
            "search.window_max_code_length": self.search.window_max_code_length,
        }
        for name, value in lengths.items():
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must not be negative")

        # getLevelName maps known names to their number, anything else to a str
        if not isinstance(logging.getLevelName(self.logging.level), int):
            raise ValueError(f"logging.level is not a log level: {self.logging.level!r}")
        return self


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(name: str, value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _as_int(name: str, value) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def load_config(path: str | Path | None = None) -> MatchingConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The similarity threshold and log level can be set via environment
    variables when the file leaves them out. Values that do not convert
    to the expected number type raise ValueError.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    mat = raw.get("matching", {})
    srch = raw.get("search", {})
    rnk = raw.get("ranking", {})
    log = raw.get("logging", {})

    defaults = MatchingConfig()

    # Resolve threshold and log level: config file → environment variable
    threshold = mat.get("similarity_threshold")
    if threshold is None:
        threshold = os.environ.get("MEDSCAN_SIMILARITY_THRESHOLD") or (
            defaults.matching.similarity_threshold
        )
    level = log.get("level") or os.environ.get(
        "MEDSCAN_LOG_LEVEL", defaults.logging.level
    )

    def score(section: dict, prefix: str, key: str, default: float) -> float:
        return _as_float(f"{prefix}.{key}", section.get(key, default))

    def count(section: dict, prefix: str, key: str, default: int) -> int:
        return _as_int(f"{prefix}.{key}", section.get(key, default))

    config = MatchingConfig(
        matching=ThresholdConfig(
            similarity_threshold=_as_float("matching.similarity_threshold", threshold),
            nearest_floor=score(
                mat, "matching", "nearest_floor", defaults.matching.nearest_floor
            ),
            fallback_floor=score(
                mat, "matching", "fallback_floor", defaults.matching.fallback_floor
            ),
            nearest_limit=count(
                mat, "matching", "nearest_limit", defaults.matching.nearest_limit
            ),
        ),
        search=SearchConfig(
            word_length_tolerance=count(
                srch, "search", "word_length_tolerance",
                defaults.search.word_length_tolerance,
            ),
            early_exit_score=score(
                srch, "search", "early_exit_score", defaults.search.early_exit_score
            ),
            window_max_code_length=count(
                srch, "search", "window_max_code_length",
                defaults.search.window_max_code_length,
            ),
            window_trigger_score=score(
                srch, "search", "window_trigger_score",
                defaults.search.window_trigger_score,
            ),
            window_step=count(srch, "search", "window_step", defaults.search.window_step),
            quick_reject_ratio=score(
                srch, "search", "quick_reject_ratio", defaults.search.quick_reject_ratio
            ),
        ),
        ranking=RankingConfig(
            batch_weight=score(rnk, "ranking", "batch_weight", defaults.ranking.batch_weight),
            expiry_weight=score(
                rnk, "ranking", "expiry_weight", defaults.ranking.expiry_weight
            ),
            admission_score=score(
                rnk, "ranking", "admission_score", defaults.ranking.admission_score
            ),
            top_k=count(rnk, "ranking", "top_k", defaults.ranking.top_k),
        ),
        logging=LoggingConfig(level=str(level).upper()),
    )
    return config.validate()
