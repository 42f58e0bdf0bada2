"""Engine constants, autopilot thresholds and environment settings."""

from dataclasses import dataclass
from typing import Tuple
import logging
import os


# Distribution shape limits on |skewness|
NORMAL_SKEW_LIMIT = 0.5
SYMMETRIC_SKEW_LIMIT = 1.0

# Tukey fence multiplier
IQR_MULTIPLIER = 1.5

# Type inference
TYPE_SAMPLE_SIZE = 100
TYPE_MATCH_RATIO = 0.8
BOOLEAN_TOKENS = frozenset({"true", "false", "0", "1"})
MISSING_TOKENS = frozenset({"", "nan", "null"})

SAMPLE_VALUE_COUNT = 5
KNN_NEIGHBORS = 5

LOG_FORMAT = "%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class AutopilotConfig:
    """Thresholds driving the autopilot decision rules."""
    drop_missing_pct: float = 40.0
    mean_missing_pct: float = 10.0
    ordinal_cardinality: int = 15
    target_keywords: Tuple[str, ...] = (
        "target", "label", "outcome", "y", "class", "churn", "survived", "price_range"
    )
    winsor_lower_pct: float = 5.0
    winsor_upper_pct: float = 95.0
    zscore_threshold: float = 3.0


DEFAULT_AUTOPILOT_CONFIG = AutopilotConfig()


class Settings:
    # ── Logging ──
    LOG_LEVEL: str = os.getenv("CLEANFLOW_LOG_LEVEL", "INFO")

    # ── Sessions ──
    MAX_SESSIONS: int = int(os.getenv("CLEANFLOW_MAX_SESSIONS", "20"))


settings = Settings()


def configure_logging(level: str = None) -> None:
    """Configure root logging for host applications embedding the engine."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
