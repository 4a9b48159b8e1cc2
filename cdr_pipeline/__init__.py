"""Top-level package for the CDR phone-number cleaning pipeline."""

from . import models  # noqa: F401
from .classifier import NumberClassifier, classify
from .models import (
    BatchStatistics,
    CleanedCDRRecord,
    ClassificationOutcome,
    Invalid,
    InvalidReason,
    RawCDRRecord,
    ServiceNumber,
    TenDigit,
)
from .processor import RecordProcessor, process_batch
from .reporting import Alert, BatchReport, BatchReporter
from .stats import StatsAccumulator

__all__ = [
    "Alert",
    "BatchReport",
    "BatchReporter",
    "BatchStatistics",
    "CleanedCDRRecord",
    "ClassificationOutcome",
    "Invalid",
    "InvalidReason",
    "NumberClassifier",
    "RawCDRRecord",
    "RecordProcessor",
    "ServiceNumber",
    "StatsAccumulator",
    "TenDigit",
    "classify",
    "process_batch",
    "ingestion",
    "orchestrator",
]
