"""Turns raw CDR rows into cleaned records while feeding batch statistics."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd
import pytz

from .classifier import NumberClassifier
from .models import (
    BatchStatistics,
    CleanedCDRRecord,
    ClassificationOutcome,
    RawCDRRecord,
    is_valid_outcome,
)
from .stats import StatsAccumulator

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCAL_TIMEZONE = "America/Los_Angeles"
DAYLIGHT_OFFSET_HOURS = -7
STANDARD_OFFSET_HOURS = -8

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")
_LEADING_DECIMAL = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

RowLike = Union[RawCDRRecord, Mapping[str, Any]]


# --- Field parsing ---

def parse_bill_duration(value: Any) -> int:
    """Parse the leading integer of ``value``; anything unusable becomes ``0``."""

    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return max(int(value), 0)

    match = _LEADING_INTEGER.match(str(value))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def parse_call_price(value: Any) -> Decimal:
    """Parse the leading decimal of ``value``; anything unusable becomes ``0``."""

    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    else:
        match = _LEADING_DECIMAL.match(str(value))
        if not match:
            return Decimal("0")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation:
            return Decimal("0")

    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


# --- Timestamp handling ---

def parse_start_time(value: Any, local_zone: pytz.BaseTzInfo) -> Optional[datetime]:
    """Parse ``value`` into an aware UTC instant, or ``None`` when it cannot be read.

    Values without an explicit offset are read as wall-clock time in ``local_zone``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            timestamp = pd.to_datetime(text)
        except (ValueError, TypeError, OverflowError):
            return None
        if pd.isna(timestamp):
            return None
        parsed = timestamp.to_pydatetime()

    if parsed.tzinfo is None:
        parsed = local_zone.localize(parsed)
    return parsed.astimezone(timezone.utc)


def is_daylight_saving(instant: datetime, local_zone: pytz.BaseTzInfo) -> bool:
    """Compare the zone's offset at ``instant`` with its offset on January 1 of the same year."""

    local = instant.astimezone(local_zone)
    january = local_zone.localize(datetime(local.year, 1, 1))
    return local.utcoffset() != january.utcoffset()


def adjust_start_time(instant: datetime, local_zone: pytz.BaseTzInfo) -> datetime:
    """Shift a UTC instant by the fixed Pacific offset that applies on its date."""

    offset = DAYLIGHT_OFFSET_HOURS if is_daylight_saving(instant, local_zone) else STANDARD_OFFSET_HOURS
    return instant + timedelta(hours=offset)


# --- Record processing ---

class RecordProcessor:
    """Cleans one raw CDR at a time.

    Phone fields that do not classify as a service number or ten digit number
    are nulled; the record itself is kept.
    """

    def __init__(
        self,
        classifier: Optional[NumberClassifier] = None,
        *,
        local_timezone: str = DEFAULT_LOCAL_TIMEZONE,
    ) -> None:
        self._classifier = classifier or NumberClassifier()
        self._local_zone = pytz.timezone(local_timezone)

    @property
    def classifier(self) -> NumberClassifier:
        return self._classifier

    @property
    def local_zone(self) -> pytz.BaseTzInfo:
        return self._local_zone

    def process(
        self,
        raw: RawCDRRecord,
        stats: StatsAccumulator,
        invalid_phone_samples: Optional[List[str]] = None,
        *,
        verbose: bool = False,
    ) -> CleanedCDRRecord:
        start_time = parse_start_time(raw.start_time, self._local_zone)
        if start_time is not None:
            start_time = adjust_start_time(start_time, self._local_zone)

        ani_outcome = self._classify_field("ANI", raw.ani, stats, verbose)
        dnis_outcome = self._classify_field("DNIS", raw.dnis, stats, verbose)

        cleaned = CleanedCDRRecord(
            start_time=start_time,
            bill_duration=parse_bill_duration(raw.bill_duration),
            call_price=parse_call_price(raw.call_price),
            ani=ani_outcome.normalized,
            dnis=dnis_outcome.normalized,
            customer_ip=_text(raw.customer_ip),
            call_type=_text(raw.call_type),
            lrn=_text(raw.lrn),
        )

        if invalid_phone_samples is not None:
            for label, value, outcome in (("ANI", raw.ani, ani_outcome), ("DNIS", raw.dnis, dnis_outcome)):
                if not is_valid_outcome(outcome) and _is_present(value):
                    invalid_phone_samples.append(f"{label}: {value}")

        return cleaned

    def _classify_field(
        self, label: str, value: Any, stats: StatsAccumulator, verbose: bool
    ) -> ClassificationOutcome:
        outcome = self._classifier.classify(value)
        stats.record(outcome, value)
        if verbose:
            LOGGER.debug("%s %r classified as %r", label, value, outcome)
        return outcome


@dataclass
class ProcessedBatch:
    """Everything a batch run produced before reporting."""

    records: List[CleanedCDRRecord] = field(default_factory=list)
    invalid_phone_samples: List[str] = field(default_factory=list)
    statistics: BatchStatistics = field(default_factory=BatchStatistics)
    batch_size: int = 0
    dropped: int = 0


def process_batch(
    rows: Iterable[RowLike],
    *,
    processor: Optional[RecordProcessor] = None,
    stats: Optional[StatsAccumulator] = None,
    verbose: bool = False,
) -> ProcessedBatch:
    """Clean every row of one batch, dropping only rows that raise."""

    processor = processor or RecordProcessor()
    stats = stats or StatsAccumulator()
    batch = ProcessedBatch(statistics=stats.statistics)

    for index, row in enumerate(rows):
        batch.batch_size += 1
        try:
            raw = row if isinstance(row, RawCDRRecord) else RawCDRRecord.from_mapping(row)
            batch.records.append(processor.process(raw, stats, batch.invalid_phone_samples, verbose=verbose))
        except Exception as exc:
            batch.dropped += 1
            LOGGER.warning("Error processing record %s: %s (%r)", index, exc, row)

    if verbose:
        LOGGER.debug(
            "Batch cleaned %s of %s records (%s dropped)", len(batch.records), batch.batch_size, batch.dropped
        )
    return batch


__all__ = [
    "DEFAULT_LOCAL_TIMEZONE",
    "ProcessedBatch",
    "RecordProcessor",
    "adjust_start_time",
    "is_daylight_saving",
    "parse_bill_duration",
    "parse_call_price",
    "parse_start_time",
    "process_batch",
]
