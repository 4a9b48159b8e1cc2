"""Data models shared by the classifier, processor, reporter, and I/O helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union


# --- Reference tables ---

SERVICE_NUMBERS: Tuple[str, ...] = ("911", "411", "511", "611", "711", "811")

SERVICE_NUMBER_DESCRIPTIONS: Dict[str, str] = {
    "911": "Emergency services",
    "411": "Directory assistance",
    "511": "Traffic information",
    "611": "Repair service",
    "711": "Telecommunications relay",
    "811": "Utility location",
}


class InvalidReason(str, Enum):
    """Why a phone value could not be normalised."""

    INTERNATIONAL_LENGTH = "international_length"
    SHORT_CODE = "short_code"
    OTHER_LENGTH = "other_length"
    ALL_ZEROS_OR_ONES = "all_zeros_or_ones"
    BAD_AREA_CODE_DIGIT = "bad_area_code_digit"
    EMPTY_OR_NON_NUMERIC = "empty_or_non_numeric"


INVALID_REASON_DESCRIPTIONS: Dict[InvalidReason, str] = {
    InvalidReason.INTERNATIONAL_LENGTH: "International / too long",
    InvalidReason.SHORT_CODE: "Short codes",
    InvalidReason.OTHER_LENGTH: "Invalid length",
    InvalidReason.ALL_ZEROS_OR_ONES: "Invalid pattern (all zeros or ones)",
    InvalidReason.BAD_AREA_CODE_DIGIT: "Invalid area code",
    InvalidReason.EMPTY_OR_NON_NUMERIC: "Empty or non-numeric",
}


# --- Classification outcomes ---

@dataclass(frozen=True, slots=True)
class ServiceNumber:
    """A whitelisted three digit service code such as 911."""

    code: str

    @property
    def normalized(self) -> str:
        return self.code

    @property
    def description(self) -> str:
        return SERVICE_NUMBER_DESCRIPTIONS.get(self.code, "")


@dataclass(frozen=True, slots=True)
class TenDigit:
    """A North American subscriber number reduced to exactly ten digits."""

    number: str

    @property
    def normalized(self) -> str:
        return self.number


@dataclass(frozen=True, slots=True)
class Invalid:
    """A phone value that could not be normalised.

    ``digits`` carries the stripped digit string (after any leading ``1``
    removal) so that samples can report the offending length.
    """

    reason: InvalidReason
    digits: str = field(default="", compare=False)

    @property
    def normalized(self) -> None:
        return None

    @property
    def description(self) -> str:
        return INVALID_REASON_DESCRIPTIONS[self.reason]


ClassificationOutcome = Union[ServiceNumber, TenDigit, Invalid]


def is_valid_outcome(outcome: ClassificationOutcome) -> bool:
    """Return ``True`` for outcomes that keep their value in a cleaned record."""

    return isinstance(outcome, (ServiceNumber, TenDigit))


# --- CDR records ---

RAW_FIELD_NAMES: Dict[str, str] = {
    "StartTime": "start_time",
    "BillDuration": "bill_duration",
    "CallPrice": "call_price",
    "ANI": "ani",
    "DNIS": "dnis",
    "CustomerIP": "customer_ip",
    "CallType": "call_type",
    "LRN": "lrn",
}


@dataclass(slots=True)
class RawCDRRecord:
    """One row of a CDR file exactly as the feed delivered it."""

    start_time: Any = None
    bill_duration: Any = None
    call_price: Any = None
    ani: Any = None
    dnis: Any = None
    customer_ip: Any = None
    call_type: Any = None
    lrn: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RawCDRRecord":
        """Build a record from a header-keyed row (``{"ANI": ..., "DNIS": ...}``)."""

        if not isinstance(row, Mapping):
            raise TypeError(f"CDR rows must be mappings, got {type(row).__name__}")

        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in row.items():
            attr = RAW_FIELD_NAMES.get(str(key).strip())
            if attr is None:
                extra[str(key)] = value
            else:
                values[attr] = value
        return cls(extra=extra, **values)


@dataclass(frozen=True, slots=True)
class CleanedCDRRecord:
    """A normalised CDR ready to be handed to the persistence collaborator."""

    start_time: Optional[datetime]
    bill_duration: int = 0
    call_price: Decimal = Decimal("0")
    ani: Optional[str] = None
    dnis: Optional[str] = None
    customer_ip: str = ""
    call_type: str = ""
    lrn: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON shape consumed by the store and backup files."""

        return {
            "StartTime": format_timestamp(self.start_time),
            "BillDuration": self.bill_duration,
            "CallPrice": float(self.call_price),
            "ANI": self.ani,
            "DNIS": self.dnis,
            "CustomerIP": self.customer_ip,
            "CallType": self.call_type,
            "LRN": self.lrn,
        }


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render an instant as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


# --- Batch statistics ---

def _empty_service_breakdown() -> Dict[str, int]:
    return {code: 0 for code in SERVICE_NUMBERS}


def _empty_invalid_breakdown() -> Dict[InvalidReason, int]:
    return {reason: 0 for reason in InvalidReason}


@dataclass
class BatchStatistics:
    """Counts collected while classifying every phone value of one batch."""

    total_processed: int = 0
    ten_digit_count: int = 0
    service_number_count: int = 0
    invalid_count: int = 0
    service_number_breakdown: Dict[str, int] = field(default_factory=_empty_service_breakdown)
    invalid_categories: Dict[InvalidReason, int] = field(default_factory=_empty_invalid_breakdown)
    invalid_examples: List[str] = field(default_factory=list)
    unique_numbers: Set[str] = field(default_factory=set)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def valid_count(self) -> int:
        return self.ten_digit_count + self.service_number_count

    @property
    def success_rate(self) -> float:
        """Percentage of processed values that normalised successfully."""

        if not self.total_processed:
            return 0.0
        return self.valid_count / self.total_processed * 100

    @property
    def diversity_ratio(self) -> float:
        """Unique normalised numbers as a percentage of all processed values."""

        if not self.total_processed:
            return 0.0
        return len(self.unique_numbers) / self.total_processed * 100
