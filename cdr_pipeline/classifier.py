"""Classification and normalisation of raw phone-number strings."""
from __future__ import annotations

import re
from typing import Any, FrozenSet, Iterable

from .models import SERVICE_NUMBERS, ClassificationOutcome, Invalid, InvalidReason, ServiceNumber, TenDigit

_NON_DIGITS = re.compile(r"[^0-9]")
_BLOCKED_TEN_DIGIT = frozenset({"0000000000", "1111111111"})


def strip_non_digits(value: str) -> str:
    """Drop every character that is not an ASCII digit."""

    return _NON_DIGITS.sub("", value)


class NumberClassifier:
    """Maps a raw ANI/DNIS value onto exactly one :data:`ClassificationOutcome`.

    The classifier is pure: it neither logs nor touches statistics, so a single
    instance can be shared between batches and threads.
    """

    def __init__(self, service_numbers: Iterable[str] = SERVICE_NUMBERS) -> None:
        self._service_numbers: FrozenSet[str] = frozenset(service_numbers)

    @property
    def service_numbers(self) -> FrozenSet[str]:
        return self._service_numbers

    def classify(self, raw: Any) -> ClassificationOutcome:
        if not raw or not isinstance(raw, str):
            return Invalid(InvalidReason.EMPTY_OR_NON_NUMERIC)

        digits = strip_non_digits(raw)
        if not digits:
            return Invalid(InvalidReason.EMPTY_OR_NON_NUMERIC)

        if len(digits) == 3:
            if digits in self._service_numbers:
                return ServiceNumber(digits)
            return Invalid(InvalidReason.SHORT_CODE, digits)

        # North American numbers may carry the country code
        if len(digits) == 11 and digits.startswith("1"):
            digits = digits[1:]

        if len(digits) == 10:
            if digits in _BLOCKED_TEN_DIGIT:
                return Invalid(InvalidReason.ALL_ZEROS_OR_ONES, digits)
            if "2" <= digits[0] <= "9":
                return TenDigit(digits)
            return Invalid(InvalidReason.BAD_AREA_CODE_DIGIT, digits)

        if len(digits) > 10:
            return Invalid(InvalidReason.INTERNATIONAL_LENGTH, digits)
        if 4 <= len(digits) <= 6:
            return Invalid(InvalidReason.SHORT_CODE, digits)
        return Invalid(InvalidReason.OTHER_LENGTH, digits)


_DEFAULT_CLASSIFIER = NumberClassifier()


def classify(raw: Any) -> ClassificationOutcome:
    """Classify ``raw`` against the standard service-number whitelist."""

    return _DEFAULT_CLASSIFIER.classify(raw)


__all__ = ["NumberClassifier", "classify", "strip_non_digits"]
