"""Unit tests for :mod:`cdr_pipeline.classifier`."""

from __future__ import annotations

import pytest

from cdr_pipeline.classifier import NumberClassifier, classify, strip_non_digits
from cdr_pipeline.models import Invalid, InvalidReason, ServiceNumber, TenDigit


@pytest.mark.parametrize("raw", ["911", "9-1-1", "9.1.1", " 911 ", "(911)"])
def test_service_number_ignores_separators(raw: str) -> None:
    assert classify(raw) == ServiceNumber("911")


@pytest.mark.parametrize("code", ["911", "411", "511", "611", "711", "811"])
def test_every_whitelisted_code_is_a_service_number(code: str) -> None:
    outcome = classify(code)

    assert outcome == ServiceNumber(code)
    assert outcome.normalized == code
    assert outcome.description


@pytest.mark.parametrize("raw", ["123", "999", "000"])
def test_other_three_digit_codes_are_short_codes(raw: str) -> None:
    assert classify(raw) == Invalid(InvalidReason.SHORT_CODE)


@pytest.mark.parametrize(
    "raw",
    ["5551234567", "+1-555-123-4567", "1.555.123.4567", "(555) 123-4567", "15551234567"],
)
def test_ten_digit_numbers_are_normalised(raw: str) -> None:
    assert classify(raw) == TenDigit("5551234567")


@pytest.mark.parametrize("raw", ["0000000000", "1111111111", "1-111-111-1111"])
def test_all_zeros_or_ones_are_rejected(raw: str) -> None:
    assert classify(raw) == Invalid(InvalidReason.ALL_ZEROS_OR_ONES)


def test_ten_digits_starting_with_one_has_bad_area_code() -> None:
    assert classify("1234567890") == Invalid(InvalidReason.BAD_AREA_CODE_DIGIT)


def test_eleven_digits_with_country_code_then_bad_area_code() -> None:
    assert classify("11234567890") == Invalid(InvalidReason.BAD_AREA_CODE_DIGIT)
    assert classify("10234567890") == Invalid(InvalidReason.BAD_AREA_CODE_DIGIT)


@pytest.mark.parametrize("raw", ["21234567890", "+44 20 7946 0958", "0044207946095812"])
def test_long_numbers_are_international(raw: str) -> None:
    assert classify(raw) == Invalid(InvalidReason.INTERNATIONAL_LENGTH)


@pytest.mark.parametrize("raw", ["0911", "12345", "123456"])
def test_four_to_six_digits_are_short_codes(raw: str) -> None:
    assert classify(raw) == Invalid(InvalidReason.SHORT_CODE)


@pytest.mark.parametrize("raw", ["1", "12", "1234567", "555-1234", "123456789"])
def test_remaining_lengths_are_other_length(raw: str) -> None:
    assert classify(raw) == Invalid(InvalidReason.OTHER_LENGTH)


@pytest.mark.parametrize("raw", [None, "", "abc", "---", "   ", 5551234567, ["5551234567"]])
def test_empty_or_non_numeric(raw) -> None:
    assert classify(raw) == Invalid(InvalidReason.EMPTY_OR_NON_NUMERIC)


def test_non_ascii_digits_are_stripped() -> None:
    assert strip_non_digits("٥٥٥1234567") == "1234567"
    assert classify("٥٥٥1234567") == Invalid(InvalidReason.OTHER_LENGTH)


def test_invalid_outcome_keeps_digits_for_reporting() -> None:
    outcome = classify("+44 20 7946 0958")

    assert isinstance(outcome, Invalid)
    assert outcome.digits == "442079460958"
    assert outcome.normalized is None


@pytest.mark.parametrize("raw", ["+1 (555) 123-4567", "9-1-1", "411"])
def test_classifying_normalised_output_is_idempotent(raw: str) -> None:
    first = classify(raw)
    second = classify(first.normalized)

    assert second == first


def test_custom_whitelist() -> None:
    classifier = NumberClassifier(service_numbers=["311"])

    assert classifier.classify("311") == ServiceNumber("311")
    assert classifier.classify("911") == Invalid(InvalidReason.SHORT_CODE)
    assert classifier.service_numbers == frozenset({"311"})
