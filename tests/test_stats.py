from cdr_pipeline.classifier import classify
from cdr_pipeline.models import InvalidReason
from cdr_pipeline.stats import MAX_INVALID_EXAMPLES, StatsAccumulator


def _record(accumulator: StatsAccumulator, *values) -> None:
    for value in values:
        accumulator.record(classify(value), value)


def test_counts_each_bucket_and_breakdown() -> None:
    accumulator = StatsAccumulator()

    _record(accumulator, "5551234567", "(555) 123-4567", "911", "411", "911", "123", "0000000000", "")

    stats = accumulator.statistics
    assert stats.total_processed == 8
    assert stats.ten_digit_count == 2
    assert stats.service_number_count == 3
    assert stats.invalid_count == 3
    assert stats.total_processed == stats.ten_digit_count + stats.service_number_count + stats.invalid_count
    assert stats.service_number_breakdown["911"] == 2
    assert stats.service_number_breakdown["411"] == 1
    assert stats.service_number_breakdown["811"] == 0
    assert stats.invalid_categories[InvalidReason.SHORT_CODE] == 1
    assert stats.invalid_categories[InvalidReason.ALL_ZEROS_OR_ONES] == 1
    assert stats.invalid_categories[InvalidReason.EMPTY_OR_NON_NUMERIC] == 1
    assert stats.unique_numbers == {"5551234567", "911", "411"}


def test_invalid_examples_are_formatted_and_bounded() -> None:
    accumulator = StatsAccumulator()

    _record(accumulator, "123", "0000000000", "1234567890", "555-1234")
    _record(accumulator, *["12"] * 20)

    examples = accumulator.statistics.invalid_examples
    assert len(examples) == MAX_INVALID_EXAMPLES
    assert examples[:4] == [
        "Invalid 3-digit: 123",
        "Invalid pattern: 0000000000",
        "Invalid area code: 1234567890",
        "Invalid length (7): 555-1234",
    ]
    assert accumulator.invalid_count == 24


def test_valid_outcomes_never_add_examples() -> None:
    accumulator = StatsAccumulator()

    _record(accumulator, "911", "2125551234")

    assert accumulator.statistics.invalid_examples == []
    assert accumulator.total_processed == 2


def test_snapshot_is_independent_of_later_updates() -> None:
    accumulator = StatsAccumulator()
    _record(accumulator, "911")

    snapshot = accumulator.snapshot()
    _record(accumulator, "2125551234")

    assert snapshot.total_processed == 1
    assert snapshot.unique_numbers == {"911"}
    assert accumulator.total_processed == 2


def test_separate_accumulators_do_not_share_state() -> None:
    first = StatsAccumulator()
    second = StatsAccumulator()

    _record(first, "911")

    assert second.total_processed == 0
    assert second.statistics.service_number_breakdown["911"] == 0
