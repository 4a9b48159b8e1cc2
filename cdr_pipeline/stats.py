"""Per-batch accumulation of classification outcomes."""
from __future__ import annotations

import copy
from typing import Any

from .models import BatchStatistics, ClassificationOutcome, Invalid, InvalidReason, ServiceNumber, TenDigit

MAX_INVALID_EXAMPLES = 10


def format_invalid_example(outcome: Invalid, raw_input: Any) -> str:
    """Return a human readable sample line for an invalid phone value."""

    reason = outcome.reason
    if reason is InvalidReason.SHORT_CODE and len(outcome.digits) == 3:
        label = "Invalid 3-digit"
    elif reason is InvalidReason.ALL_ZEROS_OR_ONES:
        label = "Invalid pattern"
    elif reason is InvalidReason.BAD_AREA_CODE_DIGIT:
        label = "Invalid area code"
    elif reason is InvalidReason.EMPTY_OR_NON_NUMERIC:
        label = "Empty or non-numeric"
    else:
        label = f"Invalid length ({len(outcome.digits)})"
    return f"{label}: {'' if raw_input is None else raw_input}"


class StatsAccumulator:
    """Mutable tally of outcomes for a single batch.

    Not thread-safe: each batch owns its own accumulator.
    """

    def __init__(self, statistics: BatchStatistics | None = None) -> None:
        self._stats = statistics or BatchStatistics()

    def record(self, outcome: ClassificationOutcome, raw_input: Any) -> None:
        stats = self._stats
        stats.total_processed += 1

        if isinstance(outcome, ServiceNumber):
            stats.service_number_count += 1
            stats.service_number_breakdown[outcome.code] = stats.service_number_breakdown.get(outcome.code, 0) + 1
            stats.unique_numbers.add(outcome.code)
        elif isinstance(outcome, TenDigit):
            stats.ten_digit_count += 1
            stats.unique_numbers.add(outcome.number)
        elif isinstance(outcome, Invalid):
            stats.invalid_count += 1
            stats.invalid_categories[outcome.reason] = stats.invalid_categories.get(outcome.reason, 0) + 1
            if len(stats.invalid_examples) < MAX_INVALID_EXAMPLES:
                stats.invalid_examples.append(format_invalid_example(outcome, raw_input))
        else:
            raise TypeError(f"Unknown classification outcome: {outcome!r}")

    @property
    def statistics(self) -> BatchStatistics:
        """The live statistics object owned by this accumulator."""

        return self._stats

    def snapshot(self) -> BatchStatistics:
        """Return an independent copy of the current statistics."""

        return copy.deepcopy(self._stats)

    # Convenience read accessors
    @property
    def total_processed(self) -> int:
        return self._stats.total_processed

    @property
    def ten_digit_count(self) -> int:
        return self._stats.ten_digit_count

    @property
    def service_number_count(self) -> int:
        return self._stats.service_number_count

    @property
    def invalid_count(self) -> int:
        return self._stats.invalid_count


__all__ = ["MAX_INVALID_EXAMPLES", "StatsAccumulator", "format_invalid_example"]
