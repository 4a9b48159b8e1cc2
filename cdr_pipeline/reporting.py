"""End-of-batch summaries and the invalid-number alert decision."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from .models import (
    INVALID_REASON_DESCRIPTIONS,
    SERVICE_NUMBER_DESCRIPTIONS,
    BatchStatistics,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MIN_ALERT_COUNT = 5
DEFAULT_ALERT_RATIO = 0.10
SUMMARY_EXAMPLE_LIMIT = 5
ALERT_EXAMPLE_LIMIT = 10
QUALITY_WARNING_RATE = 95.0
DIVERSITY_WARNING_RATE = 10.0


@dataclass(frozen=True)
class Alert:
    """Subject/body pair handed to a notification collaborator."""

    subject: str
    body: str


@dataclass
class BatchReport:
    """Outcome of :meth:`BatchReporter.summarize`."""

    summary: str
    alert: Optional[Alert] = None
    threshold: int = 0
    invalid_phone_count: int = 0
    throughput: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def alerted(self) -> bool:
        return self.alert is not None


def _percent(part: int, whole: int) -> str:
    if not whole:
        return "0.0%"
    return f"{part / whole * 100:.1f}%"


class BatchReporter:
    """Inspects batch statistics and decides whether to raise an alert."""

    def __init__(
        self,
        *,
        min_alert_count: int = DEFAULT_MIN_ALERT_COUNT,
        alert_ratio: float = DEFAULT_ALERT_RATIO,
    ) -> None:
        self._min_alert_count = int(min_alert_count)
        self._alert_ratio = Decimal(str(alert_ratio))

    def alert_threshold(self, batch_size: int) -> int:
        """``max(min_alert_count, floor(batch_size * alert_ratio))``."""

        return max(self._min_alert_count, math.floor(Decimal(batch_size) * self._alert_ratio))

    def summarize(
        self,
        stats: BatchStatistics,
        invalid_phone_samples: Sequence[str],
        batch_size: int,
        *,
        finished_at: Optional[datetime] = None,
    ) -> BatchReport:
        finished_at = finished_at or datetime.now(timezone.utc)
        elapsed = (finished_at - stats.started_at).total_seconds()
        throughput = stats.total_processed / elapsed if elapsed > 0 else 0.0

        threshold = self.alert_threshold(batch_size)
        invalid_count = len(invalid_phone_samples)

        report = BatchReport(
            summary=self.render_summary(stats, throughput=throughput),
            threshold=threshold,
            invalid_phone_count=invalid_count,
            throughput=throughput,
            warnings=self._derived_warnings(stats),
        )
        for warning in report.warnings:
            LOGGER.warning(warning)

        if invalid_count >= threshold:
            report.alert = self.build_alert(stats, invalid_phone_samples, batch_size, throughput=throughput)
        elif invalid_count:
            LOGGER.warning(
                "Found %s invalid phone numbers (below alert threshold of %s)", invalid_count, threshold
            )
        return report

    def render_summary(
        self,
        stats: BatchStatistics,
        *,
        throughput: float = 0.0,
        example_limit: int = SUMMARY_EXAMPLE_LIMIT,
    ) -> str:
        total = stats.total_processed
        lines = [
            "=== Phone Number Processing Statistics ===",
            f"Total phone numbers processed: {total}",
            f"10-digit numbers: {stats.ten_digit_count} ({_percent(stats.ten_digit_count, total)})",
            f"Service numbers: {stats.service_number_count} ({_percent(stats.service_number_count, total)})",
            f"Invalid numbers: {stats.invalid_count} ({_percent(stats.invalid_count, total)})",
        ]

        if stats.service_number_count:
            lines.append("")
            lines.append("Service Number Breakdown:")
            for code, count in stats.service_number_breakdown.items():
                if count:
                    description = SERVICE_NUMBER_DESCRIPTIONS.get(code, "Unknown")
                    lines.append(f"  {code} ({description}): {count} calls")

        if stats.invalid_count:
            lines.append("")
            lines.append("Invalid Number Categories:")
            for reason, count in stats.invalid_categories.items():
                if count:
                    lines.append(f"  {INVALID_REASON_DESCRIPTIONS[reason]}: {count}")

        examples = stats.invalid_examples[:example_limit]
        if examples:
            lines.append("")
            lines.append("Sample Invalid Numbers:")
            lines.extend(f"  {example}" for example in examples)

        lines.append("")
        lines.append(f"Throughput: {throughput:.1f} numbers/second")
        lines.append(
            f"Unique numbers: {len(stats.unique_numbers)} ({stats.diversity_ratio:.1f}% diversity)"
        )
        return "\n".join(lines)

    def build_alert(
        self,
        stats: BatchStatistics,
        invalid_phone_samples: Sequence[str],
        batch_size: int,
        *,
        throughput: float = 0.0,
    ) -> Alert:
        count = len(invalid_phone_samples)
        lines = [
            f"Found {count} invalid phone numbers out of {batch_size} total records.",
            "",
            "Examples:",
        ]
        lines.extend(invalid_phone_samples[:ALERT_EXAMPLE_LIMIT])
        if count > ALERT_EXAMPLE_LIMIT:
            lines.append(f"... and {count - ALERT_EXAMPLE_LIMIT} more")
        lines.append("")
        lines.append(self.render_summary(stats, throughput=throughput, example_limit=ALERT_EXAMPLE_LIMIT))
        return Alert(subject=f"High Invalid Phone Number Count: {count}", body="\n".join(lines))

    @staticmethod
    def _derived_warnings(stats: BatchStatistics) -> List[str]:
        if not stats.total_processed:
            return []
        warnings: List[str] = []
        if stats.success_rate < QUALITY_WARNING_RATE:
            warnings.append(
                f"Data quality warning: only {stats.success_rate:.1f}% of phone numbers were valid"
            )
        if stats.diversity_ratio < DIVERSITY_WARNING_RATE:
            warnings.append(
                f"Diversity warning: only {len(stats.unique_numbers)} unique numbers "
                f"across {stats.total_processed} processed ({stats.diversity_ratio:.1f}%)"
            )
        return warnings


__all__ = ["Alert", "BatchReport", "BatchReporter"]
