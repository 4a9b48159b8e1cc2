"""Batch orchestrator that cleans CDR files and routes their results."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..ingestion.exporters import write_backup
from ..ingestion.loaders import DEFAULT_PATTERN, discover_cdr_files, load_cdr_records
from ..models import BatchStatistics, CleanedCDRRecord
from ..notify import LoggingNotifier, Notifier
from ..processor import RecordProcessor, RowLike, process_batch
from ..reporting import Alert, BatchReport, BatchReporter
from ..stats import StatsAccumulator
from ..store import CDRStore

LOGGER = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch (normally one source file)."""

    name: str
    records: List[CleanedCDRRecord] = field(default_factory=list)
    statistics: BatchStatistics = field(default_factory=BatchStatistics)
    report: Optional[BatchReport] = None
    batch_size: int = 0
    dropped: int = 0
    stored: Optional[int] = None
    backup_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Totals across every batch of a run."""

    files_processed: int = 0
    total_records: int = 0
    service_numbers: int = 0
    failed: List[str] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: Iterable[BatchResult]) -> "RunSummary":
        summary = cls()
        for result in results:
            if not result.succeeded:
                summary.failed.append(result.name)
                continue
            summary.files_processed += 1
            summary.total_records += len(result.records)
            summary.service_numbers += result.statistics.service_number_count
        return summary


class BatchOrchestrator:
    """Runs the cleaning pipeline for each batch and hands results to collaborators."""

    def __init__(
        self,
        *,
        processor: Optional[RecordProcessor] = None,
        reporter: Optional[BatchReporter] = None,
        notifiers: Optional[Sequence[Notifier]] = None,
        store: Optional[CDRStore] = None,
        backup_dir: Optional[str | Path] = None,
        delete_processed: bool = False,
        concurrent: bool = False,
        max_workers: Optional[int] = None,
        raise_on_error: bool = False,
        verbose: bool = False,
    ) -> None:
        self._processor = processor or RecordProcessor()
        self._reporter = reporter or BatchReporter()
        self._notifiers = list(notifiers) if notifiers is not None else [LoggingNotifier()]
        self._store = store
        self._backup_dir = Path(backup_dir) if backup_dir else None
        self._delete_processed = delete_processed
        self._concurrent = concurrent
        self._max_workers = max_workers
        self._raise_on_error = raise_on_error
        self._verbose = verbose

    @property
    def notifiers(self) -> List[Notifier]:
        return list(self._notifiers)

    def run_batch(self, rows: Iterable[RowLike], *, name: str = "batch") -> BatchResult:
        """Clean one batch, report on it, and dispatch its alert if one fires."""

        stats = StatsAccumulator()
        processed = process_batch(rows, processor=self._processor, stats=stats, verbose=self._verbose)
        report = self._reporter.summarize(
            stats.statistics, processed.invalid_phone_samples, processed.batch_size
        )
        LOGGER.info("Processed %s of %s CDR records from %s", len(processed.records), processed.batch_size, name)
        LOGGER.info("%s", report.summary)

        if report.alert is not None:
            self.dispatch(report.alert)

        return BatchResult(
            name=name,
            records=processed.records,
            statistics=stats.snapshot(),
            report=report,
            batch_size=processed.batch_size,
            dropped=processed.dropped,
        )

    def run_file(self, path: str | Path) -> BatchResult:
        """Load, clean, back up and store a single CDR file."""

        file_path = Path(path)
        try:
            rows = load_cdr_records(file_path)
        except Exception as exc:
            return BatchResult(name=file_path.name, error=self._handle_failure(file_path, exc))

        result = self.run_batch(rows, name=file_path.name)
        try:
            if self._backup_dir is not None:
                result.backup_path = write_backup(result.records, self._backup_dir, file_path.name)
                LOGGER.info("Backup saved: %s", result.backup_path)
            if self._store is not None:
                result.stored = self._store.store(result.records, file_path.name)
            if self._delete_processed:
                file_path.unlink()
                LOGGER.info("Removed processed file %s", file_path)
        except Exception as exc:
            result.error = self._handle_failure(file_path, exc)
            if result.backup_path is not None:
                LOGGER.info("Data is still available in backup file %s", result.backup_path)
        return result

    def _handle_failure(self, file_path: Path, exc: Exception) -> str:
        LOGGER.exception("Error processing %s", file_path)
        if self._raise_on_error:
            raise exc
        self.dispatch(Alert(subject=f"CDR Processing Failed: {file_path.name}", body=str(exc)))
        return str(exc)

    def run_files(self, paths: Sequence[str | Path]) -> List[BatchResult]:
        """Process files one after another, or on a thread pool in concurrent mode."""

        paths = list(paths)
        if not self._concurrent or len(paths) <= 1:
            return [self.run_file(path) for path in paths]

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            return list(executor.map(self.run_file, paths))

    def run_directory(self, directory: str | Path, *, pattern: str = DEFAULT_PATTERN) -> List[BatchResult]:
        """Process every file in ``directory`` matching ``pattern``."""

        files = discover_cdr_files(directory, pattern)
        if not files:
            LOGGER.warning("No CDR files found in %s", directory)
            self.dispatch(
                Alert(subject="CDR Processing Warning", body=f"No CDR files found for processing in {directory}")
            )
            return []
        LOGGER.info("Found %s CDR files to process in %s", len(files), directory)
        return self.run_files(files)

    def dispatch(self, alert: Alert) -> None:
        """Hand ``alert`` to every notifier; a failing notifier does not stop the others."""

        for notifier in self._notifiers:
            try:
                notifier.notify(alert)
            except Exception:
                LOGGER.exception("Failed to send alert '%s' via %s", alert.subject, type(notifier).__name__)
