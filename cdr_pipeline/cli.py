"""Command line interface for cleaning CDR files."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .config import ConfigurationError, PipelineSettings, load_configuration
from .factory import build_notifiers, build_store
from .ingestion.exporters import export_cleaned_records
from .orchestrator import BatchOrchestrator, BatchResult, RunSummary
from .processor import RecordProcessor
from .reporting import BatchReporter
from .store import JsonLedgerStore


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Normalise phone numbers in CDR files and report on data quality",
    )
    parser.add_argument("inputs", nargs="+", help="CDR files or directories containing CDR files")
    parser.add_argument("--config", help="Path to a pipeline configuration file (YAML or JSON)")
    parser.add_argument("--pattern", default=None, help="Glob used to find CDR files inside directories")
    parser.add_argument("--backup-dir", default=None, help="Directory for JSON backups of cleaned records")
    parser.add_argument("--export", default=None, help="Write all cleaned records to a CSV, TSV, XLSX or JSON file")
    parser.add_argument("--ledger", default=None, help="Store cleaned records in a deduplicated JSON ledger")
    parser.add_argument(
        "--delete-processed",
        action="store_true",
        help="Remove each source file once it has been processed and stored",
    )
    parser.add_argument(
        "--mode",
        choices=["sequential", "concurrent"],
        default=None,
        help="Whether to process files sequentially or concurrently",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum number of workers to use in concurrent mode",
    )
    parser.add_argument(
        "--raise-on-error",
        action="store_true",
        help="Propagate file-level exceptions instead of recording them in the results",
    )
    parser.add_argument("--verbose", action="store_true", help="Log the classification of every phone number")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> PipelineSettings:
    settings = PipelineSettings.from_mapping(load_configuration(args.config) if args.config else {})
    if args.pattern:
        settings.file_pattern = args.pattern
    if args.backup_dir:
        settings.backup_dir = Path(args.backup_dir)
    if args.delete_processed:
        settings.delete_processed = True
    if args.mode:
        settings.mode = args.mode
    if args.max_workers is not None:
        settings.max_workers = args.max_workers
    return settings


def build_orchestrator(settings: PipelineSettings, args: argparse.Namespace) -> BatchOrchestrator:
    store = JsonLedgerStore(args.ledger) if args.ledger else build_store(settings)
    return BatchOrchestrator(
        processor=RecordProcessor(local_timezone=settings.local_timezone),
        reporter=BatchReporter(min_alert_count=settings.alert_min_count, alert_ratio=settings.alert_ratio),
        notifiers=build_notifiers(settings),
        store=store,
        backup_dir=settings.backup_dir,
        delete_processed=settings.delete_processed,
        concurrent=settings.mode == "concurrent",
        max_workers=settings.max_workers,
        raise_on_error=args.raise_on_error,
        verbose=args.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)

    try:
        settings = _settings_from_args(args)
        orchestrator = build_orchestrator(settings, args)
    except ConfigurationError as exc:
        logging.error("%s", exc)
        return 1

    results: List[BatchResult] = []
    for item in args.inputs:
        path = Path(item)
        if path.is_dir():
            results.extend(orchestrator.run_directory(path, pattern=settings.file_pattern))
        else:
            results.extend(orchestrator.run_files([path]))

    if args.export:
        records = [record for result in results for record in result.records]
        export_path = export_cleaned_records(records, args.export)
        logging.info("Cleaned records written to %s", export_path.resolve())

    summary = RunSummary.from_results(results)
    logging.info("Files processed: %s", summary.files_processed)
    logging.info("Total records: %s", summary.total_records)
    logging.info("Service numbers found: %s", summary.service_numbers)
    if summary.failed:
        logging.error("Failed files: %s", ", ".join(summary.failed))
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
