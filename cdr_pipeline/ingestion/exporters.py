"""Export utilities for cleaned CDR records."""
from __future__ import annotations

import json
from pathlib import Path
from typing import MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import CleanedCDRRecord
from .loaders import UnsupportedFileTypeError

PathLike = Union[str, Path]

COLUMNS = ["StartTime", "BillDuration", "CallPrice", "ANI", "DNIS", "CustomerIP", "CallType", "LRN"]


def records_to_dataframe(records: Sequence[CleanedCDRRecord]) -> pd.DataFrame:
    """Convert cleaned records into a :class:`pandas.DataFrame`."""

    return pd.DataFrame([record.to_dict() for record in records], columns=COLUMNS)


def export_cleaned_records(
    records: Sequence[CleanedCDRRecord],
    path: PathLike,
    *,
    sheet_name: str = "CDRs",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write cleaned records to a CSV, TSV, Excel or JSON file."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower()

    if suffix == ".json":
        _write_json(records, output_path)
        return output_path

    dataframe = records_to_dataframe(records)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def write_backup(records: Sequence[CleanedCDRRecord], backup_dir: PathLike, source_name: str) -> Path:
    """Save the cleaned records of one source file as ``processed_<stem>.json``."""

    destination = Path(backup_dir) / f"processed_{Path(source_name).stem}.json"
    destination.parent.mkdir(parents=True, exist_ok=True)
    _write_json(records, destination)
    return destination


def _write_json(records: Sequence[CleanedCDRRecord], path: Path) -> None:
    payload = [record.to_dict() for record in records]
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")


__all__ = ["export_cleaned_records", "records_to_dataframe", "write_backup"]
