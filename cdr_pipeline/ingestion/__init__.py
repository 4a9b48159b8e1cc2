"""Reading raw CDR files and writing cleaned records back out."""
from __future__ import annotations

from .exporters import export_cleaned_records, records_to_dataframe, write_backup
from .loaders import UnsupportedFileTypeError, discover_cdr_files, load_cdr_records

__all__ = [
    "UnsupportedFileTypeError",
    "discover_cdr_files",
    "export_cleaned_records",
    "load_cdr_records",
    "records_to_dataframe",
    "write_backup",
]
