"""Utilities for loading raw CDR rows from delimited files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Union

import pandas as pd

from ..models import RawCDRRecord

PathLike = Union[str, Path]

DEFAULT_PATTERN = "*.CDR"

_DELIMITERS: Dict[str, str] = {
    ".cdr": ";",
    ".csv": ";",
    ".txt": ";",
    ".tsv": "\t",
}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_cdr_records(
    path: PathLike,
    *,
    delimiter: Optional[str] = None,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[RawCDRRecord]:
    """Load a header-bearing CDR file.

    Parameters
    ----------
    path:
        Path to the ``.CDR``/``.csv``/``.txt``/``.tsv`` file to be loaded.
    delimiter:
        Field separator. Defaults to ``;`` (tab for ``.tsv`` files).
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv`.
    """

    dataframe = _read_dataframe(path, delimiter=delimiter, loader_kwargs=loader_kwargs)
    records: List[RawCDRRecord] = []

    for _, row in dataframe.iterrows():
        if _row_is_empty(row):
            continue
        records.append(RawCDRRecord.from_mapping({column: _clean_text(value) for column, value in row.items()}))

    return records


def _read_dataframe(
    path: PathLike,
    *,
    delimiter: Optional[str] = None,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix not in _DELIMITERS:
        raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")

    loader_kwargs.setdefault("sep", delimiter or _DELIMITERS[suffix])
    loader_kwargs.setdefault("dtype", str)
    loader_kwargs.setdefault("keep_default_na", False)
    loader_kwargs.setdefault("skip_blank_lines", True)
    loader_kwargs.setdefault("encoding", "utf-8-sig")

    try:
        dataframe = pd.read_csv(path_obj, **loader_kwargs)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()

    dataframe.columns = [str(column).strip() for column in dataframe.columns]
    return dataframe


def _row_is_empty(row: pd.Series) -> bool:
    return all(pd.isna(value) or (isinstance(value, str) and not value.strip()) for value in row.values)


def _clean_text(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def discover_cdr_files(directory: PathLike, pattern: str = DEFAULT_PATTERN) -> List[Path]:
    """Return the files in ``directory`` matching ``pattern``, sorted by name."""

    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(root)
    return sorted(path for path in root.glob(pattern) if path.is_file())


__all__ = ["UnsupportedFileTypeError", "discover_cdr_files", "load_cdr_records"]
