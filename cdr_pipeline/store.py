"""Persistence collaborators for cleaned CDR batches."""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from .merge import merge_cdr_records
from .models import CleanedCDRRecord

LOGGER = logging.getLogger(__name__)


class CDRStore(Protocol):
    """Interface implemented by persistence backends."""

    def store(self, records: Sequence[CleanedCDRRecord], source_name: str) -> int:  # pragma: no cover
        """Persist ``records`` and return how many new rows were written."""


class JsonLedgerStore:
    """Keeps every stored call in a single JSON array, skipping duplicates."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[Dict[str, Any]]:
        if not self._path.exists():
            return []
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        rows = json.loads(text)
        if not isinstance(rows, list):
            raise ValueError(f"Ledger '{self._path}' does not contain a JSON array")
        return rows

    def store(self, records: Sequence[CleanedCDRRecord], source_name: str) -> int:
        with self._lock:
            merged, inserted = merge_cdr_records(self.load(), records)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(merged, indent=2), encoding="utf-8")
        LOGGER.info(
            "Stored %s new of %s records from %s in %s", inserted, len(records), source_name, self._path
        )
        return inserted


__all__ = ["CDRStore", "JsonLedgerStore"]
