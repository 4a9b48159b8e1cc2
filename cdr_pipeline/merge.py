"""Helpers for merging cleaned CDR rows without duplicating stored calls."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .models import CleanedCDRRecord


def _normalise_price(value: Any) -> str:
    try:
        return f"{float(value):.4f}"
    except (TypeError, ValueError):
        return str(value)


def record_key(row: Mapping[str, Any]) -> Tuple[Any, ...]:
    """Key identifying one call: timestamp, both parties, duration and cost."""

    return (
        row.get("StartTime"),
        row.get("ANI"),
        row.get("DNIS"),
        int(row.get("BillDuration") or 0),
        _normalise_price(row.get("CallPrice")),
    )


def merge_cdr_records(
    existing: Iterable[Mapping[str, Any]],
    incoming: Iterable[CleanedCDRRecord | Mapping[str, Any]],
) -> Tuple[List[Dict[str, Any]], int]:
    """Append incoming rows whose key is not present yet, preserving first-seen order.

    Returns the merged rows and the number of rows that were inserted.
    """

    merged: List[Dict[str, Any]] = [dict(row) for row in existing]
    seen = {record_key(row) for row in merged}
    inserted = 0

    for record in incoming:
        row = record.to_dict() if isinstance(record, CleanedCDRRecord) else dict(record)
        key = record_key(row)
        # Null fields never compare equal, so such rows are always inserted
        if None not in key:
            if key in seen:
                continue
            seen.add(key)
        merged.append(row)
        inserted += 1

    return merged, inserted
