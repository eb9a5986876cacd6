"""JSON export of a record selection (the journal's "share my data" file)."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from record_store import Record
from record_store.persistence import atomic_write
from utils import conf
from utils.log import store_log


def export_records(records: Sequence[Record], time_range: str = "all") -> dict:
    """Build the export envelope for ``records``."""
    return {
        "time_range": time_range,
        "export_date": datetime.now(timezone.utc).isoformat(),
        "total_entries": len(records),
        "entries": [r.to_dict() for r in records],
    }


def export_file_name(record_type: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return f"{record_type}_export_{stamp}.json"


def write_export(
    records: Sequence[Record],
    record_type: str,
    time_range: str = "all",
    directory: Path | None = None,
) -> Path:
    """Write an export file and return its path."""
    target_dir = directory if directory is not None else conf.get_exports_dir()
    path = target_dir / export_file_name(record_type)
    payload = export_records(records, time_range)
    atomic_write(path, json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8"))
    store_log(f"Exported {payload['total_entries']} {record_type} record(s) to {path}")
    return path
