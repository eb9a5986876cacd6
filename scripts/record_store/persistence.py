"""Persistence adapters: one durable slot per record collection.

A store only needs ``load() -> bytes | None`` and ``save(bytes)``. Writes
replace the whole slot atomically (temp file + ``os.replace``) so a crash
mid-write leaves the previous contents intact.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .errors import DeserializationError, PersistenceError


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Capability a RecordStore consumes to read and replace its slot."""

    def load(self) -> bytes | None:
        """Return the slot contents, or None when nothing was saved yet."""
        ...

    def save(self, data: bytes) -> None:
        """Replace the slot contents. Raises PersistenceError on failure."""
        ...


def atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` by replacing it with a fully written temp file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileAdapter:
    """One JSON file per collection, e.g. ``records/trip.json``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> bytes | None:
        if not self.path.exists():
            return None
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc

    def save(self, data: bytes) -> None:
        try:
            atomic_write(self.path, data)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"JsonFileAdapter({str(self.path)!r})"


_file_locks: dict[Path, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    """One lock per resolved file path, shared by every KeyValueFile on it."""
    key = path.resolve()
    with _file_locks_guard:
        return _file_locks.setdefault(key, threading.RLock())


class KeyValueFile:
    """A simple key-value store backed by a single JSON object file.

    Mirrors a platform defaults database: every collection lives under its own
    key in the same file. Writes are read-modify-write of the whole object, so
    they are serialized on one per-path lock shared by every slot of this file.
    """

    def __init__(self, file_path: Path | str) -> None:
        self.file_path = Path(file_path)
        self._lock = _lock_for(self.file_path)

    def _read_data(self) -> dict:
        """Read the JSON object; a missing file is an empty store.

        A corrupt container raises DeserializationError instead of reading as
        empty, so nothing gets written over it.
        """
        if not self.file_path.exists():
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise PersistenceError(f"Could not read {self.file_path}: {exc}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DeserializationError(f"Corrupt key-value file {self.file_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise DeserializationError(f"Key-value file {self.file_path} does not hold a JSON object")
        return data

    def _write_data(self, data: dict) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
        try:
            atomic_write(self.file_path, payload)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.file_path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by key, returning default if not found."""
        with self._lock:
            return self._read_data().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a key-value pair, keeping every other key as stored."""
        with self._lock:
            try:
                data = self._read_data()
            except DeserializationError as exc:
                raise PersistenceError(f"Refusing to overwrite {self.file_path}: {exc}") from exc
            data[key] = value
            self._write_data(data)


class KeyValueSlotAdapter:
    """Adapter storing one collection under ``key`` of a shared KeyValueFile."""

    def __init__(self, kv: KeyValueFile, key: str) -> None:
        self.kv = kv
        self.key = key

    def load(self) -> bytes | None:
        value = self.kv.get(self.key)
        if value is None:
            return None
        if not isinstance(value, str):
            # Slot holds something we never wrote; let the codec reject it
            return json.dumps(value).encode("utf-8")
        return value.encode("utf-8")

    def save(self, data: bytes) -> None:
        self.kv.set(self.key, data.decode("utf-8"))

    def __repr__(self) -> str:
        return f"KeyValueSlotAdapter({str(self.kv.file_path)!r}, {self.key!r})"


class InMemoryAdapter:
    """Process-local slot, used by tests and throwaway stores."""

    def __init__(self, data: bytes | None = None, fail_saves: bool = False) -> None:
        self.data = data
        self.fail_saves = fail_saves
        self.save_count = 0

    def load(self) -> bytes | None:
        return self.data

    def save(self, data: bytes) -> None:
        if self.fail_saves:
            raise PersistenceError("In-memory slot is read-only")
        self.data = data
        self.save_count += 1
