"""A typed, in-memory collection of records persisted as one JSON slot."""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, Iterator, Sequence, TypeVar

from utils.log import store_log

from .change_protocol import ChangeEvent, ChangeListener, ChangeOperation
from .codec import decode_records, encode_records
from .errors import DeserializationError, NotFoundError, PersistenceError
from .persistence import PersistenceAdapter
from .record import Record, new_record_id

T = TypeVar("T", bound=Record)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore(Generic[T]):
    """Sole owner of one collection of ``record_class`` records.

    The collection keeps insertion order; presentation order always comes
    from the query engine. Every mutation re-encodes the whole collection and
    hands it to ``adapter.save``. When that write fails the change stays
    applied in memory and ``PersistenceError`` is raised to the caller.

    ``raise_on_missing`` controls updates that reference an unknown id:
    ``False`` keeps them a silent no-op (returns None), ``True`` raises
    ``NotFoundError``. Deletes of unknown ids are always a no-op.

    ``clock`` supplies the timestamps written to ``created_at``/``updated_at``.
    """

    def __init__(
        self,
        record_class: type[T],
        adapter: PersistenceAdapter,
        *,
        raise_on_missing: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.record_class = record_class
        self.adapter = adapter
        self.raise_on_missing = raise_on_missing
        self.clock = clock
        self.load_error: Exception | None = None
        self._records: list[T] = []
        self._listeners: list[ChangeListener] = []
        self._lock = threading.RLock()
        self._pending: deque[ChangeEvent] = deque()
        self._delivering = threading.Lock()
        self.load()

    @property
    def record_type(self) -> str:
        return self.record_class.get_type()

    # -- Persistence --

    def load(self) -> list[T]:
        """(Re)read the collection from the adapter.

        Missing data starts an empty collection. Unreadable data is logged,
        kept on ``load_error`` and also treated as empty.
        """
        with self._lock:
            self.load_error = None
            try:
                data = self.adapter.load()
                records = decode_records(self.record_class, data) if data else []
            except (DeserializationError, PersistenceError) as exc:
                store_log(f"[{self.record_type}] starting empty, could not load: {exc}")
                self.load_error = exc
                records = []
            self._records = records
            snapshot = self._snapshot()
            self._queue_event(ChangeOperation.RELOAD, snapshot)
        store_log(f"[{self.record_type}] loaded {len(snapshot)} record(s)")
        self._deliver_events()
        return snapshot

    def _persist(self) -> None:
        self.adapter.save(encode_records(self._records))

    # -- CRUD --

    def add(self, record_or_dict: T | dict[str, Any]) -> T:
        """Insert a new record with a fresh id and creation time."""
        record = self._coerce(record_or_dict)
        with self._lock:
            record.id = self._fresh_id()
            record.created_at = self.clock()
            record.updated_at = None
            self._records.append(record)
            stored = record.snapshot()
            error = self._try_persist()
            self._queue_event(ChangeOperation.CREATE, [stored], persisted=error is None)
        self._finish([stored], error)
        return stored

    def update(self, record_or_dict: T | dict[str, Any]) -> T | None:
        """Replace the stored record that has the same id.

        The full record is replaced; ``created_at`` is kept from the stored
        copy and ``updated_at`` is set to now.
        """
        record = self._coerce(record_or_dict)
        with self._lock:
            index = self._index_of(record.id)
            if index is None:
                return self._missing(record.id)
            record.created_at = self._records[index].created_at
            record.updated_at = self.clock()
            self._records[index] = record
            stored = record.snapshot()
            error = self._try_persist()
            self._queue_event(ChangeOperation.UPDATE, [stored], persisted=error is None)
        self._finish([stored], error)
        return stored

    def update_many(self, records: Iterable[T | dict[str, Any]]) -> list[T]:
        """Replace several records with a single write; unknown ids are skipped."""
        incoming = [self._coerce(r) for r in records]
        with self._lock:
            for record in incoming:
                if self._index_of(record.id) is None:
                    self._missing(record.id)
            now = self.clock()
            stored: list[T] = []
            for record in incoming:
                index = self._index_of(record.id)
                if index is None:
                    continue
                record.created_at = self._records[index].created_at
                record.updated_at = now
                self._records[index] = record
                stored.append(record.snapshot())
            if not stored:
                return []
            error = self._try_persist()
            self._queue_event(ChangeOperation.UPDATE, stored, persisted=error is None)
        self._finish(stored, error)
        return stored

    def delete(self, record_id: str) -> bool:
        """Remove a record by id. Returns True if found and removed."""
        return bool(self.delete_many([record_id]))

    def delete_many(self, record_ids: Iterable[str]) -> list[T]:
        """Remove every listed id with a single write; returns the removed records."""
        wanted = set(record_ids)
        with self._lock:
            removed = [r for r in self._records if r.id in wanted]
            if not removed:
                return []
            self._records = [r for r in self._records if r.id not in wanted]
            error = self._try_persist()
            self._queue_event(ChangeOperation.DELETE, removed, persisted=error is None)
        self._finish(removed, error)
        return removed

    def get(self, record_id: str) -> T | None:
        """Look up a record by id."""
        with self._lock:
            index = self._index_of(record_id)
            return None if index is None else self._records[index].snapshot()

    # -- Collection access --

    def all(self) -> list[T]:
        """Copy of the current collection in insertion order."""
        with self._lock:
            return self._snapshot()

    def query(
        self,
        predicates: Sequence[Callable[[T], bool]] = (),
        text: str = "",
        fields: Sequence[str] | None = None,
        sort: Sequence[Any] = (),
    ) -> list[T]:
        """Filter, search and sort a snapshot; ``fields`` defaults to the record's search fields."""
        from query.engine import run

        search_fields = self.record_class.search_fields if fields is None else fields
        return run(self.all(), predicates=predicates, text=text, fields=search_fields, sort=sort)

    def __iter__(self) -> Iterator[T]:
        return iter(self.all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return any(r.id == record_id for r in self._records)

    # -- Change notification --

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` for every applied mutation; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _queue_event(self, operation: ChangeOperation, records: list[T], persisted: bool = True) -> None:
        """Record an event in mutation order; call with the lock held."""
        self._pending.append(ChangeEvent(
            operation=operation,
            record_type=self.record_type,
            ids=tuple(r.id for r in records),
            records=tuple(r.snapshot() for r in records),
            persisted=persisted,
        ))

    def _deliver_events(self) -> None:
        """Hand queued events to listeners, one thread at a time, in queue order.

        A thread that finds another one delivering leaves its event queued for
        that thread, so a mutation can return before its own event is seen.
        """
        while True:
            if not self._delivering.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            break
                        event = self._pending.popleft()
                        listeners = list(self._listeners)
                    for listener in listeners:
                        try:
                            listener(event)
                        except Exception as exc:
                            store_log(f"[{self.record_type}] change listener failed: {exc!r}")
            finally:
                self._delivering.release()
            with self._lock:
                if not self._pending:
                    return

    # -- Internals --

    def _coerce(self, record_or_dict: T | dict[str, Any]) -> T:
        if isinstance(record_or_dict, dict):
            return self.record_class.validate_input(record_or_dict)
        if not isinstance(record_or_dict, self.record_class):
            raise TypeError(
                f"{self.record_type} store expects {self.record_class.__name__}, "
                f"got {type(record_or_dict).__name__}"
            )
        # Re-validate so edits made through attribute assignment are checked too
        data = record_or_dict.model_dump()
        return self.record_class.validate_input(data)

    def _fresh_id(self) -> str:
        record_id = new_record_id()
        while self._index_of(record_id) is not None:
            record_id = new_record_id()
        return record_id

    def _index_of(self, record_id: str) -> int | None:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _missing(self, record_id: str) -> None:
        if self.raise_on_missing:
            raise NotFoundError(self.record_type, record_id)
        store_log(f"[{self.record_type}] update ignored, unknown id {record_id!r}")
        return None

    def _try_persist(self) -> PersistenceError | None:
        try:
            self._persist()
        except PersistenceError as exc:
            store_log(f"[{self.record_type}] write failed, change kept in memory: {exc}")
            return exc
        except OSError as exc:
            store_log(f"[{self.record_type}] write failed, change kept in memory: {exc}")
            return PersistenceError(f"Could not save {self.record_type} records: {exc}")
        return None

    def _finish(self, records: list[T], error: PersistenceError | None) -> None:
        self._deliver_events()
        if error is not None:
            raise PersistenceError(str(error), record=records[0] if len(records) == 1 else records) from error

    def _snapshot(self) -> list[T]:
        return [r.snapshot() for r in self._records]

    def __repr__(self) -> str:
        return f"RecordStore({self.record_class.__name__}, {len(self)} records, {self.adapter!r})"
