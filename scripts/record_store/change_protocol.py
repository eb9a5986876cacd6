"""Change notification types fired by RecordStore after each mutation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable


class ChangeOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RELOAD = "reload"


@dataclass(frozen=True)
class ChangeEvent:
    """One applied mutation.

    ``records`` holds snapshots of the created/updated records, the removed
    ones for DELETE, or the whole collection for RELOAD. ``persisted`` is
    False when the change is applied in memory but the adapter failed to
    write it.
    """

    operation: ChangeOperation
    record_type: str
    ids: tuple[str, ...]
    records: tuple[Any, ...] = field(default=())
    persisted: bool = True


ChangeListener = Callable[[ChangeEvent], None]
