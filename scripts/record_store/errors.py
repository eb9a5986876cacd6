"""Error taxonomy for record stores.

Every error the stores raise derives from ``RecordStoreError`` so callers can
catch the whole family in one place.
"""

from __future__ import annotations

from typing import Any


class RecordStoreError(Exception):
    """Base class for record store failures."""


class ValidationError(RecordStoreError):
    """Caller-supplied record failed basic shape constraints.

    Raised before anything reaches the collection; nothing is persisted.
    ``errors`` holds one ``{"field", "message"}`` dict per failing field.
    """

    def __init__(self, record_type: str, errors: list[dict[str, Any]]):
        self.record_type = record_type
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors) or "<record>"
        super().__init__(f"Invalid {record_type or 'record'}: {fields}")

    @classmethod
    def from_pydantic(cls, record_type: str, exc: Exception) -> ValidationError:
        """Flatten a pydantic ``ValidationError`` into field/message pairs."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()  # type: ignore[attr-defined]
        ]
        return cls(record_type, errors)


class NotFoundError(RecordStoreError):
    """Update referenced an id the store does not hold."""

    def __init__(self, record_type: str, record_id: str):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"No {record_type or 'record'} with id {record_id!r}")


class PersistenceError(RecordStoreError):
    """The adapter could not read or write its slot.

    When raised from a mutation the in-memory change is already applied;
    ``record`` is the record the mutation touched (if any).
    """

    def __init__(self, message: str, record: Any = None):
        self.record = record
        super().__init__(message)


class DeserializationError(RecordStoreError):
    """Persisted blob could not be turned back into records."""
