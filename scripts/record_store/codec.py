"""Serialization contract between a RecordStore and its PersistenceAdapter.

A collection is stored as a UTF-8 JSON array of record objects. Decoding is
strict: anything that is not a list of valid, uniquely-identified records is
a ``DeserializationError`` so the store can fall back to an empty collection.
"""

from __future__ import annotations

import json
from typing import Iterable, TypeVar

from .errors import DeserializationError, ValidationError
from .record import Record

T = TypeVar("T", bound=Record)

ENCODING = "utf-8"


def encode_records(records: Iterable[Record]) -> bytes:
    """Encode a whole collection as a JSON array."""
    payload = [record.to_dict() for record in records]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode(ENCODING)


def decode_records(record_class: type[T], data: bytes | str) -> list[T]:
    """Decode a JSON array back into records of ``record_class``."""
    record_type = record_class.get_type()
    try:
        text = data.decode(ENCODING) if isinstance(data, bytes) else data
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DeserializationError(f"Unreadable {record_type} data: {exc}") from exc

    if not isinstance(payload, list):
        raise DeserializationError(
            f"Expected a list of {record_type} records, got {type(payload).__name__}"
        )

    records: list[T] = []
    seen: set[str] = set()
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise DeserializationError(f"{record_type} entry {index} is not an object")
        try:
            record = record_class.from_dict(item)
        except ValidationError as exc:
            raise DeserializationError(f"{record_type} entry {index}: {exc}") from exc
        if record.id in seen:
            raise DeserializationError(f"Duplicate {record_type} id {record.id!r}")
        seen.add(record.id)
        records.append(record)
    return records
