"""In-memory record collections persisted as one JSON slot each."""

from .change_protocol import ChangeEvent, ChangeListener, ChangeOperation
from .codec import decode_records, encode_records
from .errors import (
    DeserializationError,
    NotFoundError,
    PersistenceError,
    RecordStoreError,
    ValidationError,
)
from .persistence import (
    InMemoryAdapter,
    JsonFileAdapter,
    KeyValueFile,
    KeyValueSlotAdapter,
    PersistenceAdapter,
)
from .record import Record
from .record_store import RecordStore
from .record_types import RecordType
