"""Base record shared by every collection the stores manage."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

T = TypeVar("T", bound="Record")


def new_record_id() -> str:
    return uuid.uuid4().hex


class Record(BaseModel):
    """A user-created entity with a store-assigned id and audit timestamps.

    Subclasses declare their editable fields and set ``record_type`` (the
    persistence slot name) plus ``search_fields`` (the free-text fields
    searched when the caller names none).
    """

    model_config = ConfigDict(
        extra="ignore",
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    record_type: ClassVar[str] = ""
    search_fields: ClassVar[tuple[str, ...]] = ()

    # Identity
    id: str = Field(default_factory=new_record_id)

    # Audit
    created_at: datetime | None = Field(default=None)
    updated_at: datetime | None = Field(default=None)

    @classmethod
    def get_type(cls) -> str:
        return cls.record_type or cls.__name__.lower()

    @classmethod
    def validate_input(cls: type[T], data: dict[str, Any]) -> T:
        """Build a record from raw field values, raising the store's ValidationError."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(cls.get_type(), exc) from exc

    # -- Serialization --

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        return cls.validate_input(data)

    def snapshot(self: T) -> T:
        """Deep copy handed out to callers so they never alias stored state."""
        return self.model_copy(deep=True)
