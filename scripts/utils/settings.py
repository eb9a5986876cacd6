"""StoreSettings - persisted configuration for the record stores.

Stored at ``~/.recordkeep/settings.json``. A missing or unreadable file means
defaults; ``save`` writes the file back atomically.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from record_store.persistence import atomic_write
from utils import conf
from utils.log import store_log


class StorageLayout(StrEnum):
    """How collections are laid out on disk."""

    FILE = "file"            # one <record_type>.json file per collection
    KEY_VALUE = "key_value"  # every collection under its own key in store.json


class StoreSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    # Raise NotFoundError when an update names an unknown id instead of ignoring it
    raise_on_missing: bool = False
    storage_layout: StorageLayout = Field(default=StorageLayout.FILE)
    recent_limit: int = Field(default=5, ge=0)

    @classmethod
    def load(cls, path: Path | str | None = None) -> StoreSettings:
        p = Path(path or conf.SETTINGS_FILE)
        if not p.exists():
            return cls()
        try:
            return cls.model_validate(json.loads(p.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, PydanticValidationError) as exc:
            store_log(f"Settings at {p} unreadable, using defaults: {exc}")
            return cls()

    def save(self, path: Path | str | None = None) -> Path:
        p = Path(path or conf.SETTINGS_FILE)
        atomic_write(p, json.dumps(self.model_dump(mode="json"), indent=2).encode("utf-8"))
        return p
