"""AppStores - builds one RecordStore per entity type for an application.

Construct it once at start-up and pass it (or the individual stores) to
whatever needs them; nothing here is a module-level singleton.

Usage::

    from records.app_stores import AppStores

    stores = AppStores(data_dir)
    trip = stores.trips.add({"title": "Paris", "country": "France", ...})
    stores.trips.subscribe(lambda event: print(event.operation, event.ids))
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TypeVar

from record_store import (
    JsonFileAdapter,
    KeyValueFile,
    KeyValueSlotAdapter,
    PersistenceAdapter,
    Record,
    RecordStore,
)
from utils import conf
from utils.settings import StorageLayout, StoreSettings

from .game import Game, GameStatistics, game_statistics
from .procedure import Procedure
from .reflection import Moment, Note
from .scent import ScentCombination
from .trip import Trip, TripStatistics, WishlistItem, trip_statistics

T = TypeVar("T", bound=Record)

RECORD_CLASSES: tuple[type[Record], ...] = (
    Trip,
    WishlistItem,
    Procedure,
    Game,
    ScentCombination,
    Note,
    Moment,
)


class AppStores:
    """Manages record collections with lazy initialization.

    ``data_dir`` holds either ``records/<type>.json`` files or a single
    ``store.json`` key-value file, depending on ``settings.storage_layout``.
    """

    def __init__(self, data_dir: Path | None = None, settings: StoreSettings | None = None):
        self._data_dir = data_dir
        self.settings = settings or StoreSettings.load(
            None if data_dir is None else data_dir / conf.SETTINGS_FILE.name
        )
        self._stores: dict[str, RecordStore] = {}
        self._kv: KeyValueFile | None = None

    @property
    def data_dir(self) -> Path:
        return self._data_dir if self._data_dir is not None else conf.DATA_HOME

    def adapter_for(self, record_class: type[Record]) -> PersistenceAdapter:
        record_type = record_class.get_type()
        if self.settings.storage_layout == StorageLayout.KEY_VALUE:
            if self._kv is None:
                self._kv = KeyValueFile(self.data_dir / conf.KEY_VALUE_FILE.name)
            return KeyValueSlotAdapter(self._kv, record_type)
        records_dir = self.data_dir / conf.RECORDS_PATH.name
        return JsonFileAdapter(records_dir / f"{record_type}.json")

    def store(self, record_class: type[T]) -> RecordStore[T]:
        record_type = record_class.get_type()
        if record_type not in self._stores:
            self._stores[record_type] = RecordStore(
                record_class,
                self.adapter_for(record_class),
                raise_on_missing=self.settings.raise_on_missing,
            )
        return self._stores[record_type]

    @property
    def trips(self) -> RecordStore[Trip]:
        return self.store(Trip)

    @property
    def wishlist(self) -> RecordStore[WishlistItem]:
        return self.store(WishlistItem)

    @property
    def procedures(self) -> RecordStore[Procedure]:
        return self.store(Procedure)

    @property
    def games(self) -> RecordStore[Game]:
        return self.store(Game)

    @property
    def scent_combinations(self) -> RecordStore[ScentCombination]:
        return self.store(ScentCombination)

    @property
    def notes(self) -> RecordStore[Note]:
        return self.store(Note)

    @property
    def moments(self) -> RecordStore[Moment]:
        return self.store(Moment)

    def trip_statistics(self, now: datetime | None = None) -> TripStatistics:
        """Trip overview over the current trips and wishlist."""
        return trip_statistics(
            self.trips.all(),
            self.wishlist.all(),
            now=now,
            recent_limit=self.settings.recent_limit,
        )

    def game_statistics(self) -> GameStatistics:
        return game_statistics(self.games.all(), recent_limit=self.settings.recent_limit)

    def all_stores(self) -> list[RecordStore]:
        """Every known collection, loading the ones not opened yet."""
        return [self.store(record_class) for record_class in RECORD_CLASSES]

    def reset(self) -> None:
        """Drop cached stores so the next access re-loads from disk."""
        self._stores = {}
        self._kv = None
