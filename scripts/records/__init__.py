"""Record definitions for each app.

Each module defines typed ``Record`` subclasses for one app together with
the filter/sort options and statistics its screens need. Collections are
managed by ``RecordStore`` instances built through ``AppStores``.

Example::

    from records import AppStores, Trip, TripFilter, TripSort

    stores = AppStores(data_dir)
    visible = stores.trips.query(
        predicates=[*TripFilter.THIS_MONTH.predicates()],
        text="paris",
        sort=[TripSort.DATE_DESCENDING.sort_key()],
    )
"""

from .app_stores import AppStores
from .game import Game, GameCategory, GameSection
from .procedure import Procedure, ProcedureCategory
from .reflection import Mood, Moment, Note
from .scent import ScentCombination
from .trip import Trip, TripFilter, TripSort, WishlistItem
