"""Record type constants used across the record_store layer.

The value doubles as the persistence slot key (file stem or key-value key).
"""

from enum import StrEnum


class RecordType(StrEnum):
    TRIP = "trip"
    WISHLIST_ITEM = "wishlist_item"
    PROCEDURE = "procedure"
    GAME = "game"
    SCENT_COMBINATION = "scent_combination"
    NOTE = "note"
    MOMENT = "moment"
