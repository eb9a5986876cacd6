"""Recordkeep - Central path configuration."""

import os
from pathlib import Path

USER_HOME = Path.home()

# RECORDKEEP_HOME relocates everything (tests, sandboxes, portable installs)
DATA_HOME = Path(os.environ.get("RECORDKEEP_HOME", USER_HOME / ".recordkeep"))

RECORDS_PATH = DATA_HOME / "records"
KEY_VALUE_FILE = DATA_HOME / "store.json"
SETTINGS_FILE = DATA_HOME / "settings.json"
EXPORTS_PATH = DATA_HOME / "exports"
LOG_FILE = DATA_HOME / "recordkeep.log"


def get_exports_dir() -> Path:
    """Return the export directory.

    Path: ~/.recordkeep/exports
    Creates the directory if it doesn't exist.
    """
    EXPORTS_PATH.mkdir(parents=True, exist_ok=True)
    return EXPORTS_PATH
