"""
Recordkeep - Logging Module
Provides centralized logging functionality for the record stores.
"""
import sys
from datetime import datetime
from pathlib import Path

from utils import conf

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG = True  # Set to False to disable logging
LOG_TO_STDERR = False  # Mirror every line to stderr (handy while debugging)
first_line = True

# =============================================================================
# LOGGING
# =============================================================================


def _log_file() -> Path:
    return conf.LOG_FILE


def store_log(message: str) -> None:
    """Append log message to recordkeep.log if LOG is enabled."""
    global first_line
    if not LOG:
        return
    if first_line:
        first_line = False
        _log_file().parent.mkdir(parents=True, exist_ok=True)
        store_log("--- New Recordkeep Session ---")
        store_log("Data folder: " + str(conf.DATA_HOME))
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_line = f"[{timestamp}] {message}\n"
    if LOG_TO_STDERR:
        sys.stderr.write(log_line)
    log_file = _log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a", encoding="utf-8") as f:
        f.write(log_line)


def store_log_print() -> None:
    """Print the contents of the log file to stdout."""
    log_file = _log_file()
    if log_file.exists():
        log_contents = log_file.read_text(encoding="utf-8")
        if log_contents:
            print(log_contents, end="")
        else:
            print("[Recordkeep Log is empty]")
    else:
        print("[Recordkeep Log file does not exist]")


def store_log_clear() -> None:
    """Delete the log file."""
    log_file = _log_file()
    if log_file.exists():
        log_file.unlink()
