"""Pytest fixtures shared by the record store tests."""

from datetime import datetime, timedelta, timezone

import pytest

from utils import conf


@pytest.fixture(autouse=True)
def isolated_data_home(tmp_path, monkeypatch):
    """Point every path constant (and the log file) into a per-test folder."""
    home = tmp_path / "recordkeep_home"
    monkeypatch.setattr(conf, "DATA_HOME", home)
    monkeypatch.setattr(conf, "RECORDS_PATH", home / "records")
    monkeypatch.setattr(conf, "KEY_VALUE_FILE", home / "store.json")
    monkeypatch.setattr(conf, "SETTINGS_FILE", home / "settings.json")
    monkeypatch.setattr(conf, "EXPORTS_PATH", home / "exports")
    monkeypatch.setattr(conf, "LOG_FILE", home / "recordkeep.log")
    yield home


class FakeClock:
    """Deterministic clock for store timestamps; advances one second per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def now():
    """A fixed local 'now' in mid-month so calendar windows are unambiguous."""
    return datetime(2026, 10, 18, 12, 0).astimezone()
