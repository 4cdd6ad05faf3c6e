"""
Unit tests for configuration helpers.
"""

import pytest

from evalconsole.config import STATUS_DISPLAY, get_env
from evalconsole.models import CanonicalStatus


def test_get_env_ok(monkeypatch):
    monkeypatch.setenv("X", "123")
    assert get_env("X") == "123"


def test_get_env_missing_exits(monkeypatch, capsys):
    monkeypatch.delenv("MISSING_ENV", raising=False)
    with pytest.raises(SystemExit) as e:
        get_env("MISSING_ENV")
    assert e.value.code == 1
    err = capsys.readouterr().err
    assert "ERROR: env var MISSING_ENV is not set" in err


def test_status_display_covers_every_status():
    assert set(STATUS_DISPLAY) == {s.value for s in CanonicalStatus}
