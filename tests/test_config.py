"""Tests for env parsing in core.config."""

import pytest

from core.config import _env_bool, _env_int


@pytest.mark.parametrize(
    "raw,expected",
    [("14", 14), (" 30 ", 30), ("0", 0), ("abc", 7), ("7.5", 7), ("-3", 7), ("", 7)],
)
def test_env_int_falls_back_on_bad_values(monkeypatch, raw, expected):
    """Test a malformed DASHBOARD_DEFAULT_DAYS keeps the default instead of failing."""
    monkeypatch.setenv("DASHBOARD_DEFAULT_DAYS", raw)
    assert _env_int("DASHBOARD_DEFAULT_DAYS", 7) == expected


def test_env_int_unset(monkeypatch):
    """Test an unset variable yields the default."""
    monkeypatch.delenv("DASHBOARD_DEFAULT_DAYS", raising=False)
    assert _env_int("DASHBOARD_DEFAULT_DAYS", 7) == 7


def test_env_bool(monkeypatch):
    """Test truthy spellings and the default for unset values."""
    monkeypatch.setenv("REQUIRE_NETWORK", "Yes")
    assert _env_bool("REQUIRE_NETWORK") is True
    monkeypatch.setenv("REQUIRE_NETWORK", "")
    assert _env_bool("REQUIRE_NETWORK", True) is True
