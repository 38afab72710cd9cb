"""Tests for config module."""

from pathlib import Path

import pytest

from page_search.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SEARCH_DB",
        "SEARCH_PORT",
        "SEARCH_REBUILD_CONCURRENCY",
        "SEARCH_STREAM_BATCH_SIZE",
        "SEARCH_REBUILD_SHADOW",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def test_config_defaults():
    """Test config loads with defaults when no env vars set."""
    config = Config.from_env()
    assert config.search_db == Path.home() / ".page-search" / "search.db"
    assert config.search_port == 8080
    assert config.rebuild_concurrency == 1
    assert config.stream_batch_size == 100
    assert config.rebuild_shadow is False


def test_config_from_env(monkeypatch):
    """Test config loads from environment variables."""
    monkeypatch.setenv("SEARCH_DB", "/custom/search.sqlite")
    monkeypatch.setenv("SEARCH_PORT", "9000")
    monkeypatch.setenv("SEARCH_REBUILD_CONCURRENCY", "4")
    monkeypatch.setenv("SEARCH_STREAM_BATCH_SIZE", "500")
    monkeypatch.setenv("SEARCH_REBUILD_SHADOW", "true")

    config = Config.from_env()
    assert config.search_db == Path("/custom/search.sqlite")
    assert config.search_port == 9000
    assert config.rebuild_concurrency == 4
    assert config.stream_batch_size == 500
    assert config.rebuild_shadow is True


def test_config_tilde_expansion(monkeypatch):
    """Test config expands tilde in paths."""
    monkeypatch.setenv("SEARCH_DB", "~/custom/search.db")
    config = Config.from_env()
    assert "~" not in str(config.search_db)
    assert config.search_db.is_absolute()


def test_config_invalid_port_non_numeric(monkeypatch):
    monkeypatch.setenv("SEARCH_PORT", "not_a_number")
    with pytest.raises(ValueError, match="Invalid SEARCH_PORT"):
        Config.from_env()


def test_config_invalid_port_out_of_range(monkeypatch):
    monkeypatch.setenv("SEARCH_PORT", "70000")
    with pytest.raises(ValueError, match="Port must be between 1 and 65535"):
        Config.from_env()


def test_config_invalid_concurrency(monkeypatch):
    monkeypatch.setenv("SEARCH_REBUILD_CONCURRENCY", "0")
    with pytest.raises(ValueError, match="Invalid SEARCH_REBUILD_CONCURRENCY"):
        Config.from_env()


def test_config_invalid_batch_size(monkeypatch):
    monkeypatch.setenv("SEARCH_STREAM_BATCH_SIZE", "many")
    with pytest.raises(ValueError, match="Invalid SEARCH_STREAM_BATCH_SIZE"):
        Config.from_env()


def test_config_shadow_disabled_values(monkeypatch):
    monkeypatch.setenv("SEARCH_REBUILD_SHADOW", "no")
    assert Config.from_env().rebuild_shadow is False


def test_get_config_is_cached(monkeypatch):
    monkeypatch.setenv("SEARCH_PORT", "9100")
    config = get_config()
    assert get_config() is config

    reset_config()
    assert get_config() is not config
