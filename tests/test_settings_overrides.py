from __future__ import annotations

from typing import Iterable

import pytest

from datastore.factory import build_default_store
from datastore.memory import InMemoryMeasurementStore
from settings import DEFAULT_MONGO_URI, get_settings, resolve_api_base_url


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture(autouse=True)
def fresh_caches():
    caches = (get_settings, build_default_store)
    _clear_caches(caches)
    yield
    _clear_caches(caches)


def test_defaults_without_environment(monkeypatch) -> None:
    for name in (
        "MONGO_URI",
        "PORT",
        "MEASUREMENT_STORE_BACKEND",
        "AUTO_SEED",
        "DASHBOARD_API_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.mongo_uri == DEFAULT_MONGO_URI
    assert settings.port == 2002
    assert settings.store_backend == "mongo"
    assert settings.auto_seed is True
    assert settings.dashboard_api_base_url is None


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_path = tmp_path / "measurements.json"

    monkeypatch.setenv("MONGO_URI", "mongodb://db.internal:27017/sensors")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MEASUREMENT_STORE_BACKEND", "memory")
    monkeypatch.setenv("MEMORY_STORE_PATH", str(store_path))
    monkeypatch.setenv("AUTO_SEED", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    store = build_default_store()

    assert settings.mongo_uri == "mongodb://db.internal:27017/sensors"
    assert settings.port == 8080
    assert settings.auto_seed is False
    assert settings.log_level == "DEBUG"
    assert isinstance(store, InMemoryMeasurementStore)
    assert store.persistence_path == store_path


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("PORT", "abc")
    monkeypatch.setenv("MEASUREMENT_STORE_BACKEND", "postgres")
    monkeypatch.setenv("AUTO_SEED", "maybe")
    monkeypatch.setenv("MONGO_URI", "   ")

    settings = get_settings()

    assert settings.port == 2002
    assert settings.store_backend == "mongo"
    assert settings.auto_seed is True
    assert settings.mongo_uri == DEFAULT_MONGO_URI


@pytest.mark.parametrize(
    ("origin", "configured", "expected"),
    [
        ("http://localhost:5173", None, "http://localhost:2002/api"),
        ("http://127.0.0.1:2002", None, "http://localhost:2002/api"),
        ("https://analytics.example.com", None, "https://analytics.example.com/api"),
        ("https://analytics.example.com/", None, "https://analytics.example.com/api"),
        ("http://localhost:5173", "https://api.example.com/v1/", "https://api.example.com/v1"),
    ],
)
def test_resolve_api_base_url(origin: str, configured, expected: str) -> None:
    assert resolve_api_base_url(origin, configured) == expected


def test_cors_origins_default_to_any(monkeypatch) -> None:
    monkeypatch.delenv("CORS_ORIGINS", raising=False)

    assert get_settings().cors_origins == ("*",)


def test_dotenv_file_supplies_missing_variables(monkeypatch, tmp_path) -> None:
    # Register the keys so values loaded from the file are removed afterwards.
    for name in ("PORT", "MONGO_URI"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.setenv("LOG_LEVEL", "warning")
    (tmp_path / ".env").write_text(
        "PORT=9090\nMONGO_URI=mongodb://dotenv-host:27017/analytics\nLOG_LEVEL=debug\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = get_settings()

    assert settings.port == 9090
    assert settings.mongo_uri == "mongodb://dotenv-host:27017/analytics"
    assert settings.log_level == "WARNING"
