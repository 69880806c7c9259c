from pathlib import Path

import pytest

import config
from domain import catalog, favorites


def test_defaults_follow_the_domain() -> None:
    cfg = config.Config()
    assert cfg.catalog_url == catalog.BASE_URL
    assert cfg.catalog_timeout == catalog.TIMEOUT
    assert cfg.favorites_key == favorites.DEFAULT_KEY


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("FAVORITES_PATH", "/tmp/favs.json")
    monkeypatch.setenv("CATALOG_TIMEOUT", "5")

    cfg = config.Config()
    assert cfg.env == config.Env.prod
    assert cfg.favorites_path == Path("/tmp/favs.json")
    assert cfg.catalog_timeout == 5
