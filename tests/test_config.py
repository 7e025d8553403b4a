import json

import pytest

from finance_tracker.config import DEFAULT_CATEGORIES, DEFAULT_PRICE_CHANGE_PERCENT, AppConfig


def test_defaults_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, http://example.com")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PORT", "8080")
    cfg = AppConfig.load()
    assert cfg.database_url == "sqlite:///elsewhere.db"
    assert cfg.cors_origins == ["http://localhost:5173", "http://example.com"]
    assert cfg.log_level == "DEBUG"
    assert cfg.port == 8080
    assert cfg.categories == DEFAULT_CATEGORIES
    assert cfg.price_change_percent == DEFAULT_PRICE_CHANGE_PERCENT


def test_json_overrides(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"categories": ["Food", " Fun ", "Food", ""], "price_change_percent": 5}))
    cfg = AppConfig.load(path)
    assert cfg.categories == ["Food", "Fun"]
    assert cfg.price_change_percent == 5.0
    assert cfg.flask_settings()["DEFAULT_CATEGORIES"] == ["Food", "Fun"]


def test_missing_json_file_is_ignored(tmp_path):
    cfg = AppConfig.load(tmp_path / "absent.json")
    assert cfg.categories == DEFAULT_CATEGORIES


def test_negative_price_change_is_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"price_change_percent": -1}))
    with pytest.raises(ValueError):
        AppConfig.load(path)


def test_configured_categories_are_seeded(tmp_path, monkeypatch):
    from finance_tracker.webapp import create_app

    path = tmp_path / "config.json"
    path.write_text(json.dumps({"categories": ["Food", "Fun"]}))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cfg.db'}")
    app = create_app(str(path))
    body = app.test_client().get("/categories", query_string={"userId": "u"}).get_json()
    assert body == ["All Categories", "Food", "Fun"]
