import pytest
from pydantic import ValidationError

from config import Configuration
from services.classifier import MenuMode


def test_from_env_reads_and_coerces(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abcd1234efgh5678")
    monkeypatch.setenv("DEFAULT_RADIUS_M", "2500")
    monkeypatch.setenv("ENRICH_DETAILS", "yes")
    monkeypatch.setenv("MENU_MODE", "provider")
    cfg = Configuration.from_env()
    assert cfg.default_radius_m == 2500
    assert cfg.enrich_details is True
    assert cfg.menu_mode is MenuMode.PROVIDER
    cfg.require_places()
    summary = cfg.log_summary()
    assert "abcd...5678" in summary
    assert "abcd1234efgh5678" not in summary


def test_overrides_win_and_missing_key_raises(monkeypatch):
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    cfg = Configuration.from_env({"min_rating": 4.0, "places_language": None})
    assert cfg.min_rating == 4.0
    assert cfg.places_language == "ko"
    try:
        cfg.require_places()
    except ValueError as exc:
        assert "GOOGLE_PLACES_API_KEY" in str(exc)
    else:
        raise AssertionError("expected ValueError")


def test_unknown_menu_mode_rejected_at_load(monkeypatch):
    monkeypatch.setenv("MENU_MODE", "bogus")
    with pytest.raises(ValidationError):
        Configuration.from_env()


def test_menu_mode_defaults_to_enriched(monkeypatch):
    monkeypatch.delenv("MENU_MODE", raising=False)
    cfg = Configuration.from_env()
    assert cfg.menu_mode is MenuMode.ENRICHED
    assert "menu_mode=enriched" in cfg.log_summary()
