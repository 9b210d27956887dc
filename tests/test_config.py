"""
Tests for the configuration manager.
"""

import pytest

from config import CONFIG_DIR, ConfigurationManager, config_file, get_config


def test_defaults_from_settings_file():
    assert get_config("parser.max_items") == 200
    assert get_config("parser.fallback_chain") == ["generic", "sps"]
    assert get_config("events.dedupe_ttl_seconds") == 300


def test_missing_key_returns_default():
    assert get_config("no.such.key", "fallback") == "fallback"


def test_paths_resolved_against_project_root():
    assert get_config("paths.output_dir") == str(CONFIG_DIR.parent / "outputs")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PACKSLIP_WEBHOOK_URL", "https://example.com/hook")
    monkeypatch.setenv("PACKSLIP_DB_PATH", "/tmp/slips.db")

    assert get_config("webhook.url") == "https://example.com/hook"
    assert get_config("storage.database_path") == "/tmp/slips.db"


def test_custom_config_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("parser:\n  max_items: 5\n")

    config = ConfigurationManager(str(path))

    assert config.get("parser.max_items") == 5
    assert config.get("webhook.url") is None


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigurationManager(str(tmp_path / "missing.yaml"))


def test_numeric_environment_override_is_converted(monkeypatch):
    monkeypatch.setenv("PACKSLIP_MAX_PAGES", "3")
    monkeypatch.setenv("PACKSLIP_LOG_LEVEL", "debug")

    assert get_config("input.pdf.max_pages") == 3
    assert get_config("logging.level") == "DEBUG"


def test_invalid_environment_override(monkeypatch):
    monkeypatch.setenv("PACKSLIP_WEBHOOK_TIMEOUT", "soon")

    with pytest.raises(ValueError):
        ConfigurationManager()


def test_section_returns_copy():
    webhook = ConfigurationManager().section("webhook")
    webhook["retries"] = 99

    assert get_config("webhook.retries") == 2
    assert ConfigurationManager().section("no.such.section") == {}


def test_config_file_relative_to_config_dir(tmp_path):
    assert config_file("vendors.registry_file", "vendors.yaml") == CONFIG_DIR / "vendors.yaml"

    path = tmp_path / "settings.yaml"
    path.write_text(f"vendors:\n  registry_file: {tmp_path / 'catalog.yaml'}\n")
    ConfigurationManager.reset()
    ConfigurationManager(str(path))

    assert config_file("vendors.registry_file", "vendors.yaml") == tmp_path / "catalog.yaml"
