import asyncio

import pytest

from alt_agent import AppConfig, ConfigError, SettingsStore, load_config
from alt_agent.config import API_KEY_SETTING


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "AXE_SCRIPT_PATH", "ALT_AGENT_SETTINGS"):
        monkeypatch.delenv(name, raising=False)


def test_store_set_and_get_persist(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    SettingsStore(path).set(API_KEY_SETTING, "stored-key")

    assert SettingsStore(path).get(API_KEY_SETTING) == "stored-key"


def test_store_missing_or_corrupt_file_returns_default(tmp_path):
    path = tmp_path / "settings.json"
    assert SettingsStore(path).get(API_KEY_SETTING, "fallback") == "fallback"

    path.write_text("{not json", encoding="utf-8")
    assert SettingsStore(path).get(API_KEY_SETTING) is None


def test_store_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("ALT_AGENT_SETTINGS", str(tmp_path / "s.json"))

    assert SettingsStore().path == tmp_path / "s.json"


def test_environment_key_wins(tmp_path, monkeypatch):
    store = SettingsStore(tmp_path / "settings.json")
    store.set(API_KEY_SETTING, "stored-key")
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")

    config = asyncio.run(load_config(store, use_dotenv=False))

    assert config.api_key == "env-key"


def test_store_key_used_when_environment_empty(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    store.set(API_KEY_SETTING, "stored-key")

    config = asyncio.run(load_config(store, use_dotenv=False))

    assert config.require_api_key() == "stored-key"


def test_missing_key_raises_config_error(tmp_path):
    config = asyncio.run(load_config(SettingsStore(tmp_path / "settings.json"), use_dotenv=False))

    assert config.api_key is None
    with pytest.raises(ConfigError):
        config.require_api_key()


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-test")
    monkeypatch.setenv("AXE_SCRIPT_PATH", "/opt/axe.min.js")

    config = asyncio.run(load_config(SettingsStore(tmp_path / "settings.json"), use_dotenv=False))

    assert config.model == "gemini-test"
    assert config.axe_script_path == "/opt/axe.min.js"


def test_generation_defaults():
    gen = AppConfig().generation

    assert (gen.temperature, gen.top_p, gen.top_k, gen.max_output_tokens) == (1.0, 0.95, 64, 8192)
    assert gen.response_mime_type == "text/plain"
