"""Tests for the settings persistence layer."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from jiralink.services.settings import SecretVault, Settings, SettingsStore, redact_secret


def _store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json", vault=SecretVault(key_path=tmp_path / "settings.key"))


def test_load_returns_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = _store(tmp_path).load()

    assert settings == Settings()
    assert settings.jira_url == "https://company.atlassian.net"
    assert settings.project == "DEV"
    assert settings.page_size == 50
    assert settings.show_time is False


def test_save_and_load_roundtrip_encrypts_token(tmp_path: Path) -> None:
    store = _store(tmp_path)
    original = Settings(jira_url="https://acme.atlassian.net", api_token="dXNlcjp0b2tlbg==", show_time=True, project="OPS")

    store.save(original)
    raw = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    reloaded = _store(tmp_path).load()

    assert "api_token" not in raw
    assert raw["api_token_ciphertext"].startswith("fernet:")
    assert reloaded == original


def test_plaintext_token_is_migrated(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    target.write_text(json.dumps({"api_token": "plain", "project": "WEB"}), encoding="utf-8")

    loaded = _store(tmp_path).load()
    raw = json.loads(target.read_text(encoding="utf-8"))

    assert loaded.api_token == "plain"
    assert loaded.project == "WEB"
    assert "api_token" not in raw
    assert "api_token_ciphertext" in raw


def test_invalid_json_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")

    assert _store(tmp_path).load() == Settings()


def test_unknown_fields_are_ignored(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text(json.dumps({"theme": "dark", "show_time": True}), encoding="utf-8")

    assert _store(tmp_path).load().show_time is True


def test_env_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _store(tmp_path).save(Settings(jira_url="https://local", api_token="abc"))
    monkeypatch.setenv("JIRALINK_URL", "https://env")
    monkeypatch.setenv("JIRALINK_API_TOKEN", "env-token")
    monkeypatch.setenv("JIRALINK_SHOW_TIME", "yes")
    monkeypatch.setenv("JIRALINK_PAGE_SIZE", "25")
    monkeypatch.setenv("JIRALINK_REQUEST_TIMEOUT", "not-a-number")

    loaded = _store(tmp_path).load()

    assert loaded.jira_url == "https://env"
    assert loaded.api_token == "env-token"
    assert loaded.show_time is True
    assert loaded.page_size == 25
    assert loaded.request_timeout == Settings().request_timeout


def test_cli_overrides_are_applied(tmp_path: Path) -> None:
    loaded = _store(tmp_path).load(overrides={"project": "CLI", "unknown": 1, "jira_url": None})

    assert loaded.project == "CLI"
    assert loaded.jira_url == Settings().jira_url


def test_vault_rejects_foreign_tokens(tmp_path: Path) -> None:
    vault = SecretVault(key_path=tmp_path / "key")

    assert vault.decrypt(vault.encrypt("secret")) == "secret"
    assert vault.encrypt("") == ""
    with pytest.raises(ValueError):
        vault.decrypt("dpapi:abc")


def test_redact_secret() -> None:
    assert redact_secret("") == ""
    assert redact_secret("abc") == "***"
    assert redact_secret("abcdefgh") == "ab****gh"
