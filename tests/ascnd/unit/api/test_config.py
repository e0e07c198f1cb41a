from __future__ import annotations

import pytest

from ascnd.api.config import DEFAULT_BASE_URL, ClientConfig, load_client_config


def test_load_client_config_defaults_without_env() -> None:
    config = load_client_config(env={})
    assert config == ClientConfig()
    assert config.base_url == DEFAULT_BASE_URL == "https://api.ascnd.gg"
    assert config.timeout_seconds == 30
    assert config.has_credential is False


def test_load_client_config_parses_env() -> None:
    config = load_client_config(
        env={
            "ASCND_API_KEY": "  key-1  ",
            "ASCND_BASE_URL": "https://staging.ascnd.test/",
            "ASCND_TIMEOUT_SECONDS": "12",
            "ASCND_MAX_WORKERS": "2",
        }
    )
    assert config.api_key == "key-1"
    assert config.base_url == "https://staging.ascnd.test"
    assert config.timeout_seconds == 12
    assert config.max_workers == 2
    assert config.has_credential is True


def test_load_client_config_clamps_and_falls_back() -> None:
    config = load_client_config(
        env={"ASCND_TIMEOUT_SECONDS": "0", "ASCND_MAX_WORKERS": "many", "ASCND_BASE_URL": " "}
    )
    assert config.timeout_seconds == 1
    assert config.max_workers == 4
    assert config.base_url == DEFAULT_BASE_URL


def test_load_client_config_reads_process_env(monkeypatch) -> None:
    monkeypatch.setenv("ASCND_API_KEY", "from-process")
    assert load_client_config().api_key == "from-process"


def test_client_config_rejects_non_positive_values() -> None:
    with pytest.raises(ValueError):
        ClientConfig(timeout_seconds=0)
    with pytest.raises(ValueError):
        ClientConfig(max_workers=0)


def test_whitespace_key_is_not_a_credential() -> None:
    assert ClientConfig(api_key="   ").has_credential is False


def test_redacted_hides_api_key() -> None:
    config = ClientConfig(api_key="super-secret").with_api_key("rotated-secret")
    redacted = config.redacted()
    assert redacted["api_key_set"] is True
    assert "rotated-secret" not in str(redacted)
