"""Tests for environment-driven configuration."""

from __future__ import annotations

from unittest.mock import patch

from devcritic.config import Config

_KEYS = (
    "GITHUB_TOKEN",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "FETCH_CONCURRENCY",
    "HOST",
    "PORT",
)


@patch("devcritic.config.load_dotenv")
def test_defaults_without_secrets(mock_dotenv, monkeypatch):
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)

    config = Config.from_env()

    mock_dotenv.assert_called_once()
    assert config.github_token == ""
    assert config.openai_api_key == ""
    assert config.openai_base_url == "https://api.groq.com/openai/v1"
    assert config.openai_model == "llama-3.3-70b-versatile"
    assert config.fetch_concurrency == 8
    assert config.port == 8000


@patch("devcritic.config.load_dotenv")
def test_reads_environment(mock_dotenv, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-y")
    monkeypatch.setenv("OPENAI_MODEL", "other-model")
    monkeypatch.setenv("FETCH_CONCURRENCY", "3")
    monkeypatch.setenv("PORT", "9000")

    config = Config.from_env()

    assert config.github_token == "ghp_x"
    assert config.openai_api_key == "sk-y"
    assert config.openai_model == "other-model"
    assert config.fetch_concurrency == 3
    assert config.port == 9000
