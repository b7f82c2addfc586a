"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import AppConfig, load_config

ENV_NAMES = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "API_KEY",
    "GEMINI_VIDEO_API_KEY",
    "GEMINI_TEXT_MODEL",
    "GEMINI_IMAGE_MODEL",
    "GEMINI_VIDEO_MODEL",
    "VIDEO_POLL_INTERVAL",
    "REQUEST_TIMEOUT",
    "HISTORY_PATH",
    "HISTORY_LIMIT",
    "LOG_DIR",
    "OUTPUT_DIR",
    "MAX_SAVED_ASSETS",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_MODEL",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "PROMPT_BACKEND",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Blank every variable so only the .env file under test applies."""
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
    yield


def test_defaults_without_env_file(tmp_path):
    config = load_config(str(tmp_path / "missing.env"))

    assert config.gemini_api_key is None
    assert config.text_model == AppConfig().text_model
    assert config.video_poll_interval == 8.0
    assert config.history_limit == 20
    assert config.history_path == Path("logs") / "history.json"
    assert config.prompt_backend == "gemini"


def test_env_file_overrides(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# comment",
                "GEMINI_API_KEY=abc",
                "GEMINI_VIDEO_API_KEY='paid'",
                "VIDEO_POLL_INTERVAL=2.5",
                "HISTORY_LIMIT=5",
                f"LOG_DIR={tmp_path / 'logs'}",
                "PROMPT_BACKEND=GPT",
                "OPENAI_MODEL=gpt-4o",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(str(env_file))

    assert config.gemini_api_key == "abc"
    assert config.video_api_key == "paid"
    assert config.video_poll_interval == 2.5
    assert config.history_limit == 5
    assert config.history_path == tmp_path / "logs" / "history.json"
    assert config.prompt_backend == "gpt"
    assert config.metadata["openai_model"] == "gpt-4o"


def test_invalid_numbers_fall_back(tmp_path, monkeypatch):
    monkeypatch.setenv("VIDEO_POLL_INTERVAL", "soon")
    monkeypatch.setenv("HISTORY_LIMIT", "-3")

    config = load_config(str(tmp_path / "missing.env"))

    assert config.video_poll_interval == 8.0
    assert config.history_limit == 20
