"""Configuration helpers for the AI Prompt Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_api_key: Optional[str] = None
    video_api_key: Optional[str] = None
    text_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    video_model: str = "veo-3.1-fast-generate-preview"
    optimize_temperature: float = 0.8
    video_poll_interval: float = 8.0
    request_timeout: float = 300.0
    anthropic_key: Optional[str] = None
    openai_key: Optional[str] = None
    prompt_backend: str = "gemini"
    log_dir: Path = Path("logs")
    history_path: Path = Path("logs/history.json")
    history_limit: int = 20
    output_dir: Path = Path("outputs")
    max_saved_assets: int = 50
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    defaults = AppConfig()
    gemini_key = (
        os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY") or None
    )

    log_dir = Path(os.getenv("LOG_DIR") or str(defaults.log_dir)).expanduser()
    history_path = Path(
        os.getenv("HISTORY_PATH") or str(log_dir / defaults.history_path.name)
    ).expanduser()
    output_dir = Path(os.getenv("OUTPUT_DIR") or str(defaults.output_dir)).expanduser()

    metadata: dict[str, Any] = {}
    openai_base_url = os.getenv("OPENAI_BASE_URL")
    openai_model = os.getenv("OPENAI_MODEL")
    claude_model = os.getenv("ANTHROPIC_MODEL")
    if openai_base_url:
        metadata["openai_base_url"] = openai_base_url
    if openai_model:
        metadata["openai_model"] = openai_model
    if claude_model:
        metadata["claude_model"] = claude_model

    return AppConfig(
        gemini_api_key=gemini_key,
        video_api_key=os.getenv("GEMINI_VIDEO_API_KEY") or None,
        text_model=os.getenv("GEMINI_TEXT_MODEL") or defaults.text_model,
        image_model=os.getenv("GEMINI_IMAGE_MODEL") or defaults.image_model,
        video_model=os.getenv("GEMINI_VIDEO_MODEL") or defaults.video_model,
        video_poll_interval=_env_float("VIDEO_POLL_INTERVAL", defaults.video_poll_interval),
        request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
        anthropic_key=os.getenv("ANTHROPIC_API_KEY") or None,
        openai_key=os.getenv("OPENAI_API_KEY") or None,
        prompt_backend=(os.getenv("PROMPT_BACKEND") or defaults.prompt_backend).lower(),
        log_dir=log_dir,
        history_path=history_path,
        history_limit=_env_int("HISTORY_LIMIT", defaults.history_limit),
        output_dir=output_dir,
        max_saved_assets=_env_int("MAX_SAVED_ASSETS", defaults.max_saved_assets),
        metadata=metadata,
    )
