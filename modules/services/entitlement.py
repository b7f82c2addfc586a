"""Video entitlement (paid-tier API key) handling."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from config.settings import AppConfig

logger = logging.getLogger(__name__)


class VideoEntitlement(Protocol):
    """Host capability deciding which key may call the video model."""

    api_key: Optional[str]

    def has_video_entitlement(self) -> bool:
        ...

    def request_key_selection(self) -> None:
        ...


class SelectedKeyEntitlement:
    """Entitlement backed by a configured or user-selected video key."""

    def __init__(self, config: AppConfig) -> None:
        self.api_key: Optional[str] = config.video_api_key
        self._requested = threading.Event()

    @property
    def selection_requested(self) -> bool:
        """True while the UI should prompt for a video key."""
        return self._requested.is_set()

    def has_video_entitlement(self) -> bool:
        return bool(self.api_key)

    def request_key_selection(self) -> None:
        logger.warning("Video generation needs a paid-tier API key; prompting for selection.")
        self._requested.set()

    def clear_selection_request(self) -> None:
        """Drop a pending key prompt once a video has been rendered."""
        self._requested.clear()

    def select_key(self, api_key: str) -> bool:
        """Store a key chosen by the user; return True when one was accepted."""
        cleaned = (api_key or "").strip()
        if not cleaned:
            return False
        self.api_key = cleaned
        self.clear_selection_request()
        logger.info("Video API key selected.")
        return True
