"""Asynchronous text-to-video generation through the Veo job API."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import requests
from google.genai import types

from config.settings import AppConfig
from modules.optimization.style_presets import DEFAULT_ASPECT_RATIO, MediaType
from modules.pipelines.image_generation import ClientCache, GeneratedAsset
from modules.services.entitlement import VideoEntitlement
from modules.services.errors import (
    GenerationCancelled,
    VideoGenerationError,
    as_generation_error,
)

logger = logging.getLogger(__name__)

VIDEO_RESOLUTION = "720p"


class CancelToken:
    """Signal used to abandon a pending video job."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)


class VideoGenerationService:
    """Submit a video job, poll until it finishes and download the result."""

    def __init__(
        self,
        config: AppConfig,
        entitlement: VideoEntitlement,
        client: Optional[Any] = None,
        http: Optional[Any] = None,
    ) -> None:
        self.config = config
        self.entitlement = entitlement
        self._client = client
        self._clients = ClientCache(config)
        self._http = http or requests.Session()

    def _api_key(self) -> Optional[str]:
        return self.entitlement.api_key or self.config.gemini_api_key

    def _resolve_client(self) -> Any:
        if self._client is not None:
            return self._client
        return self._clients.get(self._api_key())

    def generate(
        self,
        prompt: str,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
        cancel_token: Optional[CancelToken] = None,
    ) -> GeneratedAsset:
        """Render one video; blocks until the job completes or is cancelled."""
        token = cancel_token or CancelToken()
        if not self.entitlement.has_video_entitlement():
            self.entitlement.request_key_selection()

        try:
            client = self._resolve_client()
            operation = client.models.generate_videos(
                model=self.config.video_model,
                prompt=prompt,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=VIDEO_RESOLUTION,
                    aspect_ratio=aspect_ratio or DEFAULT_ASPECT_RATIO,
                ),
            )
            logger.info("Submitted video job %s", getattr(operation, "name", "<unnamed>"))

            while not operation.done:
                if token.wait(self.config.video_poll_interval):
                    raise GenerationCancelled("Video generation was cancelled.")
                operation = client.operations.get(operation)

            uri = self._result_uri(operation)
            if token.cancelled:
                raise GenerationCancelled("Video generation was cancelled.")
            data = self._download(uri)
        except Exception as exc:  # noqa: BLE001
            raise as_generation_error(exc) from exc

        logger.info("Downloaded generated video (%d bytes)", len(data))
        return GeneratedAsset(data=data, mime_type="video/mp4", media_type=MediaType.VIDEO)

    def _result_uri(self, operation: Any) -> str:
        error = getattr(operation, "error", None)
        if error:
            raise VideoGenerationError(f"Video generation failed: {error}")
        response = getattr(operation, "response", None)
        videos = getattr(response, "generated_videos", None) or []
        video = getattr(videos[0], "video", None) if videos else None
        uri = getattr(video, "uri", None)
        if not uri:
            raise VideoGenerationError("Video generation failed: no download link in the result.")
        return uri

    def _download(self, uri: str) -> bytes:
        response = self._http.get(
            uri,
            params={"key": self._api_key()},
            timeout=self.config.request_timeout,
        )
        response.raise_for_status()
        return response.content
