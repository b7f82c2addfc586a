"""Text-to-image generation through the Gemini image model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from config.settings import AppConfig
from modules.optimization.style_presets import DEFAULT_ASPECT_RATIO, MediaType
from modules.services.errors import NoImageDataError, as_generation_error
from modules.utils.image_utils import encode_data_url

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class GeneratedAsset:
    """Binary result of an image or video generation."""

    data: bytes
    mime_type: str
    media_type: MediaType

    @property
    def extension(self) -> str:
        return self.media_type.extension

    @property
    def data_url(self) -> str:
        return encode_data_url(self.data, self.mime_type)


class ClientCache:
    """Reuse one Gemini client per API key."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._clients: Dict[str, Any] = {}

    def get(self, api_key: Optional[str]) -> Any:
        if not api_key:
            raise RuntimeError("Gemini API key is not configured (set GEMINI_API_KEY).")
        if api_key not in self._clients:
            self._clients[api_key] = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(self.config.request_timeout * 1000)),
            )
        return self._clients[api_key]


def first_inline_image(response: Any) -> Optional[Any]:
    """Return the first content part that carries inline binary data."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                return inline
        # only the first candidate is considered
        break
    return None


class ImageGenerationService:
    """Facade around the remote image-synthesis endpoint."""

    def __init__(self, config: AppConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client
        self._clients = ClientCache(config)

    def _resolve_client(self) -> Any:
        if self._client is not None:
            return self._client
        return self._clients.get(self.config.gemini_api_key)

    def generate(self, prompt: str, aspect_ratio: str = DEFAULT_ASPECT_RATIO) -> GeneratedAsset:
        """Render one image for the optimized prompt."""
        try:
            client = self._resolve_client()
            response = client.models.generate_content(
                model=self.config.image_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=aspect_ratio or DEFAULT_ASPECT_RATIO),
                ),
            )
        except Exception as exc:  # noqa: BLE001
            raise as_generation_error(exc) from exc

        inline = first_inline_image(response)
        if inline is None:
            raise NoImageDataError("The image endpoint returned no image data.")

        mime_type = getattr(inline, "mime_type", None) or "image/png"
        logger.info("Received %s image (%d bytes)", mime_type, len(inline.data))
        return GeneratedAsset(data=bytes(inline.data), mime_type=mime_type, media_type=MediaType.IMAGE)
