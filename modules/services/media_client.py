"""Remote media client bundling prompt optimization and media synthesis."""

from __future__ import annotations

from typing import Optional, Protocol

from config.settings import AppConfig
from modules.optimization.prompt_optimizer import PromptConfig, PromptOptimizer
from modules.pipelines.image_generation import GeneratedAsset, ImageGenerationService
from modules.pipelines.video_generation import CancelToken, VideoGenerationService
from modules.services.entitlement import VideoEntitlement


class MediaClient(Protocol):
    """Operations the workflow controller needs from the remote services."""

    def optimize_prompt(self, config: PromptConfig) -> str:
        ...

    def generate_image(self, prompt: str, aspect_ratio: str) -> GeneratedAsset:
        ...

    def generate_video(
        self, prompt: str, aspect_ratio: str, cancel_token: Optional[CancelToken] = None
    ) -> GeneratedAsset:
        ...


class RemoteMediaClient:
    """Stateless request functions over the Gemini and Veo endpoints."""

    def __init__(
        self,
        optimizer: PromptOptimizer,
        images: ImageGenerationService,
        videos: VideoGenerationService,
        backend: Optional[str] = None,
    ) -> None:
        self.optimizer = optimizer
        self.images = images
        self.videos = videos
        self.backend = backend

    @classmethod
    def from_config(cls, config: AppConfig, entitlement: VideoEntitlement) -> "RemoteMediaClient":
        return cls(
            optimizer=PromptOptimizer(config),
            images=ImageGenerationService(config),
            videos=VideoGenerationService(config, entitlement),
        )

    def optimize_prompt(self, config: PromptConfig) -> str:
        return self.optimizer.optimize(config, model=self.backend)

    def generate_image(self, prompt: str, aspect_ratio: str) -> GeneratedAsset:
        return self.images.generate(prompt, aspect_ratio)

    def generate_video(
        self, prompt: str, aspect_ratio: str, cancel_token: Optional[CancelToken] = None
    ) -> GeneratedAsset:
        return self.videos.generate(prompt, aspect_ratio, cancel_token=cancel_token)
