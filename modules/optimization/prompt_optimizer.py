"""Prompt optimization via third-party LLM APIs."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional

from config.settings import AppConfig
from modules.optimization.style_presets import (
    DEFAULT_ASPECT_RATIO,
    DEFAULT_LIGHTING,
    DEFAULT_STYLE,
    MediaType,
    is_natural_lighting,
)
from modules.services.errors import OptimizationError

logger = logging.getLogger(__name__)

NATURAL_LIGHTING_CLAUSE = (
    "SPECIAL LIGHTING ATTENTION: the lighting '{lighting}' belongs to the Natural family, so "
    'describe it with phrases such as "soft organic shadows", "realistic light bounce", '
    '"natural light falloff" and "accurate global illumination".'
)


@dataclass(slots=True, frozen=True)
class PromptConfig:
    """User-editable generation request."""

    concept: str = ""
    style: str = DEFAULT_STYLE
    lighting: str = DEFAULT_LIGHTING
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    media_type: MediaType = MediaType.IMAGE

    def with_changes(self, **changes: Any) -> "PromptConfig":
        return replace(self, **changes)


@dataclass(slots=True)
class BackendRequest:
    """Information passed to backend optimizers."""

    concept: str
    system_instruction: str
    user_content: str
    temperature: float
    metadata: Dict[str, Any]


BackendCallable = Callable[[BackendRequest], Dict[str, Any] | str | None]


def build_system_instruction(config: PromptConfig) -> str:
    """Return the instruction that shapes the optimized prompt."""
    lines = [
        "You are a world-class prompt engineer for generative media AI.",
        "Turn a simple concept into a highly detailed, artistic and CONSISTENT prompt.",
        "Use the structure: [Main Subject], [Action/Pose Details], "
        f"[Artistic Style: {config.style}], [Lighting: {config.lighting}], "
        "[Camera/Lens], [Render Quality].",
    ]
    if is_natural_lighting(config.lighting):
        lines.append(NATURAL_LIGHTING_CLAUSE.format(lighting=config.lighting))
    lines.extend(
        [
            "Write the prompt in English for the best media generation results.",
            "ONLY return the final prompt text, without explanations or quotation marks.",
        ]
    )
    return "\n".join(lines)


class PromptOptimizer:
    """Interface to Gemini/GPT/Claude prompt enhancement."""

    def __init__(self, config: AppConfig, gemini_client: Optional[Any] = None) -> None:
        self.config = config
        self._backends: Dict[str, BackendCallable] = {}
        self.warnings: list[str] = []
        self._gemini_client = gemini_client
        self._auto_register_backends()

    def register_backend(self, name: str, backend: BackendCallable) -> None:
        """Register a prompt optimization backend."""
        self._backends[name.lower()] = backend

    def clear_backends(self) -> None:
        """Remove all backends (mainly for tests)."""
        self._backends.clear()

    def available_backends(self) -> list[str]:
        """Return the list of registered backends ordered by preference."""
        priority = {"gemini": 0, "gpt": 1, "claude": 2}
        return sorted(
            (backend for backend in self._backends.keys()),
            key=lambda item: (priority.get(item, 99), item),
        )

    def default_backend(self) -> str:
        """Return the configured backend when registered, else the preferred one."""
        configured = (self.config.prompt_backend or "").lower()
        if configured in self._backends:
            return configured
        choices = self.available_backends()
        if choices:
            return choices[0]
        return "gemini"

    def optimize(self, config: PromptConfig, model: Optional[str] = None) -> str:
        """Return the optimized prompt, or the concept itself for an empty reply."""
        name = (model or self.default_backend()).lower()
        backend = self._backends.get(name)
        if backend is None:
            detail = "; ".join(self.warnings) if self.warnings else "check API keys and dependencies"
            raise OptimizationError(f"Prompt backend '{name}' is not available ({detail}).")

        request = BackendRequest(
            concept=config.concept,
            system_instruction=build_system_instruction(config),
            user_content=f"Concept: {config.concept}",
            temperature=self.config.optimize_temperature,
            metadata=self.config.metadata,
        )
        try:
            payload = backend(request)
        except OptimizationError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Prompt optimization via %s failed", name)
            raise OptimizationError(f"Prompt optimization failed: {exc}") from exc

        optimized = self._normalize_backend_response(payload).strip()
        return optimized or config.concept

    # Internal helpers ---------------------------------------------------------
    def _auto_register_backends(self) -> None:
        """Register backends automatically when keys and dependencies are available."""
        self._register_gemini_backend()
        self._register_openai_backend()
        self._register_claude_backend()

    def _normalize_backend_response(self, payload: Dict[str, Any] | str | None) -> str:
        """Coerce backend outputs into prompt text."""
        if isinstance(payload, str):
            return payload
        if isinstance(payload, dict):
            value = payload.get("optimized_prompt") or payload.get("prompt") or ""
            return str(value)
        return ""

    def _register_gemini_backend(self) -> None:
        client = self._gemini_client
        if client is None:
            if not self.config.gemini_api_key:
                return
            try:
                genai_module = importlib.import_module("google.genai")
            except ImportError as exc:  # pragma: no cover - dependency declared
                self.warnings.append(f"Could not import google.genai: {exc}")
                return
            client = genai_module.Client(
                api_key=self.config.gemini_api_key,
                http_options={"timeout": int(self.config.request_timeout * 1000)},
            )
            self._gemini_client = client

        def _gemini_backend(request: BackendRequest) -> str:
            response = client.models.generate_content(
                model=self.config.text_model,
                contents=request.user_content,
                config={
                    "system_instruction": request.system_instruction,
                    "temperature": request.temperature,
                },
            )
            return getattr(response, "text", None) or ""

        self.register_backend("gemini", _gemini_backend)

    def _register_openai_backend(self) -> None:
        if not self.config.openai_key:
            return
        try:
            openai_module = importlib.import_module("openai")
        except ImportError as exc:
            self.warnings.append(f"Could not import openai: {exc}")
            return

        base_url = self.config.metadata.get("openai_base_url")
        client_kwargs = {"api_key": self.config.openai_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        client = openai_module.OpenAI(**client_kwargs)

        def _gpt_backend(request: BackendRequest) -> str:
            completion = client.chat.completions.create(
                model=self.config.metadata.get("openai_model", "gpt-4o-mini"),
                messages=[
                    {"role": "system", "content": request.system_instruction},
                    {"role": "user", "content": request.user_content},
                ],
                max_tokens=512,
                temperature=request.temperature,
            )
            if not completion.choices:
                return ""
            return completion.choices[0].message.content or ""

        self.register_backend("gpt", _gpt_backend)

    def _register_claude_backend(self) -> None:
        if not self.config.anthropic_key:
            return
        try:
            anthropic_module = importlib.import_module("anthropic")
        except ImportError as exc:  # pragma: no cover - optional dependency
            self.warnings.append(f"Could not import anthropic: {exc}")
            return

        client = anthropic_module.Anthropic(api_key=self.config.anthropic_key)

        def _claude_backend(request: BackendRequest) -> str:
            message = client.messages.create(
                model=self.config.metadata.get("claude_model", "claude-3-5-haiku-latest"),
                max_tokens=512,
                system=request.system_instruction,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.user_content}],
            )
            parts = [getattr(block, "text", "") for block in (message.content or [])]
            return "".join(parts)

        self.register_backend("claude", _claude_backend)
