"""Workflow session state and its pure transition function."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Optional, Union

from modules.optimization.prompt_optimizer import PromptConfig
from modules.optimization.style_presets import MediaType
from modules.pipelines.image_generation import GeneratedAsset

STATUS_OPTIMIZING = "Optimizing prompt with Gemini..."
STATUS_OPTIMIZE_FAILED = "Failed to optimize prompt."
STATUS_KEY_REQUIRED = "Video API key required..."
STATUS_GENERATE_FAILED = "Generation failed. Try again."
STATUS_CANCELLED = "Generation cancelled."


def processing_status(media_type: MediaType) -> str:
    return "Processing image..." if media_type is MediaType.IMAGE else "Processing video..."


class Step(IntEnum):
    INPUT = 1
    OPTIMIZE = 2
    GENERATE = 3


@dataclass(slots=True, frozen=True)
class WorkflowState:
    """The live session; replaced, never mutated."""

    step: Step = Step.INPUT
    config: PromptConfig = field(default_factory=PromptConfig)
    optimized_prompt: str = ""
    generated_asset: Optional[GeneratedAsset] = None
    is_loading: bool = False
    status: str = ""

    @property
    def can_optimize(self) -> bool:
        return self.step is Step.INPUT and not self.is_loading and bool(self.config.concept.strip())

    @property
    def can_generate(self) -> bool:
        return self.step is Step.OPTIMIZE and not self.is_loading and bool(self.optimized_prompt)


# Events ----------------------------------------------------------------------
@dataclass(frozen=True)
class ConfigEdited:
    config: PromptConfig


@dataclass(frozen=True)
class OptimizeStarted:
    pass


@dataclass(frozen=True)
class OptimizeSucceeded:
    prompt: str


@dataclass(frozen=True)
class OptimizeFailed:
    pass


@dataclass(frozen=True)
class GenerateStarted:
    pass


@dataclass(frozen=True)
class GenerateSucceeded:
    asset: GeneratedAsset


@dataclass(frozen=True)
class GenerateFailed:
    key_required: bool = False


@dataclass(frozen=True)
class GenerateCancelled:
    pass


@dataclass(frozen=True)
class BackRequested:
    pass


@dataclass(frozen=True)
class ResetRequested:
    pass


Event = Union[
    ConfigEdited,
    OptimizeStarted,
    OptimizeSucceeded,
    OptimizeFailed,
    GenerateStarted,
    GenerateSucceeded,
    GenerateFailed,
    GenerateCancelled,
    BackRequested,
    ResetRequested,
]


def initial_state(config: Optional[PromptConfig] = None) -> WorkflowState:
    """Return a fresh session, keeping the given configuration."""
    return WorkflowState(config=config or PromptConfig())


def apply(state: WorkflowState, event: Event) -> WorkflowState:
    """Return the state that follows ``event``; the input is left untouched."""
    if isinstance(event, ConfigEdited):
        return replace(state, config=event.config)
    if isinstance(event, OptimizeStarted):
        return replace(state, is_loading=True, status=STATUS_OPTIMIZING)
    if isinstance(event, OptimizeSucceeded):
        if state.step is not Step.INPUT:
            return replace(state, is_loading=False)
        return replace(
            state,
            step=Step.OPTIMIZE,
            optimized_prompt=event.prompt,
            is_loading=False,
            status="",
        )
    if isinstance(event, OptimizeFailed):
        return replace(state, is_loading=False, status=STATUS_OPTIMIZE_FAILED)
    if isinstance(event, GenerateStarted):
        return replace(state, is_loading=True, status=processing_status(state.config.media_type))
    if isinstance(event, GenerateSucceeded):
        if state.step is not Step.OPTIMIZE:
            return replace(state, is_loading=False)
        return replace(
            state,
            step=Step.GENERATE,
            generated_asset=event.asset,
            is_loading=False,
            status="",
        )
    if isinstance(event, GenerateFailed):
        status = STATUS_KEY_REQUIRED if event.key_required else STATUS_GENERATE_FAILED
        return replace(state, is_loading=False, status=status)
    if isinstance(event, GenerateCancelled):
        return replace(state, is_loading=False, status=STATUS_CANCELLED)
    if isinstance(event, BackRequested):
        if state.step is Step.OPTIMIZE and not state.is_loading:
            return replace(state, step=Step.INPUT)
        return state
    if isinstance(event, ResetRequested):
        return initial_state(state.config)
    raise TypeError(f"Unknown workflow event: {event!r}")
