"""Callback implementations for the Gradio interface."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

from config.settings import AppConfig
from modules.optimization.style_presets import (
    ASPECT_RATIOS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_LIGHTING,
    DEFAULT_STYLE,
    VISUAL_STYLES,
    MediaType,
    lighting_names,
)
from modules.pipelines.image_generation import GeneratedAsset
from modules.services.entitlement import SelectedKeyEntitlement
from modules.services.history_service import HistoryLog
from modules.services.storage_service import StorageService
from modules.utils.image_utils import load_preview_image
from modules.workflow.controller import WorkflowController
from modules.workflow.state import Step, WorkflowState

STEP_TITLES = {
    Step.INPUT: "Step 1 of 3: describe your concept",
    Step.OPTIMIZE: "Step 2 of 3: review the optimized prompt",
    Step.GENERATE: "Step 3 of 3: preview and download",
}


def history_rows(history: HistoryLog) -> list[list[str]]:
    """Flatten the history log into table rows."""
    rows = []
    for item in history:
        created = time.strftime("%Y-%m-%d %H:%M", time.localtime(item.timestamp / 1000))
        rows.append([item.id, item.type.value, created, item.prompt])
    return rows


def build_callbacks(
    config: AppConfig,
    controller: WorkflowController,
    storage: Optional[StorageService] = None,
    entitlement: Optional[SelectedKeyEntitlement] = None,
) -> dict[str, Any]:
    """Return a dictionary of Gradio callback functions."""

    storage = storage or StorageService(config.output_dir)
    last_saved: list[tuple[GeneratedAsset, Path]] = []

    def _normalize_choice(value: Any, choices: Any, default: str) -> str:
        return value if value in choices else default

    def _normalize_media_type(value: Any) -> MediaType:
        try:
            return MediaType(str(value).upper())
        except ValueError:
            return MediaType.IMAGE

    def _status_text(state: WorkflowState) -> str:
        if entitlement is not None and entitlement.selection_requested:
            hint = "Enter a paid-tier video API key below to continue."
            return f"{state.status} {hint}".strip()
        return state.status

    def _saved_path(asset: GeneratedAsset) -> Path:
        if last_saved and last_saved[0][0] is asset:
            return last_saved[0][1]
        path = storage.save(asset)
        storage.cleanup(config.max_saved_assets)
        last_saved[:] = [(asset, path)]
        return path

    def on_optimize(
        concept: str,
        style: str,
        lighting: str,
        aspect_ratio: str,
        media_type: str,
    ) -> tuple[str, str, int, list[list[str]]]:
        controller.update_config(
            concept=concept or "",
            style=_normalize_choice(style, VISUAL_STYLES, DEFAULT_STYLE),
            lighting=_normalize_choice(lighting, lighting_names(), DEFAULT_LIGHTING),
            aspect_ratio=_normalize_choice(aspect_ratio, ASPECT_RATIOS, DEFAULT_ASPECT_RATIO),
            media_type=_normalize_media_type(media_type),
        )
        state = controller.optimize()
        return (
            state.optimized_prompt,
            _status_text(state),
            int(state.step),
            history_rows(controller.history),
        )

    def on_generate() -> tuple[Optional[Any], Optional[str], Optional[str], str, int]:
        state = controller.generate()
        asset = state.generated_asset
        if asset is None:
            return None, None, None, _status_text(state), int(state.step)

        if asset.media_type is MediaType.VIDEO and entitlement is not None:
            entitlement.clear_selection_request()
        path = _saved_path(asset)
        if asset.media_type is MediaType.IMAGE:
            preview = load_preview_image(asset.data)
            return preview, None, str(path), _status_text(state), int(state.step)
        return None, str(path), str(path), _status_text(state), int(state.step)

    def on_back() -> tuple[str, int]:
        state = controller.back()
        return _status_text(state), int(state.step)

    def on_reset() -> tuple[str, None, None, None, str, int]:
        state = controller.reset()
        return "", None, None, None, state.status, int(state.step)

    def on_select_history(item_id: str) -> str:
        item = controller.find_history((item_id or "").strip())
        return item.prompt if item is not None else ""

    def on_delete_history(item_id: str) -> tuple[list[list[str]], str]:
        cleaned = (item_id or "").strip()
        if controller.find_history(cleaned) is None:
            return history_rows(controller.history), "No history entry with that id."
        history = controller.delete_history(cleaned)
        return history_rows(history), "History entry deleted."

    def on_select_key(api_key: str) -> str:
        if entitlement is None:
            return "Video key selection is not available."
        if entitlement.select_key(api_key):
            return "Video API key selected. Try generating again."
        return "Please enter an API key."

    return {
        "on_optimize": on_optimize,
        "on_generate": on_generate,
        "on_back": on_back,
        "on_reset": on_reset,
        "on_select_history": on_select_history,
        "on_delete_history": on_delete_history,
        "on_select_key": on_select_key,
    }
