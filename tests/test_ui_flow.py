"""Gradio UI callback tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from config.settings import AppConfig
from modules.optimization.style_presets import MediaType
from modules.pipelines.image_generation import GeneratedAsset
from modules.services.entitlement import SelectedKeyEntitlement
from modules.services.errors import EntitlementError
from modules.services.history_service import PromptHistoryStore
from modules.services.storage_service import StorageService
from modules.ui import callbacks
from modules.workflow.controller import WorkflowController


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color=(200, 40, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


class DummyMediaClient:
    """Media client stub returning fixed assets."""

    def __init__(self) -> None:
        self.optimize_calls = []
        self.video_error: Exception | None = None
        self.video_count = 0

    def optimize_prompt(self, config):
        self.optimize_calls.append(config)
        return f"{config.concept} - OPT"

    def generate_image(self, prompt, aspect_ratio):
        return GeneratedAsset(data=png_bytes(), mime_type="image/png", media_type=MediaType.IMAGE)

    def generate_video(self, prompt, aspect_ratio, cancel_token=None):
        if self.video_error is not None:
            raise self.video_error
        self.video_count += 1
        data = f"MP4-{self.video_count}".encode()
        return GeneratedAsset(data=data, mime_type="video/mp4", media_type=MediaType.VIDEO)


@pytest.fixture
def setup(tmp_path):
    config = AppConfig(history_path=tmp_path / "history.json", output_dir=tmp_path / "outputs")
    client = DummyMediaClient()
    entitlement = SelectedKeyEntitlement(config)
    controller = WorkflowController(client, PromptHistoryStore(config.history_path), entitlement)
    cb = callbacks.build_callbacks(
        config,
        controller,
        storage=StorageService(config.output_dir),
        entitlement=entitlement,
    )
    return cb, client, controller, entitlement, config


def test_on_optimize_updates_prompt_and_history(setup):
    cb, client, controller, _, _ = setup

    prompt, status, step, rows = cb["on_optimize"]("a red fox", "Hyper-Realistic", "Dramatic Neon", "1:1", "VIDEO")

    assert prompt == "a red fox - OPT"
    assert status == ""
    assert step == 2
    assert rows[0][1] == "VIDEO"
    assert rows[0][3] == "a red fox - OPT"
    config = client.optimize_calls[0]
    assert config.style == "Hyper-Realistic"
    assert config.lighting == "Dramatic Neon"
    assert config.aspect_ratio == "1:1"
    assert config.media_type is MediaType.VIDEO


def test_on_optimize_normalizes_unknown_choices(setup):
    cb, client, _, _, _ = setup

    cb["on_optimize"]("a red fox", "Watercolor", "Disco", "21:9", "audio")

    config = client.optimize_calls[0]
    assert config.style == "Cinematic 8K"
    assert config.lighting == "Natural Sunlight"
    assert config.aspect_ratio == "16:9"
    assert config.media_type is MediaType.IMAGE


def test_on_optimize_blank_concept_is_ignored(setup):
    cb, client, _, _, _ = setup

    prompt, status, step, rows = cb["on_optimize"]("", "Cinematic 8K", "Natural Sunlight", "16:9", "IMAGE")

    assert client.optimize_calls == []
    assert prompt == ""
    assert step == 1
    assert rows == []


def test_on_generate_image_saves_download(setup):
    cb, _, _, _, config = setup
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "IMAGE")

    image, video, path, status, step = cb["on_generate"]()

    assert step == 3
    assert video is None
    assert image.size == (4, 3)
    saved = Path(path)
    assert saved.parent == config.output_dir
    assert saved.name.startswith("prompt-studio-")
    assert saved.suffix == ".png"


def test_on_generate_video_returns_file(setup):
    cb, _, _, _, _ = setup
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "VIDEO")

    image, video, path, status, step = cb["on_generate"]()

    assert image is None
    assert video == path
    assert Path(path).suffix == ".mp4"
    assert Path(path).read_bytes() == b"MP4-1"


def test_key_required_prompts_for_video_key(setup):
    cb, client, _, entitlement, _ = setup
    client.video_error = EntitlementError("not found")
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "VIDEO")

    image, video, path, status, step = cb["on_generate"]()

    assert step == 2
    assert path is None
    assert entitlement.selection_requested is True
    assert "Video API key required" in status

    message = cb["on_select_key"]("paid-key")
    assert "selected" in message
    assert entitlement.api_key == "paid-key"
    assert entitlement.selection_requested is False


def test_video_success_clears_pending_key_prompt(setup):
    cb, _, _, entitlement, _ = setup
    entitlement.request_key_selection()
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "VIDEO")

    _, _, path, status, step = cb["on_generate"]()

    assert step == 3
    assert path is not None
    assert entitlement.selection_requested is False
    assert "paid-tier" not in status


def test_each_run_downloads_its_own_asset(setup):
    cb, _, controller, _, _ = setup

    for _ in range(40):
        cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "VIDEO")
        _, video, path, _, _ = cb["on_generate"]()
        assert video == path
        assert Path(path).read_bytes() == controller.state.generated_asset.data
        cb["on_reset"]()


def test_on_select_key_rejects_blank(setup):
    cb, *_ = setup
    assert "enter an API key" in cb["on_select_key"]("   ")


def test_on_back_and_reset(setup):
    cb, _, controller, _, _ = setup
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "IMAGE")

    _, step = cb["on_back"]()
    assert step == 1

    prompt, image, video, path, status, step = cb["on_reset"]()
    assert (prompt, image, video, path, status, step) == ("", None, None, None, "", 1)
    assert controller.state.config.concept == "a red fox"


def test_history_select_and_delete(setup):
    cb, _, controller, _, _ = setup
    cb["on_optimize"]("a red fox", "Cinematic 8K", "Natural Sunlight", "16:9", "IMAGE")
    item_id = controller.history[0].id

    assert cb["on_select_history"](item_id) == "a red fox - OPT"
    assert cb["on_select_history"]("nope") == ""

    rows, message = cb["on_delete_history"]("nope")
    assert len(rows) == 1
    assert "No history" in message

    rows, message = cb["on_delete_history"](item_id)
    assert rows == []
    assert "deleted" in message
