"""Gradio layout composition for the three-step prompt workflow."""

from __future__ import annotations

from typing import Any, Sequence

try:
    import gradio as gr
except ImportError:  # pragma: no cover
    gr = None  # type: ignore

from config.settings import AppConfig
from modules.optimization.style_presets import (
    ASPECT_RATIO_LABELS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_LIGHTING,
    DEFAULT_STYLE,
    VISUAL_STYLES,
    LightingGroup,
    MediaType,
    lighting_names,
)
from modules.services.entitlement import SelectedKeyEntitlement
from modules.services.history_service import PromptHistoryStore
from modules.services.media_client import RemoteMediaClient
from modules.services.storage_service import StorageService
from modules.ui.callbacks import STEP_TITLES, build_callbacks, history_rows
from modules.workflow.controller import WorkflowController
from modules.workflow.state import Step


def _lighting_choices() -> Sequence[tuple[str, str]]:
    choices = []
    for group in LightingGroup:
        for name in lighting_names(group):
            choices.append((f"{name} ({group.value})", name))
    return choices


def _aspect_choices() -> Sequence[tuple[str, str]]:
    return [(label, value) for value, label in ASPECT_RATIO_LABELS.items()]


def _step_updates(step: int) -> tuple[Any, Any, Any, Any]:
    """Title plus button states for the given step."""
    current = Step(step)
    return (
        f"### {STEP_TITLES[current]}",
        gr.update(interactive=current is Step.INPUT),
        gr.update(interactive=current is Step.OPTIMIZE),
        gr.update(interactive=current is Step.OPTIMIZE),
    )


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    if gr is None:
        raise RuntimeError("Gradio is not installed; install the project dependencies first.")

    entitlement = SelectedKeyEntitlement(config)
    history_store = PromptHistoryStore(config.history_path, limit=config.history_limit)
    controller = WorkflowController(
        RemoteMediaClient.from_config(config, entitlement),
        history_store,
        entitlement,
    )
    storage = StorageService(config.output_dir)
    callbacks_map = build_callbacks(config, controller, storage=storage, entitlement=entitlement)

    with gr.Blocks(title="AI Prompt Studio") as demo:
        gr.Markdown("## AI Prompt Studio\nConsistent prompt workflow and instant media generation.")

        with gr.Row():
            with gr.Column(scale=1):
                gr.Markdown("#### Prompt history")
                history_table = gr.Dataframe(
                    headers=["id", "type", "created", "prompt"],
                    value=history_rows(controller.history),
                    interactive=False,
                    wrap=True,
                )
                history_id = gr.Textbox(label="History id", placeholder="Paste an id from the table")
                with gr.Row():
                    history_show_btn = gr.Button("Show prompt")
                    history_delete_btn = gr.Button("Delete", variant="stop")
                history_prompt = gr.Textbox(
                    label="History prompt", lines=4, interactive=False, show_copy_button=True
                )

            with gr.Column(scale=3):
                step_title = gr.Markdown(f"### {STEP_TITLES[Step.INPUT]}")

                concept = gr.Textbox(
                    label="Concept",
                    lines=4,
                    placeholder="An astronaut cat fishing above the clouds of Jupiter with a golden rod...",
                )
                with gr.Row():
                    media_type = gr.Radio(
                        label="Media",
                        choices=[(kind.label.title(), kind.value) for kind in MediaType],
                        value=MediaType.IMAGE.value,
                    )
                    aspect_ratio = gr.Dropdown(
                        label="Aspect ratio", choices=_aspect_choices(), value=DEFAULT_ASPECT_RATIO
                    )
                with gr.Row():
                    style = gr.Dropdown(label="Visual style", choices=list(VISUAL_STYLES), value=DEFAULT_STYLE)
                    lighting = gr.Dropdown(label="Lighting", choices=_lighting_choices(), value=DEFAULT_LIGHTING)
                optimize_btn = gr.Button("Optimize prompt", variant="primary")

                optimized_prompt = gr.Textbox(
                    label="Optimized prompt",
                    lines=5,
                    interactive=False,
                    show_copy_button=True,
                    placeholder="Waiting for optimization...",
                )
                with gr.Row():
                    generate_btn = gr.Button("Generate", variant="primary", interactive=False)
                    back_btn = gr.Button("Back", interactive=False)

                with gr.Row():
                    output_image = gr.Image(label="Generated image", type="pil", interactive=False)
                    output_video = gr.Video(label="Generated video", interactive=False)
                download = gr.File(label="Download", interactive=False)
                status = gr.Markdown("")

                with gr.Row():
                    video_key = gr.Textbox(label="Video API key", type="password")
                    key_btn = gr.Button("Use key")
                reset_btn = gr.Button("Start a new workflow")

        step_outputs = [step_title, optimize_btn, generate_btn, back_btn]

        def _optimize(*inputs):
            prompt, status_text, step, rows = callbacks_map["on_optimize"](*inputs)
            return (prompt, status_text, rows, *_step_updates(step))

        def _generate():
            image, video, path, status_text, step = callbacks_map["on_generate"]()
            return (image, video, path, status_text, *_step_updates(step))

        def _back():
            status_text, step = callbacks_map["on_back"]()
            return (status_text, *_step_updates(step))

        def _reset():
            prompt, image, video, path, status_text, step = callbacks_map["on_reset"]()
            return (prompt, image, video, path, status_text, *_step_updates(step))

        optimize_btn.click(
            fn=_optimize,
            inputs=[concept, style, lighting, aspect_ratio, media_type],
            outputs=[optimized_prompt, status, history_table, *step_outputs],
        )
        generate_btn.click(
            fn=_generate,
            outputs=[output_image, output_video, download, status, *step_outputs],
        )
        back_btn.click(fn=_back, outputs=[status, *step_outputs])
        reset_btn.click(
            fn=_reset,
            outputs=[optimized_prompt, output_image, output_video, download, status, *step_outputs],
        )
        history_show_btn.click(
            fn=callbacks_map["on_select_history"], inputs=[history_id], outputs=[history_prompt]
        )
        history_delete_btn.click(
            fn=callbacks_map["on_delete_history"], inputs=[history_id], outputs=[history_table, status]
        )
        key_btn.click(fn=callbacks_map["on_select_key"], inputs=[video_key], outputs=[status])

    return demo
