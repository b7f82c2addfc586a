"""Three-step workflow controller: input, optimize, generate."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from modules.optimization.prompt_optimizer import PromptConfig
from modules.optimization.style_presets import MediaType
from modules.pipelines.video_generation import CancelToken
from modules.services.entitlement import VideoEntitlement
from modules.services.errors import (
    EntitlementError,
    GenerationCancelled,
    MediaClientError,
)
from modules.services.history_service import HistoryItem, HistoryLog, PromptHistoryStore
from modules.services.media_client import MediaClient
from modules.workflow.state import (
    BackRequested,
    ConfigEdited,
    Event,
    GenerateCancelled,
    GenerateFailed,
    GenerateStarted,
    GenerateSucceeded,
    OptimizeFailed,
    OptimizeStarted,
    OptimizeSucceeded,
    ResetRequested,
    WorkflowState,
    apply,
    initial_state,
)

logger = logging.getLogger(__name__)


class WorkflowController:
    """Owns the session state and the history log; sequences remote calls."""

    def __init__(
        self,
        client: MediaClient,
        history_store: PromptHistoryStore,
        entitlement: VideoEntitlement,
        config: Optional[PromptConfig] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.history_store = history_store
        self.entitlement = entitlement
        self._clock = clock
        self._lock = threading.Lock()
        self._state = initial_state(config)
        self._history: HistoryLog = history_store.load()
        self._run_id = 0
        self._cancel_token: Optional[CancelToken] = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def history(self) -> HistoryLog:
        return self._history

    # Transitions ----------------------------------------------------------------
    def update_config(self, **changes: Any) -> WorkflowState:
        """Apply user edits to the prompt configuration."""
        with self._lock:
            config = self._state.config.with_changes(**changes)
            self._state = apply(self._state, ConfigEdited(config))
            return self._state

    def optimize(self) -> WorkflowState:
        """Rewrite the concept into a detailed prompt and advance to OPTIMIZE."""
        with self._lock:
            if not self._state.can_optimize:
                return self._state
            self._state = apply(self._state, OptimizeStarted())
            run_id = self._run_id
            config = self._state.config

        try:
            prompt = self.client.optimize_prompt(config)
        except MediaClientError as exc:
            logger.warning("Prompt optimization failed: %s", exc)
            return self._finish(run_id, OptimizeFailed())
        except Exception:
            logger.exception("Unexpected error while optimizing the prompt.")
            return self._finish(run_id, OptimizeFailed())

        with self._lock:
            if run_id != self._run_id:
                logger.info("Discarding optimized prompt from a reset workflow run.")
                return self._state
            item = HistoryItem.create(prompt, config.media_type, int(self._clock() * 1000))
            self._history = self.history_store.append(item, self._history)
            self._state = apply(self._state, OptimizeSucceeded(prompt))
            return self._state

    def generate(self) -> WorkflowState:
        """Render the optimized prompt as an image or a video and advance to GENERATE."""
        with self._lock:
            if not self._state.can_generate:
                return self._state
            self._state = apply(self._state, GenerateStarted())
            run_id = self._run_id
            config = self._state.config
            prompt = self._state.optimized_prompt
            token = CancelToken()
            self._cancel_token = token

        try:
            if config.media_type is MediaType.IMAGE:
                asset = self.client.generate_image(prompt, config.aspect_ratio)
            else:
                asset = self.client.generate_video(prompt, config.aspect_ratio, cancel_token=token)
        except EntitlementError as exc:
            logger.warning("Active key lacks video entitlement: %s", exc)
            state = self._finish(run_id, GenerateFailed(key_required=True))
            if run_id == self._run_id:
                self.entitlement.request_key_selection()
            return state
        except GenerationCancelled:
            return self._finish(run_id, GenerateCancelled())
        except MediaClientError as exc:
            logger.warning("Media generation failed: %s", exc)
            return self._finish(run_id, GenerateFailed())
        except Exception:
            logger.exception("Unexpected error while generating media.")
            return self._finish(run_id, GenerateFailed())
        finally:
            with self._lock:
                if self._cancel_token is token:
                    self._cancel_token = None

        return self._finish(run_id, GenerateSucceeded(asset))

    def back(self) -> WorkflowState:
        """Return from OPTIMIZE to INPUT without touching the session data."""
        with self._lock:
            self._state = apply(self._state, BackRequested())
            return self._state

    def reset(self) -> WorkflowState:
        """Start a new workflow run, keeping the last configuration."""
        with self._lock:
            self._run_id += 1
            if self._cancel_token is not None:
                self._cancel_token.cancel()
                self._cancel_token = None
            self._state = apply(self._state, ResetRequested())
            return self._state

    # History ---------------------------------------------------------------------
    def delete_history(self, item_id: str) -> HistoryLog:
        with self._lock:
            self._history = self.history_store.remove(item_id, self._history)
            return self._history

    def find_history(self, item_id: str) -> Optional[HistoryItem]:
        return next((item for item in self._history if item.id == item_id), None)

    # Internal helpers ------------------------------------------------------------
    def _finish(self, run_id: int, event: Event) -> WorkflowState:
        with self._lock:
            if run_id != self._run_id:
                logger.info("Discarding %s from a reset workflow run.", type(event).__name__)
                return self._state
            self._state = apply(self._state, event)
            return self._state
