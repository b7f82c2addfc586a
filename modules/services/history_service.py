"""Prompt history tracking."""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

from modules.optimization.style_presets import MediaType

logger = logging.getLogger(__name__)

HISTORY_FORMAT_VERSION = 1
DEFAULT_HISTORY_LIMIT = 20


@dataclass(slots=True, frozen=True)
class HistoryItem:
    """A past optimized prompt."""

    id: str
    prompt: str
    type: MediaType
    timestamp: int  # epoch milliseconds

    @classmethod
    def create(cls, prompt: str, media_type: MediaType, timestamp: Optional[int] = None) -> "HistoryItem":
        """Build a new item with a fresh identifier."""
        return cls(
            id=uuid.uuid4().hex[:9],
            prompt=prompt,
            type=media_type,
            timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Optional["HistoryItem"]:
        """Return an item for a well-formed mapping, otherwise None."""
        if not isinstance(data, dict):
            return None
        item_id = data.get("id")
        prompt = data.get("prompt")
        timestamp = data.get("timestamp")
        if not isinstance(item_id, str) or not isinstance(prompt, str):
            return None
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return None
        try:
            media_type = MediaType(data.get("type"))
        except ValueError:
            return None
        return cls(id=item_id, prompt=prompt, type=media_type, timestamp=int(timestamp))


HistoryLog = Tuple[HistoryItem, ...]


class PromptHistoryStore:
    """JSON-backed, capacity-bounded log of optimized prompts (newest first)."""

    def __init__(self, history_path: Path, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self.history_path = Path(history_path)
        self.limit = limit

    def load(self) -> HistoryLog:
        """Read the persisted log; any read or parse problem yields an empty log."""
        if not self.history_path.exists():
            return ()
        try:
            raw = json.loads(self.history_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.history_path, exc)
            return ()

        if isinstance(raw, list):
            entries = raw
        elif isinstance(raw, dict):
            version = raw.get("version")
            if not isinstance(version, int) or version > HISTORY_FORMAT_VERSION:
                logger.warning("Ignoring history file with unsupported version %r", version)
                return ()
            entries = raw.get("items")
            if not isinstance(entries, list):
                return ()
        else:
            return ()

        items = [item for item in (HistoryItem.from_dict(entry) for entry in entries) if item]
        if len(items) != len(entries):
            logger.warning("Skipped %d malformed history entries", len(entries) - len(items))
        return tuple(items[: self.limit])

    def append(self, item: HistoryItem, log: Iterable[HistoryItem]) -> HistoryLog:
        """Prepend an item, drop entries beyond the limit and persist."""
        updated = (item, *log)[: self.limit]
        self._save(updated)
        return updated

    def remove(self, item_id: str, log: Iterable[HistoryItem]) -> HistoryLog:
        """Drop the entry with the given identifier and persist."""
        updated = tuple(entry for entry in log if entry.id != item_id)
        self._save(updated)
        return updated

    def _save(self, log: HistoryLog) -> None:
        payload = {
            "version": HISTORY_FORMAT_VERSION,
            "items": [entry.to_dict() for entry in log],
        }
        tmp_path = self.history_path.with_name(self.history_path.name + ".tmp")
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.history_path)
        except OSError:
            # the in-memory log stays authoritative for this session
            logger.exception("Could not persist history to %s", self.history_path)
