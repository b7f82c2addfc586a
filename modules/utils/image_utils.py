"""Utility helpers for generated media payloads."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Any, Tuple


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Return a displayable ``data:`` URL for the payload."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(url: str) -> Tuple[str, bytes]:
    """Split a base64 ``data:`` URL into its mime type and raw bytes."""
    if not url.startswith("data:") or ";base64," not in url:
        raise ValueError("Not a base64 data URL")
    header, encoded = url[len("data:"):].split(";base64,", 1)
    try:
        return header, base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc


def load_preview_image(data: bytes) -> Any:
    """Decode image bytes into a PIL image for previews."""
    from PIL import Image

    image = Image.open(io.BytesIO(data))
    image.load()
    return image
