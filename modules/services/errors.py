"""Error taxonomy for remote media operations."""

from __future__ import annotations

from typing import Optional

import requests
from google.genai import errors as genai_errors


class MediaClientError(RuntimeError):
    """Base class for failures raised by the remote media client."""


class OptimizationError(MediaClientError):
    """The language model could not produce an optimized prompt."""


class GenerationError(MediaClientError):
    """Image or video synthesis failed."""


class NoImageDataError(GenerationError):
    """The image endpoint answered without any inline image part."""


class VideoGenerationError(GenerationError):
    """The video job finished without a downloadable result."""


class EntitlementError(GenerationError):
    """The active API key is not entitled to the requested model."""

    def __init__(self, message: str, status_code: Optional[int] = 404) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerationCancelled(MediaClientError):
    """A pending generation was abandoned by the caller."""


def status_code_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an SDK or transport error, if any."""
    if isinstance(exc, genai_errors.APIError):
        return exc.code
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code
    return None


def as_generation_error(exc: BaseException) -> MediaClientError:
    """Map a raw failure from a synthesis call onto the taxonomy."""
    if isinstance(exc, MediaClientError):
        return exc
    code = status_code_of(exc)
    if code == 404:
        return EntitlementError(f"Model or resource not found for the active key: {exc}", status_code=code)
    return GenerationError(str(exc) or exc.__class__.__name__)
