"""Exception types raised by the studio.

Generation failures share one shape: a ``GenerationError`` that knows which
model produced it, so the API can render a single message format for every
backend. The typed subclasses let callers (and tests) tell the cases apart.
"""

from __future__ import annotations

from typing import Optional


class StudioError(Exception):
    """Base class for every error raised by this application."""


class ConfigurationError(StudioError):
    """Raised when required configuration (e.g. the API key) is missing."""


class InvalidImageError(StudioError):
    """Raised when an uploaded file cannot be read as an image."""


class GenerationError(StudioError):
    """An image generation call failed.

    Attributes:
        message: Underlying failure description.
        model_name: Display name of the model that was asked to generate.
    """

    def __init__(self, message: str, model_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.model_name = model_name

    def __str__(self) -> str:
        if self.model_name:
            return f"API Error ({self.model_name}): {self.message}"
        return self.message


class EmptyRequest(GenerationError):
    pass


class UnsupportedOperation(GenerationError):
    pass


class UnsupportedModel(GenerationError):
    pass


class NoImageInResponse(GenerationError):
    pass


class RefinementError(StudioError):
    """Prompt refinement failed."""

    def __str__(self) -> str:
        return f"API Error (Refine): {super().__str__()}"


class InvalidRefinementResponse(RefinementError):
    pass


class TranslationError(StudioError):
    """Prompt translation failed."""

    def __str__(self) -> str:
        return f"API Error (Translate): {super().__str__()}"
