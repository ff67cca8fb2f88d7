"""Error taxonomy for the caption engine."""

from __future__ import annotations


class CaptionError(Exception):
    """Base class for caption engine errors."""


class ValidationError(CaptionError):
    """Raised when cue input violates the store invariants."""

    def __init__(self, message: str, position: int | None = None, cue_id: int | None = None):
        super().__init__(message)
        self.position = position
        self.cue_id = cue_id


class FormatError(CaptionError):
    """Raised when a timestamp or subtitle document is malformed."""

    def __init__(self, message: str, block: int | None = None):
        super().__init__(message)
        self.block = block


class ProviderError(CaptionError):
    """Raised when an external cue provider fails or returns a bad payload."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class SessionNotFoundError(CaptionError):
    """Raised when a caption session id is unknown."""
