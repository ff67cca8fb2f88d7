"""Base classes for cue providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shared.models import RawCue


class CueProvider(ABC):
    """Abstract source of a finished cue list (transcription + translation)."""

    name: str = "base"

    @abstractmethod
    async def fetch_cues(self, media_name: str) -> list[RawCue]:
        """Return the raw cue records for a media item.

        Raises:
            ProviderError: when the backing service fails.
        """
