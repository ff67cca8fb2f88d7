"""Cue provider driver registry."""

from shared.utils import config, setup_logging

from .base import CueProvider
from .mock import MockCueProvider
from .remote import HTTPCueProvider

__all__ = [
    "CueProvider",
    "MockCueProvider",
    "HTTPCueProvider",
    "load_provider",
]

logger = setup_logging("caption-providers")


def load_provider(provider_name: str | None = None) -> CueProvider:
    """Instantiate a provider by name, falling back to the mock provider."""
    name = (provider_name or config.get("caption_provider", "mock")).lower()
    providers: dict[str, type[CueProvider]] = {
        "mock": MockCueProvider,
        "http": HTTPCueProvider,
    }

    provider_cls = providers.get(name)
    if provider_cls is None:
        logger.warning("Unknown caption provider '%s', falling back to mock", name)
        provider_cls = MockCueProvider
    return provider_cls()
