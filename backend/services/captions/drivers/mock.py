"""Mock cue provider returning a fixed demo transcript."""

from __future__ import annotations

import asyncio

from shared.models import RawCue
from shared.utils import config as service_config

from .base import CueProvider

DEMO_CUES: tuple[dict, ...] = (
    {"id": 1, "start": 0.5, "end": 2.5, "text": "Hello everyone, and welcome to our enterprise demo."},
    {"id": 2, "start": 2.8, "end": 5.0, "text": "Today we are discussing the quarterly results."},
    {"id": 3, "start": 5.2, "end": 8.0, "text": "As you can see from the charts, growth is steady."},
    {"id": 4, "start": 8.5, "end": 11.0, "text": "We need to focus on our Russian market specifically."},
    {"id": 5, "start": 11.5, "end": 14.0, "text": "Let's move on to the next slide, please."},
)


class MockCueProvider(CueProvider):
    """Serve the demo transcript after an optional simulated processing delay."""

    name = "mock"

    def __init__(self, delay: float | None = None) -> None:
        self.delay = float(service_config.get("caption_mock_delay", 0.0) if delay is None else delay)

    async def fetch_cues(self, media_name: str) -> list[RawCue]:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return [RawCue(**record) for record in DEMO_CUES]
