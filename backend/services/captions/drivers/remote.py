"""Remote cue provider backed by an HTTP transcription endpoint."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from shared.http_client import AsyncHTTPClient
from shared.models import RawCue
from shared.utils import config as service_config, setup_logging

from ..errors import ProviderError
from .base import CueProvider

logger = setup_logging("caption-http-provider")


class HTTPCueProvider(CueProvider):
    """Fetch a finished cue list as JSON from a transcription backend.

    The endpoint answers ``GET <url>?media=<name>`` with either a list of cue
    records or an object holding them under ``cues``.
    """

    name = "http"

    def __init__(self, url: str | None = None, timeout: int | None = None) -> None:
        self.url = url or service_config.get("caption_provider_url")
        self.timeout = int(timeout or service_config.get("caption_provider_timeout", 30))

    async def fetch_cues(self, media_name: str) -> list[RawCue]:
        if not self.url:
            raise ProviderError("Caption provider URL is not configured", provider=self.name)

        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                payload = await client.get_json(self.url, params={"media": media_name})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Caption provider request failed: {e}")
            raise ProviderError(f"Caption provider request failed: {e}", provider=self.name) from e

        return self._parse_payload(payload)

    def _parse_payload(self, payload: Any) -> list[RawCue]:
        records = payload.get("cues") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise ProviderError("Caption provider returned no cue list", provider=self.name)

        try:
            cues = [RawCue.model_validate(record) for record in records]
        except PydanticValidationError as e:
            raise ProviderError(f"Caption provider returned malformed cues: {e}", provider=self.name) from e

        logger.info(f"Caption provider returned {len(cues)} cues")
        return cues
