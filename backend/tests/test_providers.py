"""Tests for cue providers."""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from services.captions.drivers import (
    HTTPCueProvider,
    MockCueProvider,
    load_provider,
)
from services.captions.errors import ProviderError
from shared.models import RawCue
from shared.utils import config as service_config


def _patched_client(payload=None, error=None):
    """Patch the HTTP client used by the remote provider."""
    patcher = patch("services.captions.drivers.remote.AsyncHTTPClient")
    client_class = patcher.start()
    client = AsyncMock()
    if error is not None:
        client.get_json.side_effect = error
    else:
        client.get_json.return_value = payload
    client_class.return_value.__aenter__.return_value = client
    return patcher, client_class, client


class TestLoadProvider:
    """Provider registry."""

    def test_default_is_mock(self):
        assert isinstance(load_provider(), MockCueProvider)

    def test_named_provider(self):
        assert isinstance(load_provider("http"), HTTPCueProvider)
        assert isinstance(load_provider("MOCK"), MockCueProvider)

    def test_configured_provider(self):
        service_config.set("caption_provider", "http")

        assert isinstance(load_provider(), HTTPCueProvider)

    def test_unknown_falls_back_to_mock(self):
        assert isinstance(load_provider("whisper"), MockCueProvider)


class TestMockCueProvider:
    """Demo transcript provider."""

    @pytest.mark.asyncio
    async def test_returns_demo_cues(self):
        cues = await MockCueProvider(delay=0).fetch_cues("video")

        assert len(cues) == 5
        assert all(isinstance(cue, RawCue) for cue in cues)
        assert cues[0].start == 0.5

    def test_delay_from_config(self):
        service_config.set("caption_mock_delay", 1.5)

        assert MockCueProvider().delay == 1.5

    @pytest.mark.asyncio
    async def test_simulated_delay(self):
        with patch("services.captions.drivers.mock.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await MockCueProvider(delay=2.0).fetch_cues("video")

        sleep.assert_awaited_once_with(2.0)


class TestHTTPCueProvider:
    """Remote JSON provider."""

    @pytest.mark.asyncio
    async def test_fetches_list_payload(self):
        payload = [
            {"start": 0.5, "end": 2.5, "text": "Hello"},
            {"id": 9, "start": 3.0, "end": 4.0, "text": "World", "speaker": "A"},
        ]
        patcher, client_class, client = _patched_client(payload=payload)
        try:
            provider = HTTPCueProvider(url="https://captions.example.com/cues", timeout=10)
            cues = await provider.fetch_cues("lecture")
        finally:
            patcher.stop()

        assert [cue.text for cue in cues] == ["Hello", "World"]
        assert cues[0].id is None
        assert cues[1].id == 9
        client_class.assert_called_once_with(timeout=10)
        client.get_json.assert_awaited_once_with(
            "https://captions.example.com/cues", params={"media": "lecture"}
        )

    @pytest.mark.asyncio
    async def test_fetches_wrapped_payload(self):
        patcher, _, _ = _patched_client(payload={"cues": [{"start": 0, "end": 1, "text": "One"}]})
        try:
            cues = await HTTPCueProvider(url="https://captions.example.com/cues").fetch_cues("video")
        finally:
            patcher.stop()

        assert len(cues) == 1

    @pytest.mark.asyncio
    async def test_url_from_config(self):
        service_config.set("caption_provider_url", "https://configured.example.com/cues")
        patcher, _, client = _patched_client(payload=[])
        try:
            await HTTPCueProvider().fetch_cues("video")
        finally:
            patcher.stop()

        client.get_json.assert_awaited_once_with(
            "https://configured.example.com/cues", params={"media": "video"}
        )

    @pytest.mark.asyncio
    async def test_missing_url(self):
        service_config.set("caption_provider_url", None)

        with pytest.raises(ProviderError) as exc_info:
            await HTTPCueProvider().fetch_cues("video")

        assert exc_info.value.provider == "http"

    @pytest.mark.asyncio
    async def test_client_error_becomes_provider_error(self):
        patcher, _, _ = _patched_client(error=aiohttp.ClientConnectionError("refused"))
        try:
            with pytest.raises(ProviderError, match="request failed"):
                await HTTPCueProvider(url="https://captions.example.com/cues").fetch_cues("video")
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_timeout_becomes_provider_error(self):
        patcher, _, _ = _patched_client(error=TimeoutError())
        try:
            with pytest.raises(ProviderError):
                await HTTPCueProvider(url="https://captions.example.com/cues").fetch_cues("video")
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"items": []},
            "not json",
            [{"start": "soon", "end": 1, "text": "bad"}],
            [{"start": 0, "end": 1}],
        ],
    )
    async def test_malformed_payload(self, payload):
        patcher, _, _ = _patched_client(payload=payload)
        try:
            with pytest.raises(ProviderError):
                await HTTPCueProvider(url="https://captions.example.com/cues").fetch_cues("video")
        finally:
            patcher.stop()
