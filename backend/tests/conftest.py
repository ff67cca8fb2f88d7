import sys
from pathlib import Path
from typing import Generator

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from services.captions.session import session_manager
from shared.utils import config as service_config


@pytest.fixture
def demo_cues() -> list[dict]:
    """Cue records matching the demo transcript."""
    return [
        {"id": 1, "start": 0.5, "end": 2.5, "text": "Hello everyone, and welcome to our enterprise demo."},
        {"id": 2, "start": 2.8, "end": 5.0, "text": "Today we are discussing the quarterly results."},
        {"id": 3, "start": 5.2, "end": 8.0, "text": "As you can see from the charts, growth is steady."},
        {"id": 4, "start": 8.5, "end": 11.0, "text": "We need to focus on our Russian market specifically."},
        {"id": 5, "start": 11.5, "end": 14.0, "text": "Let's move on to the next slide, please."},
    ]


@pytest.fixture(autouse=True)
def test_environment() -> Generator[None, None, None]:
    """Isolate the shared session manager and config between tests."""
    session_manager.reset()
    saved_config = dict(service_config.config)
    saved_pipeline = dict(service_config.pipeline_config)
    service_config.set("caption_mock_delay", 0.0)
    try:
        yield
    finally:
        session_manager.reset()
        service_config.config = saved_config
        service_config.set_pipeline_config(saved_pipeline)
