"""Pytest configuration for voice assistant tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from redline.core.config import VoiceAssistantConfig, get_config, set_config
from redline.voice.speech import SpeechProvider


# ---------------------------------------------------------------------------
# Config isolation: the parser falls back to the global config, so every test
# starts from plain defaults regardless of REDLINE_CONFIG or a local .env.
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function", autouse=True)
def _default_config():
    previous = get_config()
    set_config(VoiceAssistantConfig())
    yield
    set_config(previous)


@pytest.fixture
def config():
    """Defaults with no pacing delays."""
    return VoiceAssistantConfig(follow_up_delay_seconds=0.0, search_delay_seconds=0.0)


class FakeSpeechProvider(SpeechProvider):
    """
    In-memory provider. Speech stays "in progress" until finish_speaking() is
    called; recognition results are pushed with emit_result / emit_error.
    """

    def __init__(self, recognition: bool = True, synthesis: bool = True):
        self._recognition = recognition
        self._synthesis = synthesis
        self.spoken = []
        self.options = []
        self.cancel_count = 0
        self.start_count = 0
        self.stop_count = 0
        self._on_end = None
        self._callbacks = None
        self.end_callbacks = []

    @property
    def supports_recognition(self) -> bool:
        return self._recognition

    @property
    def supports_synthesis(self) -> bool:
        return self._synthesis

    def start_recognition(self, on_result, on_error, on_end) -> None:
        self.start_count += 1
        self._callbacks = (on_result, on_error, on_end)

    def stop_recognition(self) -> None:
        self.stop_count += 1

    def speak(self, text, options, on_end, on_error) -> None:
        self.spoken.append(text)
        self.options.append(options)
        self._on_end = on_end
        self.end_callbacks.append((on_end, on_error))

    def cancel_speech(self) -> None:
        self.cancel_count += 1
        self._on_end = None

    # Test drivers

    def finish_speaking(self) -> None:
        on_end, self._on_end = self._on_end, None
        if on_end:
            on_end()

    def emit_result(self, transcript: str, is_final: bool = True) -> None:
        self._callbacks[0](transcript, is_final)

    def emit_error(self, error: str = "not-allowed") -> None:
        self._callbacks[1](error)

    def emit_end(self) -> None:
        self._callbacks[2]()


@pytest.fixture
def provider():
    return FakeSpeechProvider()
