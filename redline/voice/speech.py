"""
Speech I/O provider interface.

A provider wraps whatever the host offers for speech capture and synthesis
(a browser speech API bridge, a telephony stack, a console for the demo, or a
fake in tests). Providers report results through callbacks; they may call
them synchronously or later from their own event loop.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from redline.core.config import VoiceAssistantConfig

ResultCallback = Callable[[str, bool], None]   # (transcript, is_final)
ErrorCallback = Callable[[str], None]
EndCallback = Callable[[], None]


class VoiceCapabilityError(RuntimeError):
    """Raised when the host cannot capture or synthesize speech."""


@dataclass(frozen=True)
class SpeechOptions:
    language: str = "en-US"
    rate: float = 0.9
    volume: float = 0.8

    @classmethod
    def from_config(cls, config: VoiceAssistantConfig) -> "SpeechOptions":
        return cls(
            language=config.speech_language,
            rate=config.speech_rate,
            volume=config.speech_volume,
        )


class SpeechProvider(ABC):
    """Host speech capture and synthesis."""

    @property
    def supports_recognition(self) -> bool:
        return True

    @property
    def supports_synthesis(self) -> bool:
        return True

    @abstractmethod
    def start_recognition(
        self,
        on_result: ResultCallback,
        on_error: ErrorCallback,
        on_end: EndCallback,
    ) -> None:
        """Start capturing speech. Raises VoiceCapabilityError if unavailable."""

    @abstractmethod
    def stop_recognition(self) -> None:
        """Stop capturing speech."""

    @abstractmethod
    def speak(
        self,
        text: str,
        options: SpeechOptions,
        on_end: EndCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Synthesize ``text``. Raises VoiceCapabilityError if unavailable."""

    @abstractmethod
    def cancel_speech(self) -> None:
        """Stop any ongoing synthesis."""
