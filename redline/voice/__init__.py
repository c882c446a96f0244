"""
Voice I/O layer.

Wraps host speech capture/synthesis around the dialogue controller.
"""
from redline.voice.session import VoiceSession, call_immediately
from redline.voice.speech import (
    SpeechOptions,
    SpeechProvider,
    VoiceCapabilityError,
)

__all__ = [
    "VoiceSession",
    "call_immediately",
    "SpeechOptions",
    "SpeechProvider",
    "VoiceCapabilityError",
]
