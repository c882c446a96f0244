"""
Voice session orchestration.

Connects a ``SpeechProvider`` to a ``DialogueController``:

- final transcripts are handed to the controller one at a time
- spoken responses go out one at a time; requests made while speaking are
  queued and played in order
- only one listening capture is active at a time
- stop_listening / stop_speaking are safe to call when idle
- missing host capabilities and recognition errors are reported through the
  ``on_error(title, description)`` toast callback instead of raising

Pacing follows the controller config: the follow-up question is spoken
``follow_up_delay_seconds`` after the confirmation echo, and a confirmed search
fires ``search_delay_seconds`` after the acknowledgement. Delays go through
an injectable scheduler; the default runs callbacks immediately. A delayed
callback is dropped if the session was closed or a newer turn ran meanwhile.
"""
from collections import deque
from typing import Callable, Deque, Optional

from redline.core.controller import DialogueController, TurnResult
from redline.filters.models import CarFilters
from redline.parsing.models import Intent
from redline.utils.logger import get_logger
from redline.voice.speech import SpeechOptions, SpeechProvider, VoiceCapabilityError

logger = get_logger("voice.session")

Scheduler = Callable[[float, Callable[[], None]], None]
Toast = Callable[[str, str], None]

_FILTER_INTENTS = (Intent.SEARCH_CARS, Intent.SPECIFY_FILTERS, Intent.RESET_FILTERS)

SEARCH_COMPLETE_TITLE = "Search Complete"
SEARCH_COMPLETE_DESCRIPTION = "Found cars matching your voice search criteria!"


def call_immediately(delay_seconds: float, callback: Callable[[], None]) -> None:
    """Default scheduler: ignore the delay."""
    callback()


class VoiceSession:
    """One open voice assistant dialog."""

    def __init__(
        self,
        controller: DialogueController,
        provider: SpeechProvider,
        on_filters_update: Optional[Callable[[CarFilters], None]] = None,
        on_search: Optional[Callable[[CarFilters], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
        on_error: Optional[Toast] = None,
        on_notify: Optional[Toast] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.controller = controller
        self.provider = provider
        self.on_filters_update = on_filters_update
        self.on_search = on_search
        self.on_close = on_close
        self.on_error = on_error
        self.on_notify = on_notify
        self.scheduler = scheduler or call_immediately
        self.options = SpeechOptions.from_config(controller.config)

        self.is_open = False
        self.is_listening = False
        self.is_speaking = False
        self.live_transcript = ""
        self._speech_queue: Deque[str] = deque()
        self._synthesis_reported = False
        # Identifies the utterance currently being synthesized
        self._speech_token = 0
        # Bumped per turn and on open/close; delayed callbacks carry the value they were scheduled under
        self._turn_generation = 0

    # ------------------------------------------------------------------ #
    # Dialog lifecycle
    # ------------------------------------------------------------------ #

    def open(self) -> str:
        """Start a fresh conversation and speak the greeting."""
        self.is_open = True
        self._turn_generation += 1
        greeting = self.controller.start_session()
        self.speak(greeting)
        return greeting

    def close(self) -> None:
        """Stop listening and speaking; the dialog is gone."""
        self.is_open = False
        self._turn_generation += 1
        self.stop_listening()
        self.stop_speaking()

    # ------------------------------------------------------------------ #
    # Listening
    # ------------------------------------------------------------------ #

    def start_listening(self) -> bool:
        """Begin a capture. Returns False if one is already active or capture failed."""
        if self.is_listening:
            logger.debug("Already listening; ignoring start request")
            return False
        if not self.provider.supports_recognition:
            self._report_error(
                "Voice Recognition Unavailable",
                "Speech recognition is not supported on this device.",
            )
            return False

        self.live_transcript = ""
        self.is_listening = True
        try:
            self.provider.start_recognition(
                self._on_recognition_result,
                self._on_recognition_error,
                self._on_recognition_end,
            )
        except VoiceCapabilityError as e:
            self.is_listening = False
            self._report_error("Voice Recognition Unavailable", str(e))
            return False
        return True

    def stop_listening(self) -> None:
        if not self.is_listening:
            return
        self.is_listening = False
        self.provider.stop_recognition()

    def _on_recognition_result(self, transcript: str, is_final: bool) -> None:
        self.live_transcript = transcript
        if is_final:
            self.live_transcript = ""
            self.handle_transcript(transcript)

    def _on_recognition_error(self, error: str) -> None:
        logger.warning(f"Speech recognition error: {error}")
        self.is_listening = False
        self._report_error(
            "Voice Recognition Error",
            "Please try again or check your microphone permissions.",
        )

    def _on_recognition_end(self) -> None:
        self.is_listening = False

    # ------------------------------------------------------------------ #
    # Speaking
    # ------------------------------------------------------------------ #

    def speak(self, text: str) -> None:
        """Speak now, or queue behind the utterance currently playing."""
        if not text:
            return
        if not self.provider.supports_synthesis:
            if not self._synthesis_reported:
                self._synthesis_reported = True
                self._report_error(
                    "Speech Output Unavailable",
                    "Speech synthesis is not supported; responses are shown as text only.",
                )
            return
        if self.is_speaking:
            logger.debug("Speech in progress; queueing next utterance")
            self._speech_queue.append(text)
            return
        self._start_speaking(text)

    def stop_speaking(self) -> None:
        """Cancel current speech and drop anything queued."""
        self._speech_queue.clear()
        if not self.is_speaking:
            return
        self.is_speaking = False
        self._speech_token += 1
        self.provider.cancel_speech()

    def _start_speaking(self, text: str) -> None:
        self._speech_token += 1
        token = self._speech_token
        self.is_speaking = True
        try:
            self.provider.speak(
                text,
                self.options,
                lambda: self._on_speech_end(token),
                lambda error: self._on_speech_error(token, error),
            )
        except VoiceCapabilityError as e:
            self.is_speaking = False
            self._speech_queue.clear()
            self._report_error("Speech Output Unavailable", str(e))

    def _on_speech_end(self, token: int) -> None:
        if token != self._speech_token or not self.is_speaking:
            logger.debug("Ignoring end event from a cancelled utterance")
            return
        self.is_speaking = False
        if self._speech_queue:
            self._start_speaking(self._speech_queue.popleft())

    def _on_speech_error(self, token: int, error: str) -> None:
        logger.warning(f"Speech synthesis error: {error}")
        self._on_speech_end(token)

    # ------------------------------------------------------------------ #
    # Turns
    # ------------------------------------------------------------------ #

    def handle_transcript(self, text: str) -> Optional[TurnResult]:
        """
        Run one final transcript through the controller and voice the result.

        Returns None for blank transcripts; no-op controller turns are
        returned as-is without speaking anything.
        """
        if not text or not text.strip():
            return None

        result = self.controller.handle_utterance(text)
        if result.error:
            return result

        self._turn_generation += 1

        if self.on_filters_update and result.intent in _FILTER_INTENTS:
            self.on_filters_update(result.updated_filters)

        if result.spoken_responses:
            first, *follow_ups = result.spoken_responses
            self.speak(first)
            for follow_up in follow_ups:
                self._schedule(
                    self.controller.config.follow_up_delay_seconds,
                    lambda text=follow_up: self.speak(text),
                )

        if result.search_requested:
            self._schedule(self.controller.config.search_delay_seconds, self._trigger_search)

        return result

    def _schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        generation = self._turn_generation

        def run() -> None:
            if not self.is_open or generation != self._turn_generation:
                logger.debug("Dropping delayed callback from a superseded turn")
                return
            callback()

        self.scheduler(delay_seconds, run)

    def _trigger_search(self) -> None:
        logger.info("Triggering inventory search")
        if self.on_search:
            self.on_search(self.controller.filters)
        if self.on_close:
            self.on_close()
        self.close()
        self._notify(SEARCH_COMPLETE_TITLE, SEARCH_COMPLETE_DESCRIPTION)

    def _notify(self, title: str, description: str) -> None:
        logger.info(f"{title}: {description}")
        if self.on_notify:
            self.on_notify(title, description)

    def _report_error(self, title: str, description: str) -> None:
        logger.warning(f"{title}: {description}")
        if self.on_error:
            self.on_error(title, description)
