"""
Dialogue controller for the voice search assistant.

Drives one voice session turn by turn: parse the utterance, merge the
entities into the collected filters, and pick what to say next.

States:
    greeting -> collecting_preferences -> confirming -> done

``confirming`` is entered once brand, budget, body type and transmission are
all known and the assistant has offered to run the search. A reset from any
state goes back to ``collecting_preferences`` with empty filters; ``done`` is
terminal until ``start_session`` is called again.

The controller is not re-entrant: the caller must not invoke
``handle_utterance`` for a session while a previous call is in progress.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from redline.core.config import VoiceAssistantConfig, get_config
from redline.filters.models import CarFilters
from redline.filters.reconcile import reconcile
from redline.interview.question_generator import (
    DENY_RESPONSE,
    RESET_RESPONSE,
    SEARCH_ACKNOWLEDGEMENT,
    generate_clarification,
    generate_confirmation,
    generate_greeting,
    generate_next_question,
)
from redline.parsing.command_parser import parse
from redline.parsing.models import Intent, VoiceCommand
from redline.utils.logger import get_logger

logger = get_logger("core.controller")


class ConversationStep(str, Enum):
    GREETING = "greeting"
    COLLECTING_PREFERENCES = "collecting_preferences"
    CONFIRMING = "confirming"
    DONE = "done"


@dataclass
class ConversationState:
    """State for one voice session."""
    current_step: ConversationStep = ConversationStep.GREETING
    collected_filters: CarFilters = field(default_factory=CarFilters)
    pending_confirmation: Optional[str] = None  # search offer awaiting yes/no
    last_spoken: Optional[str] = None


@dataclass
class ConversationMessage:
    """One line of the display transcript."""
    role: str  # 'user' or 'assistant'
    text: str
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class TurnResult:
    """Outcome of one user turn."""
    spoken_responses: List[str]
    updated_filters: CarFilters
    session_state: ConversationStep
    intent: Optional[Intent] = None
    confidence: float = 0.0
    quick_replies: Optional[List[str]] = None
    search_requested: bool = False
    error: Optional[str] = None  # set for no-op turns

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spokenResponses": list(self.spoken_responses),
            "updatedFilters": self.updated_filters.to_dict(),
            "sessionState": self.session_state.value,
            "intent": self.intent.value if self.intent else None,
            "confidence": self.confidence,
            "quickReplies": self.quick_replies,
            "searchRequested": self.search_requested,
            "error": self.error,
        }


class DialogueController:
    """
    Turn-taking state machine around the parser and the filter merge.

    Every public method is synchronous and free of I/O; speaking the returned
    responses and applying the filters is left to the caller.
    """

    def __init__(self, config: Optional[VoiceAssistantConfig] = None):
        """
        Initialize the controller.

        Args:
            config: Configuration object. Uses default config if not provided.
        """
        self.config = config or get_config()
        self.state = ConversationState()
        self.transcript: List[ConversationMessage] = []

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #

    @property
    def filters(self) -> CarFilters:
        return self.state.collected_filters

    def start_session(self) -> str:
        """Begin a new session and return the greeting to speak."""
        self.state = ConversationState()
        self.transcript = []

        greeting = generate_greeting(self.config.dealership_name)
        self._say(greeting)
        self.state.current_step = ConversationStep.COLLECTING_PREFERENCES

        logger.info("Voice session started")
        return greeting

    def handle_utterance(self, text: str) -> TurnResult:
        """
        Process one transcribed user utterance.

        Blank input and input after the session is done are no-op turns:
        nothing is spoken and the state does not change.
        """
        if not isinstance(text, str) or not text.strip():
            logger.debug("Ignoring empty transcript")
            return self._noop("empty_transcript")

        if self.state.current_step == ConversationStep.DONE:
            logger.warning("Utterance received after the session finished; ignoring")
            return self._noop("session_done")

        if self.state.current_step == ConversationStep.GREETING:
            # Host skipped start_session; begin collecting without re-greeting
            self.state.current_step = ConversationStep.COLLECTING_PREFERENCES

        self.transcript.append(ConversationMessage(role="user", text=text.strip()))

        command = parse(text, word_boundary=self.config.word_boundary_matching)
        logger.info(
            f"Turn in {self.state.current_step.value}: intent={command.intent.value}, "
            f"confidence={command.confidence}"
        )

        if command.intent in (Intent.SEARCH_CARS, Intent.SPECIFY_FILTERS):
            return self._handle_filters(command)
        if command.intent == Intent.CONFIRM:
            return self._handle_confirm(command)
        if command.intent == Intent.DENY:
            return self._handle_deny(command)
        if command.intent == Intent.RESET_FILTERS:
            return self._handle_reset(command)
        return self._handle_clarification(command)

    def reset(self) -> None:
        """Clear collected filters and go back to collecting preferences."""
        self.state.collected_filters = CarFilters()
        self.state.pending_confirmation = None
        self.state.current_step = ConversationStep.COLLECTING_PREFERENCES
        logger.info("Filters reset")

    def is_done(self) -> bool:
        return self.state.current_step == ConversationStep.DONE

    # ------------------------------------------------------------------ #
    # Intent handlers
    # ------------------------------------------------------------------ #

    def _handle_filters(self, command: VoiceCommand) -> TurnResult:
        self.state.collected_filters = reconcile(
            command.entities,
            self.state.collected_filters,
            dedupe=self.config.dedupe_on_merge,
        )

        confirmation = generate_confirmation(command.entities, self.config.currency_symbol)
        question = generate_next_question(self.state.collected_filters)

        if question.topic == "search":
            self.state.pending_confirmation = question.question
            self.state.current_step = ConversationStep.CONFIRMING
        else:
            self.state.pending_confirmation = None
            self.state.current_step = ConversationStep.COLLECTING_PREFERENCES

        logger.info(f"Collected filters: {self.state.collected_filters.to_dict()}")
        return self._respond(command, [confirmation, question.question], quick_replies=question.quick_replies)

    def _handle_confirm(self, command: VoiceCommand) -> TurnResult:
        self.state.pending_confirmation = None
        self.state.current_step = ConversationStep.DONE
        logger.info("Search confirmed; session done")
        return self._respond(command, [SEARCH_ACKNOWLEDGEMENT], search_requested=True)

    def _handle_deny(self, command: VoiceCommand) -> TurnResult:
        self.state.pending_confirmation = None
        self.state.current_step = ConversationStep.COLLECTING_PREFERENCES
        return self._respond(command, [DENY_RESPONSE])

    def _handle_reset(self, command: VoiceCommand) -> TurnResult:
        self.reset()
        return self._respond(command, [RESET_RESPONSE])

    def _handle_clarification(self, command: VoiceCommand) -> TurnResult:
        return self._respond(command, [generate_clarification(command.intent)])

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _say(self, text: str) -> None:
        self.state.last_spoken = text
        self.transcript.append(ConversationMessage(role="assistant", text=text))

    def _respond(
        self,
        command: VoiceCommand,
        responses: List[str],
        quick_replies: Optional[List[str]] = None,
        search_requested: bool = False,
    ) -> TurnResult:
        for response in responses:
            self._say(response)
        return TurnResult(
            spoken_responses=responses,
            updated_filters=self.state.collected_filters,
            session_state=self.state.current_step,
            intent=command.intent,
            confidence=command.confidence,
            quick_replies=quick_replies,
            search_requested=search_requested,
        )

    def _noop(self, error: str) -> TurnResult:
        return TurnResult(
            spoken_responses=[],
            updated_filters=self.state.collected_filters,
            session_state=self.state.current_step,
            error=error,
        )


def create_controller(
    config: Optional[VoiceAssistantConfig] = None,
    **overrides: Any,
) -> DialogueController:
    """
    Create a controller, optionally overriding individual config fields.

    Example:
        controller = create_controller(word_boundary_matching=True)
    """
    base = config or get_config()
    if overrides:
        base = replace(base, **overrides)
    return DialogueController(config=base)
