"""Tests for the dialogue controller state machine."""

import pytest

from redline.core.config import VoiceAssistantConfig
from redline.core.controller import (
    ConversationStep,
    DialogueController,
    create_controller,
)
from redline.interview.preference_slots import SEARCH_OFFER, VEHICLE_SLOTS
from redline.interview.question_generator import (
    DENY_RESPONSE,
    RESET_RESPONSE,
    SEARCH_ACKNOWLEDGEMENT,
    UNKNOWN_RESPONSE,
)
from redline.parsing.models import Intent

TRANSMISSION_QUESTION = VEHICLE_SLOTS[3].question


@pytest.fixture
def controller(config):
    controller = DialogueController(config=config)
    controller.start_session()
    return controller


def _fill_checklist(controller):
    controller.handle_utterance("I need a used BMW SUV under 40000 euros with heated seats")
    return controller.handle_utterance("automatic")


class TestSessionStart:
    def test_greeting(self, config):
        controller = DialogueController(config=config)
        greeting = controller.start_session()
        assert "RedLine Motors" in greeting
        assert controller.state.current_step == ConversationStep.COLLECTING_PREFERENCES
        assert controller.filters.is_empty()
        assert controller.transcript[0].role == "assistant"

    def test_restart_clears_state(self, controller):
        controller.handle_utterance("a bmw")
        controller.start_session()
        assert controller.filters.is_empty()
        assert len(controller.transcript) == 1

    def test_utterance_before_greeting(self, config):
        controller = DialogueController(config=config)
        result = controller.handle_utterance("a bmw")
        assert result.error is None
        assert result.updated_filters.makes == ["BMW"]
        assert controller.state.current_step == ConversationStep.COLLECTING_PREFERENCES


class TestCollectingPreferences:
    def test_first_turn(self, controller):
        result = controller.handle_utterance("I need a used BMW SUV under 40000 euros with heated seats")
        assert result.intent == Intent.SPECIFY_FILTERS
        assert result.updated_filters.to_dict() == {
            "makes": ["BMW"],
            "vehicleTypes": ["suv"],
            "conditions": ["used"],
            "priceMax": 40000,
            "heatedSeats": True,
        }
        assert result.spoken_responses == [
            "Got it! Looking for BMW vehicles, suv body type, used condition, "
            "under €40,000, with heated seats.",
            TRANSMISSION_QUESTION,
        ]
        assert result.quick_replies == ["Automatic", "Manual"]
        assert result.session_state == ConversationStep.COLLECTING_PREFERENCES
        assert result.search_requested is False

    def test_search_intent_also_collects(self, controller):
        result = controller.handle_utterance("find me a Tesla")
        assert result.intent == Intent.SEARCH_CARS
        assert result.updated_filters.makes == ["Tesla"]
        assert result.spoken_responses[1] == VEHICLE_SLOTS[1].question

    def test_filters_accumulate(self, controller):
        controller.handle_utterance("a bmw")
        result = controller.handle_utterance("diesel")
        assert result.updated_filters.makes == ["BMW"]
        assert result.updated_filters.fuel_types == ["diesel"]

    def test_repeats_kept_without_dedupe(self, controller):
        controller.handle_utterance("a bmw")
        assert controller.handle_utterance("a bmw").updated_filters.makes == ["BMW", "BMW"]

    def test_dedupe_option(self, config):
        controller = create_controller(config, dedupe_on_merge=True)
        controller.start_session()
        controller.handle_utterance("a bmw")
        assert controller.handle_utterance("a bmw").updated_filters.makes == ["BMW"]

    def test_unknown_keeps_filters(self, controller):
        controller.handle_utterance("a bmw")
        result = controller.handle_utterance("hello there")
        assert result.intent == Intent.UNKNOWN
        assert result.spoken_responses == [UNKNOWN_RESPONSE]
        assert result.updated_filters.makes == ["BMW"]

    def test_compare_gets_clarification(self, controller):
        result = controller.handle_utterance("compare the audi and the bmw")
        assert result.intent == Intent.COMPARE_CARS
        assert result.updated_filters.is_empty()
        assert len(result.spoken_responses) == 1


class TestConfirmation:
    def test_checklist_complete_offers_search(self, controller):
        result = _fill_checklist(controller)
        assert result.updated_filters.transmissions == ["automatic"]
        assert result.spoken_responses == ["Got it! Looking for automatic transmission.", SEARCH_OFFER]
        assert result.session_state == ConversationStep.CONFIRMING
        assert controller.state.pending_confirmation == SEARCH_OFFER

    def test_confirm_requests_search(self, controller):
        _fill_checklist(controller)
        result = controller.handle_utterance("yes")
        assert result.intent == Intent.CONFIRM
        assert result.spoken_responses == [SEARCH_ACKNOWLEDGEMENT]
        assert result.search_requested is True
        assert result.session_state == ConversationStep.DONE
        assert controller.is_done()
        assert result.updated_filters.transmissions == ["automatic"]

    def test_deny_returns_to_collecting(self, controller):
        _fill_checklist(controller)
        result = controller.handle_utterance("no")
        assert result.spoken_responses == [DENY_RESPONSE]
        assert result.session_state == ConversationStep.COLLECTING_PREFERENCES
        assert controller.state.pending_confirmation is None
        assert result.updated_filters.makes == ["BMW"]

    def test_more_details_while_confirming(self, controller):
        _fill_checklist(controller)
        result = controller.handle_utterance("black")
        assert result.updated_filters.exterior_colors == ["Black"]
        assert result.session_state == ConversationStep.CONFIRMING


class TestReset:
    def test_reset_clears_filters(self, controller):
        _fill_checklist(controller)
        result = controller.handle_utterance("start over")
        assert result.intent == Intent.RESET_FILTERS
        assert result.spoken_responses == [RESET_RESPONSE]
        assert result.updated_filters.is_empty()
        assert result.session_state == ConversationStep.COLLECTING_PREFERENCES


class TestNoopTurns:
    def test_blank_input(self, controller):
        controller.handle_utterance("a bmw")
        transcript_length = len(controller.transcript)
        result = controller.handle_utterance("   ")
        assert result.error == "empty_transcript"
        assert result.spoken_responses == []
        assert result.updated_filters.makes == ["BMW"]
        assert len(controller.transcript) == transcript_length

    def test_input_after_done(self, controller):
        _fill_checklist(controller)
        controller.handle_utterance("yes")
        result = controller.handle_utterance("an audi")
        assert result.error == "session_done"
        assert result.spoken_responses == []
        assert result.updated_filters.makes == ["BMW"]
        assert result.session_state == ConversationStep.DONE


class TestTurnResult:
    def test_to_dict(self, controller):
        data = controller.handle_utterance("a bmw").to_dict()
        assert data["updatedFilters"] == {"makes": ["BMW"]}
        assert data["sessionState"] == "collecting_preferences"
        assert data["intent"] == "specify_filters"
        assert data["searchRequested"] is False
        assert data["error"] is None

    def test_transcript_records_turn(self, controller):
        controller.handle_utterance("a bmw")
        assert [m.role for m in controller.transcript] == ["assistant", "user", "assistant", "assistant"]
        assert controller.transcript[1].text == "a bmw"


class TestCreateController:
    def test_overrides(self):
        base = VoiceAssistantConfig()
        controller = create_controller(base, word_boundary_matching=True)
        assert controller.config.word_boundary_matching is True
        assert base.word_boundary_matching is False

    def test_word_boundary_flows_to_parser(self):
        controller = create_controller(VoiceAssistantConfig(), word_boundary_matching=True)
        controller.start_session()
        result = controller.handle_utterance("caravan")
        assert result.intent == Intent.UNKNOWN
        assert result.updated_filters.is_empty()
