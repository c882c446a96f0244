"""
Spoken responses for the voice interview.

Template-based: the confirmation echo is assembled from the entities of the
current turn, and the follow-up question comes from the preference slot
checklist.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from redline.filters.models import CarFilters
from redline.interview.preference_slots import SEARCH_OFFER, SEARCH_OFFER_REPLIES, next_missing_slot
from redline.parsing.lexicon import FEATURE_LABELS
from redline.parsing.models import Entities, Intent, Number
from redline.utils.logger import get_logger

logger = get_logger("interview.question_generator")


GREETING_TEMPLATE = (
    "Welcome to {dealership} voice assistant! I can help you find the perfect car. "
    "Tell me what you're looking for - for example, 'I need a used SUV under thirty thousand euros "
    "with automatic transmission.'"
)

VAGUE_CONFIRMATION = "I understand you're looking for a car. Could you be more specific about what you want?"

SEARCH_ACKNOWLEDGEMENT = "Perfect! Let me search for cars matching your criteria."
DENY_RESPONSE = "No problem! Please tell me what you'd like to change or search for instead."
RESET_RESPONSE = "All filters cleared! Let's start fresh. What kind of car are you looking for?"

CLARIFICATIONS = {
    Intent.COMPARE_CARS: (
        "I can't compare cars by voice yet, but you can add cars to the comparison page. "
        "Meanwhile, tell me what you're looking for and I'll narrow down the options."
    ),
    Intent.CAR_DETAILS: (
        "Open any car from the results to see its full details. "
        "What kind of car should I look for?"
    ),
}

UNKNOWN_RESPONSE = (
    "I didn't quite understand that. Could you try rephrasing? For example, you could say "
    "'I want a BMW SUV under 50,000 euros' or 'Show me electric cars with heated seats.'"
)


class QuestionResponse(BaseModel):
    """Next clarifying question."""
    question: str = Field(description="The question to speak")
    quick_replies: List[str] = Field(default_factory=list, description="Short example answers")
    topic: str = Field(description="Slot the question addresses, or 'search' for the search offer")


def generate_greeting(dealership_name: str) -> str:
    return GREETING_TEMPLATE.format(dealership=dealership_name)


def _format_amount(value: Number, currency_symbol: str) -> str:
    return f"{currency_symbol}{value:,.0f}"


def generate_confirmation(entities: Entities, currency_symbol: str = "€") -> str:
    """
    Echo back what was understood in this turn.

    Order: makes, vehicle types, conditions, fuel types, transmissions, price
    bounds, features. Categories absent from the turn are left out.
    """
    parts: List[str] = []

    if entities.makes:
        parts.append(f"{' or '.join(entities.makes)} vehicles")
    if entities.vehicle_types:
        parts.append(f"{' or '.join(entities.vehicle_types)} body type")
    if entities.conditions:
        parts.append(f"{' or '.join(entities.conditions)} condition")
    if entities.fuel_types:
        parts.append(f"{' or '.join(entities.fuel_types)} fuel type")
    if entities.transmissions:
        parts.append(f"{' or '.join(entities.transmissions)} transmission")

    price = entities.price_range
    if price is not None:
        if price.max is not None:
            parts.append(f"under {_format_amount(price.max, currency_symbol)}")
        if price.min is not None:
            parts.append(f"over {_format_amount(price.min, currency_symbol)}")

    if entities.features:
        labels = [FEATURE_LABELS.get(key, key) for key in entities.features]
        parts.append(f"with {', '.join(labels)}")

    if not parts:
        return VAGUE_CONFIRMATION
    return f"Got it! Looking for {', '.join(parts)}."


def generate_next_question(filters: Optional[CarFilters]) -> QuestionResponse:
    """Ask about the first empty checklist slot, or offer to search."""
    slot = next_missing_slot(filters)
    if slot is None:
        return QuestionResponse(question=SEARCH_OFFER, quick_replies=list(SEARCH_OFFER_REPLIES), topic="search")

    logger.debug(f"Next question targets slot: {slot.name}")
    return QuestionResponse(question=slot.question, quick_replies=list(slot.example_replies), topic=slot.name)


def generate_clarification(intent: Intent) -> str:
    """Prompt for intents the voice flow does not act on."""
    return CLARIFICATIONS.get(intent, UNKNOWN_RESPONSE)
