"""
Preference slot definitions for the voice interview.

The slots form a fixed checklist: after every filter update the assistant asks
about the first slot that is still empty (brand, then budget, then body type,
then transmission). Once all are filled it offers to run the search.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from redline.filters.models import CarFilters


@dataclass(frozen=True)
class PreferenceSlot:
    """Definition of a single preference slot."""
    name: str
    display_name: str
    is_filled: Callable[[CarFilters], bool]
    question: str
    example_replies: List[str] = field(default_factory=list)


def _has_values(attribute: str) -> Callable[[CarFilters], bool]:
    def check(filters: CarFilters) -> bool:
        return bool(getattr(filters, attribute))
    return check


# Asked in this order
VEHICLE_SLOTS = (
    PreferenceSlot(
        name="make",
        display_name="Brand",
        is_filled=_has_values("makes"),
        question="What car brand would you prefer? For example, BMW, Mercedes, Audi, or Volkswagen?",
        example_replies=["BMW", "Mercedes", "Audi", "Volkswagen"],
    ),
    PreferenceSlot(
        name="budget",
        display_name="Budget",
        is_filled=CarFilters.has_price_bound,
        question=(
            "What's your budget range? You can say something like 'under 30,000 euros' "
            "or 'between 20,000 and 50,000 euros'."
        ),
        example_replies=["Under 30,000 euros", "Between 20,000 and 50,000 euros"],
    ),
    PreferenceSlot(
        name="body_style",
        display_name="Body Type",
        is_filled=_has_values("vehicle_types"),
        question="What type of vehicle interests you? For example, SUV, sedan, coupe, or estate?",
        example_replies=["SUV", "Sedan", "Coupe", "Estate"],
    ),
    PreferenceSlot(
        name="transmission",
        display_name="Transmission",
        is_filled=_has_values("transmissions"),
        question="Do you prefer automatic or manual transmission?",
        example_replies=["Automatic", "Manual"],
    ),
)

SEARCH_OFFER = (
    "Is there anything else specific you're looking for? "
    "Or should I search for cars with your current criteria?"
)
SEARCH_OFFER_REPLIES = ["Yes, search now", "Add more details"]


def next_missing_slot(filters: Optional[CarFilters]) -> Optional[PreferenceSlot]:
    """First unfilled slot in checklist order, or None when all are filled."""
    filters = filters or CarFilters()
    for slot in VEHICLE_SLOTS:
        if not slot.is_filled(filters):
            return slot
    return None


def get_slot_status(filters: Optional[CarFilters]) -> Dict[str, Any]:
    """
    Summarize which checklist slots are filled.

    Returns:
        Dict with 'filled' (display name -> value) and 'missing' (slot names),
        both in checklist order.
    """
    filters = filters or CarFilters()
    values = {
        "make": filters.makes,
        "budget": {k: v for k, v in (("min", filters.price_min), ("max", filters.price_max)) if v is not None},
        "body_style": filters.vehicle_types,
        "transmission": filters.transmissions,
    }

    filled = {}
    missing = []
    for slot in VEHICLE_SLOTS:
        if slot.is_filled(filters):
            filled[slot.display_name] = values[slot.name]
        else:
            missing.append(slot.name)

    return {"filled": filled, "missing": missing}
