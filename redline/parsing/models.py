"""
Typed results of utterance parsing.

``Entities`` has one optional field per category: string lists for keyword
categories, a bool map for features and a numeric range for price / year /
mileage. ``to_dict()`` gives the camelCase external shape.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class Intent(str, Enum):
    """Coarse purpose of one utterance."""
    SEARCH_CARS = "search_cars"
    COMPARE_CARS = "compare_cars"
    CAR_DETAILS = "car_details"
    RESET_FILTERS = "reset_filters"
    CONFIRM = "confirm"
    DENY = "deny"
    SPECIFY_FILTERS = "specify_filters"
    UNKNOWN = "unknown"


class NumericRange(BaseModel):
    """Inclusive bounds; either side may be absent."""
    min: Optional[Number] = None
    max: Optional[Number] = None

    def is_empty(self) -> bool:
        return self.min is None and self.max is None


class Entities(BaseModel):
    """Entities recognized in a single utterance."""

    model_config = ConfigDict(populate_by_name=True)

    makes: Optional[List[str]] = None
    vehicle_types: Optional[List[str]] = Field(None, alias="vehicleTypes")
    conditions: Optional[List[str]] = None
    fuel_types: Optional[List[str]] = Field(None, alias="fuelTypes")
    transmissions: Optional[List[str]] = None
    drive_types: Optional[List[str]] = Field(None, alias="driveTypes")
    features: Optional[Dict[str, bool]] = None
    colors: Optional[List[str]] = None
    price_range: Optional[NumericRange] = Field(None, alias="priceRange")
    year_range: Optional[NumericRange] = Field(None, alias="yearRange")
    mileage: Optional[NumericRange] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def categories(self) -> List[str]:
        """Names of the populated categories, in declaration order."""
        return list(self.to_dict().keys())

    def is_empty(self) -> bool:
        return not self.categories()


class VoiceCommand(BaseModel):
    """Structured command produced by ``parse``."""

    model_config = ConfigDict(frozen=True)

    intent: Intent
    entities: Entities = Field(default_factory=Entities)
    confidence: float = Field(0.5, ge=0.0, le=1.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "intent": self.intent.value,
            "entities": self.entities.to_dict(),
            "confidence": self.confidence,
        }
