"""
Partial car filter state accumulated over a voice session.

Every field is optional: ``None`` means the criterion was never collected.
Attributes are snake_case; ``to_dict()`` gives the camelCase shape the
inventory UI consumes (``vehicleTypes``, ``priceMax``, ``heatedSeats``...).
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class CarFilters(BaseModel):
    """Search criteria collected so far."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # List criteria (union across turns)
    makes: Optional[List[str]] = Field(None, description="Canonical makes, e.g. ['BMW']")
    vehicle_types: Optional[List[str]] = Field(None, description="Body types, e.g. ['suv', 'saloon']")
    conditions: Optional[List[str]] = Field(None, description="Conditions, e.g. ['used']")
    fuel_types: Optional[List[str]] = None
    transmissions: Optional[List[str]] = None
    drive_types: Optional[List[str]] = None
    exterior_colors: Optional[List[str]] = None

    # Scalar bounds (last write wins per bound)
    price_min: Optional[Number] = None
    price_max: Optional[Number] = None
    year_min: Optional[Number] = None
    year_max: Optional[Number] = None
    mileage_min: Optional[Number] = None
    mileage_max: Optional[Number] = None

    # Feature flags (last write wins per flag)
    heated_seats: Optional[bool] = None
    navigation_system: Optional[bool] = None
    sunroof: Optional[bool] = None
    car_play: Optional[bool] = None
    alloy_wheels: Optional[bool] = None
    led_headlights: Optional[bool] = None
    lane_change_assist: Optional[bool] = None
    emergency_brake_assist: Optional[bool] = None
    trailer_coupling: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        """External camelCase shape, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_dict()

    def has_price_bound(self) -> bool:
        return self.price_min is not None or self.price_max is not None


# Boolean feature flags keyed by their external (camelCase) name
FEATURE_FIELDS: Dict[str, str] = {
    to_camel(name): name
    for name, info in CarFilters.model_fields.items()
    if info.annotation == Optional[bool]
}
