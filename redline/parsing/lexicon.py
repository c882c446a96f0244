"""
Static keyword tables for utterance parsing.

Each category maps surface keywords to canonical values. Tables are ordered
tuples of ``(keyword, canonical)`` pairs: extraction scans them in the order
written here, so the order of the rows is part of the parser's behaviour.
Several keywords may alias one canonical value ("sedan" and "saloon" both
give "saloon").

The tables are validated once at import; a bad table raises ``LexiconError``
before any utterance is parsed.
"""
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from redline.filters.models import FEATURE_FIELDS

KeywordTable = Tuple[Tuple[str, str], ...]


class LexiconError(ValueError):
    """Raised when a lexicon table is missing, unknown or inconsistent."""


MAKES: KeywordTable = (
    ("volkswagen", "Volkswagen"),
    ("vw", "Volkswagen"),
    ("bmw", "BMW"),
    ("mercedes", "Mercedes"),
    ("benz", "Mercedes"),
    ("audi", "Audi"),
    ("toyota", "Toyota"),
    ("ford", "Ford"),
    ("porsche", "Porsche"),
    ("tesla", "Tesla"),
    ("lamborghini", "Lamborghini"),
    ("ferrari", "Ferrari"),
)

VEHICLE_TYPES: KeywordTable = (
    ("suv", "suv"),
    ("sports utility vehicle", "suv"),
    ("off-road", "suv"),
    ("pickup", "suv"),
    ("saloon", "saloon"),
    ("sedan", "saloon"),
    ("coupe", "sports-coupe"),
    ("sports car", "sports-coupe"),
    ("estate", "estate"),
    ("wagon", "estate"),
    ("small car", "small-car"),
    ("hatchback", "small-car"),
    ("cabriolet", "cabriolet"),
    ("convertible", "cabriolet"),
    ("roadster", "cabriolet"),
    ("van", "van"),
    ("minibus", "van"),
)

CONDITIONS: KeywordTable = (
    ("new", "new"),
    ("used", "used"),
    ("second hand", "used"),
    ("pre-registration", "pre-registration"),
    ("demo", "demonstration"),
    ("demonstration", "demonstration"),
    ("classic", "classic"),
    ("vintage", "classic"),
)

FUEL_TYPES: KeywordTable = (
    ("petrol", "petrol"),
    ("gas", "petrol"),
    ("gasoline", "petrol"),
    ("diesel", "diesel"),
    ("electric", "electric"),
    ("ev", "electric"),
    ("hybrid", "hybrid"),
    ("plug-in hybrid", "plug-in-hybrid"),
    ("phev", "plug-in-hybrid"),
    ("hydrogen", "hydrogen"),
    ("natural gas", "cng"),
    ("cng", "cng"),
    ("lpg", "lpg"),
    ("ethanol", "ethanol"),
)

TRANSMISSIONS: KeywordTable = (
    ("automatic", "automatic"),
    ("auto", "automatic"),
    ("manual", "manual"),
    ("stick shift", "manual"),
    ("semi-automatic", "semi-automatic"),
    ("semi auto", "semi-automatic"),
)

DRIVE_TYPES: KeywordTable = (
    ("all wheel drive", "awd"),
    ("awd", "awd"),
    ("4wd", "awd"),
    ("front wheel drive", "fwd"),
    ("fwd", "fwd"),
    ("rear wheel drive", "rwd"),
    ("rwd", "rwd"),
)

FEATURES: KeywordTable = (
    ("heated seats", "heatedSeats"),
    ("navigation", "navigationSystem"),
    ("nav", "navigationSystem"),
    ("gps", "navigationSystem"),
    ("sunroof", "sunroof"),
    ("panoramic roof", "sunroof"),
    ("apple carplay", "carPlay"),
    ("android auto", "carPlay"),
    ("alloy wheels", "alloyWheels"),
    ("led headlights", "ledHeadlights"),
    ("led lights", "ledHeadlights"),
    ("lane assist", "laneChangeAssist"),
    ("emergency brake", "emergencyBrakeAssist"),
    ("trailer coupling", "trailerCoupling"),
    ("tow bar", "trailerCoupling"),
)

COLORS: KeywordTable = (
    ("black", "Black"),
    ("white", "White"),
    ("silver", "Silver"),
    ("grey", "Grey"),
    ("gray", "Grey"),
    ("blue", "Blue"),
    ("red", "Red"),
    ("brown", "Brown"),
    ("green", "Green"),
    ("orange", "Orange"),
    ("yellow", "Yellow"),
    ("beige", "Beige"),
    ("gold", "Gold"),
    ("purple", "Purple"),
)

# Category name -> table, in extraction order
LEXICON: Mapping[str, KeywordTable] = MappingProxyType({
    "makes": MAKES,
    "vehicleTypes": VEHICLE_TYPES,
    "conditions": CONDITIONS,
    "fuelTypes": FUEL_TYPES,
    "transmissions": TRANSMISSIONS,
    "driveTypes": DRIVE_TYPES,
    "features": FEATURES,
    "colors": COLORS,
})

# Allowed canonical values per category (None = open set)
CANONICAL_VALUES: Mapping[str, Optional[FrozenSet[str]]] = MappingProxyType({
    "makes": None,
    "vehicleTypes": frozenset({
        "cabriolet", "suv", "small-car", "van", "estate", "saloon", "sports-coupe", "other",
    }),
    "conditions": frozenset({
        "new", "used", "pre-registration", "employee", "classic", "demonstration",
    }),
    "fuelTypes": frozenset({
        "petrol", "diesel", "electric", "hybrid", "plug-in-hybrid", "hydrogen", "cng", "lpg", "ethanol",
    }),
    "transmissions": frozenset({"automatic", "semi-automatic", "manual"}),
    "driveTypes": frozenset({"awd", "fwd", "rwd"}),
    "features": frozenset(FEATURE_FIELDS),
    "colors": None,
})

# Spoken names for feature flags
FEATURE_LABELS: Mapping[str, str] = MappingProxyType({
    "heatedSeats": "heated seats",
    "navigationSystem": "navigation system",
    "sunroof": "sunroof",
    "carPlay": "Apple CarPlay",
    "alloyWheels": "alloy wheels",
    "ledHeadlights": "LED headlights",
    "laneChangeAssist": "lane change assist",
    "emergencyBrakeAssist": "emergency brake assist",
    "trailerCoupling": "trailer coupling",
})


def get_category(name: str) -> KeywordTable:
    """Return the keyword table for a category, or raise LexiconError."""
    try:
        return LEXICON[name]
    except KeyError:
        raise LexiconError(f"Unknown lexicon category: {name!r}") from None


def validate_lexicon(
    lexicon: Mapping[str, KeywordTable],
    canonical_values: Mapping[str, Optional[FrozenSet[str]]],
) -> None:
    """
    Check a lexicon against its canonical value sets.

    Raises:
        LexiconError: if a category is missing, unknown, empty, has a blank or
            non-lower-case keyword, or maps outside its enumerated set.
    """
    if not lexicon:
        raise LexiconError("Lexicon is undefined or empty")

    missing = set(canonical_values) - set(lexicon)
    if missing:
        raise LexiconError(f"Lexicon is missing categories: {sorted(missing)}")

    for category, table in lexicon.items():
        if category not in canonical_values:
            raise LexiconError(f"Unknown lexicon category: {category!r}")
        if not table:
            raise LexiconError(f"Lexicon category {category!r} has no keywords")

        allowed = canonical_values[category]
        seen: Dict[str, str] = {}
        for keyword, canonical in table:
            if not keyword or keyword != keyword.strip().lower():
                raise LexiconError(f"{category}: keyword {keyword!r} must be lower-case and trimmed")
            if keyword in seen:
                raise LexiconError(f"{category}: duplicate keyword {keyword!r}")
            if allowed is not None and canonical not in allowed:
                raise LexiconError(f"{category}: {keyword!r} maps to unknown value {canonical!r}")
            seen[keyword] = canonical

    missing_labels = set(FEATURE_FIELDS) - set(FEATURE_LABELS)
    if missing_labels:
        raise LexiconError(f"Features without a spoken label: {sorted(missing_labels)}")


validate_lexicon(LEXICON, CANONICAL_VALUES)
