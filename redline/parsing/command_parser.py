"""
Rule-based voice command parser.

Turns one free-text utterance into a ``VoiceCommand``: an intent label, the
entities recognized by keyword and regex matching, and a confidence score.

    parse("I need a used BMW SUV under 40000 euros with heated seats")
    -> intent=specify_filters,
       entities={makes: [BMW], vehicleTypes: [suv], conditions: [used],
                 features: {heatedSeats: True}, priceRange: {max: 40000}}

Keyword matching is plain substring containment by default, so "van" also
matches inside "caravan". ``word_boundary=True`` (or the
``word_boundary_matching`` config flag) restricts matches to whole words.

Parsing never raises: anything unrecognized is simply left out, and an
utterance with nothing recognized gets ``Intent.UNKNOWN``.
"""
from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from redline.core.config import get_config
from redline.parsing.lexicon import LEXICON, get_category
from redline.parsing.models import Entities, Intent, NumericRange, VoiceCommand
from redline.utils.logger import get_logger

logger = get_logger("parsing.command_parser")

Matcher = Callable[[str, str], bool]


#  Keyword matching

def _contains_substring(text: str, keyword: str) -> bool:
    return keyword in text


@lru_cache(maxsize=512)
def _word_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")


def _contains_word(text: str, keyword: str) -> bool:
    return _word_pattern(keyword).search(text) is not None


def _matcher(word_boundary: bool) -> Matcher:
    return _contains_word if word_boundary else _contains_substring


def _contains_any(text: str, keywords: Sequence[str], matcher: Matcher) -> bool:
    return any(matcher(text, keyword) for keyword in keywords)


def _extract_keywords(text: str, category: str, matcher: Matcher = _contains_substring) -> List[str]:
    """Canonical values of every keyword found, in table order, deduplicated."""
    found: List[str] = []
    for keyword, canonical in get_category(category):
        if matcher(text, keyword) and canonical not in found:
            found.append(canonical)
    return found


def _extract_features(text: str, matcher: Matcher = _contains_substring) -> Dict[str, bool]:
    features: Dict[str, bool] = {}
    for keyword, feature in get_category("features"):
        if matcher(text, keyword):
            features[feature] = True
    return features


#  Numeric helpers

_NUMBER = r"\d+(?:,\d{3})*(?:\.\d{2})?"
_CURRENCY = r"(?P<cur>€|euros?)?"
_DISTANCE_UNIT = r"\s*(?:km|kilomet(?:er|re)s?|miles?|mi)\b"
# Price numbers must not run on into more digits or into a distance unit
_NOT_DISTANCE = rf"(?!\d|,\d|{_DISTANCE_UNIT})"
_CURRENCY_RE = re.compile(r"€|\beuros?\b")
# Currency spoken right after the number: "30000 euros"
_TRAILING_CURRENCY_RE = re.compile(r"\s*(?:€|euros?\b)")
_YEAR_LIKE_RE = re.compile(r"(?:19|20)\d{2}")

_MAX_KEYWORDS = ("under", "less than", "below", "max", "maximum")
_MIN_KEYWORDS = ("over", "more than", "above", "min", "minimum")
_YEAR_MIN_KEYWORDS = ("from", "after", "since", "newer than")
_YEAR_MAX_KEYWORDS = ("before", "until", "older than")

# Bare numbers below this are counts ("5 seats"), not prices
_MIN_BARE_PRICE = 100


def _parse_number(raw: Optional[str]) -> Optional[int]:
    """Parse '40,000' -> 40000. Returns None when the text is not a finite number."""
    if raw is None:
        return None
    try:
        value = float(raw.replace(",", ""))
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return int(value)


def _captured(match: re.Match) -> Tuple[Optional[str], Optional[str]]:
    groups = match.groupdict()
    return groups.get("lo"), groups.get("hi")


def _range(minimum: Optional[int] = None, maximum: Optional[int] = None) -> Optional[NumericRange]:
    bounds = NumericRange(min=minimum, max=maximum)
    return None if bounds.is_empty() else bounds


def _bound_by_keywords(
    text: str,
    lo: Optional[int],
    hi: Optional[int],
    matcher: Matcher,
    default_to_max: bool,
) -> Optional[NumericRange]:
    """Decide the bounding direction for price / mileage by re-scanning the whole text."""
    if _contains_any(text, _MAX_KEYWORDS, matcher):
        return _range(maximum=lo)
    if _contains_any(text, _MIN_KEYWORDS, matcher):
        return _range(minimum=lo)
    if hi is not None:
        return _range(minimum=lo, maximum=hi)
    return _range(maximum=lo) if default_to_max else _range(minimum=lo)


#  Price extraction

_PRICE_PATTERNS = [
    # "under 30000", "less than €25,000", "max 40000 euros"
    re.compile(rf"(?:under|less than|below|max|maximum)\s*{_CURRENCY}\s*(?P<lo>{_NUMBER}){_NOT_DISTANCE}"),
    # "over 20000", "more than 15,000 euros", "minimum €10000"
    re.compile(rf"(?:over|more than|above|min|minimum)\s*{_CURRENCY}\s*(?P<lo>{_NUMBER}){_NOT_DISTANCE}"),
    # "between 20000 and 50000", "from €10,000 to €20,000"
    re.compile(
        rf"(?:between|from)\s*{_CURRENCY}\s*(?P<lo>{_NUMBER})\s*(?:to|and|-)\s*(?:€|euros?)?\s*"
        rf"(?P<hi>{_NUMBER}){_NOT_DISTANCE}"
    ),
    # "30000", "€25,000", "euro 9000"
    re.compile(rf"{_CURRENCY}\s*(?<![\d,.])(?P<lo>{_NUMBER}){_NOT_DISTANCE}(?![a-z])"),
]
_BARE_PRICE_PATTERN = _PRICE_PATTERNS[-1]


def _is_price_match(pattern: re.Pattern, match: re.Match, text: str) -> bool:
    """Reject matches that are really model years or small counts."""
    numbers = [raw for raw in _captured(match) if raw is not None]
    # Only a currency marker on this match counts, not one elsewhere in the utterance
    has_currency = (
        _CURRENCY_RE.search(match.group(0)) is not None
        or _TRAILING_CURRENCY_RE.match(text, match.end()) is not None
    )
    if not has_currency and all(_YEAR_LIKE_RE.fullmatch(raw) for raw in numbers):
        return False
    if pattern is _BARE_PRICE_PATTERN and not match.group("cur"):
        value = _parse_number(numbers[0])
        if value is not None and value < _MIN_BARE_PRICE:
            return False
    return True


def _extract_price_range(text: str, matcher: Matcher = _contains_substring) -> Optional[NumericRange]:
    for pattern in _PRICE_PATTERNS:
        for match in pattern.finditer(text):
            if not _is_price_match(pattern, match, text):
                continue
            lo, hi = _captured(match)
            return _bound_by_keywords(text, _parse_number(lo), _parse_number(hi), matcher, default_to_max=True)
    return None


#  Year extraction

_YEAR = r"(?<![\d,])(?P<{name}>(?:19|20)\d{{2}})(?![\d,])"

_YEAR_PATTERNS = [
    # "between 2015 and 2020", "from 2016 to 2019"
    re.compile(
        rf"(?:between|from)\s*{_YEAR.format(name='lo')}\s*(?:to|and|-)\s*{_YEAR.format(name='hi')}"
    ),
    # "from 2018", "since 2020", "newer than 2017"
    re.compile(rf"(?:from|after|since|newer than)\s*{_YEAR.format(name='lo')}"),
    # "before 2010", "older than 2005"
    re.compile(rf"(?:before|until|older than)\s*{_YEAR.format(name='lo')}"),
    # "2020"
    re.compile(_YEAR.format(name='lo')),
]


def _extract_year_range(text: str, matcher: Matcher = _contains_substring) -> Optional[NumericRange]:
    for pattern in _YEAR_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        lo, hi = (_parse_number(raw) for raw in _captured(match))
        if hi is not None:
            return _range(minimum=lo, maximum=hi)
        if _contains_any(text, _YEAR_MIN_KEYWORDS, matcher):
            return _range(minimum=lo)
        if _contains_any(text, _YEAR_MAX_KEYWORDS, matcher):
            return _range(maximum=lo)
        # A bare year means "this year or newer"
        return _range(minimum=lo)
    return None


#  Mileage extraction

_MILEAGE_PATTERNS = [
    # "under 50000 km", "less than 30,000 miles"
    re.compile(rf"(?:under|less than|below|max|maximum)\s*(?P<lo>{_NUMBER}){_DISTANCE_UNIT}"),
    # "over 100000 km"
    re.compile(rf"(?:over|more than|above|min|minimum)\s*(?P<lo>{_NUMBER}){_DISTANCE_UNIT}"),
    # "between 10000 and 60000 km"
    re.compile(
        rf"(?:between|from)\s*(?P<lo>{_NUMBER})(?:{_DISTANCE_UNIT})?\s*(?:to|and|-)\s*"
        rf"(?P<hi>{_NUMBER}){_DISTANCE_UNIT}"
    ),
    # "80000 km"
    re.compile(rf"(?<![\d,.])(?P<lo>{_NUMBER}){_DISTANCE_UNIT}"),
]


def _extract_mileage(text: str, matcher: Matcher = _contains_substring) -> Optional[NumericRange]:
    for pattern in _MILEAGE_PATTERNS:
        match = pattern.search(text)
        if match:
            lo, hi = _captured(match)
            return _bound_by_keywords(text, _parse_number(lo), _parse_number(hi), matcher, default_to_max=True)
    return None


#  Intent & confidence

# Checked in this order; the first group with a hit decides the intent
INTENT_RULES: Tuple[Tuple[Intent, Tuple[str, ...]], ...] = (
    (Intent.SEARCH_CARS, ("find", "search", "looking for", "look for")),
    (Intent.COMPARE_CARS, ("compare", "comparison")),
    (Intent.CAR_DETAILS, ("detail", "details", "more info", "tell me about")),
    (Intent.RESET_FILTERS, ("reset", "clear", "start over")),
    (Intent.CONFIRM, ("yes", "correct", "right")),
    (Intent.DENY, ("no", "wrong", "change")),
)

CONFIDENCE_BOOSTERS = ("find", "search", "looking for", "want", "need", "show me")

BASE_CONFIDENCE = 0.5
CATEGORY_BONUS = 0.1
BOOSTER_BONUS = 0.2


def _determine_intent(text: str, entities: Entities, matcher: Matcher = _contains_substring) -> Intent:
    for intent, keywords in INTENT_RULES:
        if _contains_any(text, keywords, matcher):
            return intent
    if not entities.is_empty():
        return Intent.SPECIFY_FILTERS
    return Intent.UNKNOWN


def _calculate_confidence(entities: Entities, text: str, matcher: Matcher = _contains_substring) -> float:
    confidence = BASE_CONFIDENCE + CATEGORY_BONUS * len(entities.categories())
    if _contains_any(text, CONFIDENCE_BOOSTERS, matcher):
        confidence += BOOSTER_BONUS
    return round(min(max(confidence, 0.0), 1.0), 4)


#  Public entry point

# Lexicon category -> Entities field
_LIST_CATEGORIES = {
    "makes": "makes",
    "vehicleTypes": "vehicle_types",
    "conditions": "conditions",
    "fuelTypes": "fuel_types",
    "transmissions": "transmissions",
    "driveTypes": "drive_types",
    "colors": "colors",
}


def extract_entities(text: str, matcher: Matcher = _contains_substring) -> Entities:
    """Run every extractor over already-normalized text."""
    fields = {}
    for category in LEXICON:
        if category == "features":
            features = _extract_features(text, matcher)
            if features:
                fields["features"] = features
            continue
        values = _extract_keywords(text, category, matcher)
        if values:
            fields[_LIST_CATEGORIES[category]] = values

    price_range = _extract_price_range(text, matcher)
    if price_range:
        fields["price_range"] = price_range

    year_range = _extract_year_range(text, matcher)
    if year_range:
        fields["year_range"] = year_range

    mileage = _extract_mileage(text, matcher)
    if mileage:
        fields["mileage"] = mileage

    return Entities(**fields)


def parse(utterance: str, *, word_boundary: Optional[bool] = None) -> VoiceCommand:
    """
    Parse one utterance into a structured command.

    Args:
        utterance: Raw transcript text. Non-string input is treated as empty.
        word_boundary: Match keywords as whole words instead of substrings.
            Defaults to the ``word_boundary_matching`` config flag.

    Returns:
        VoiceCommand with intent, entities and confidence in [0, 1].
    """
    if word_boundary is None:
        word_boundary = get_config().word_boundary_matching
    matcher = _matcher(word_boundary)

    text = utterance.lower().strip() if isinstance(utterance, str) else ""

    entities = extract_entities(text, matcher)
    intent = _determine_intent(text, entities, matcher)
    confidence = _calculate_confidence(entities, text, matcher)

    logger.debug(
        f"Parsed {text[:80]!r}: intent={intent.value}, "
        f"categories={entities.categories()}, confidence={confidence}"
    )
    return VoiceCommand(intent=intent, entities=entities, confidence=confidence)
