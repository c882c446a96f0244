"""Tests for the keyword lexicon tables and their validation."""

from types import MappingProxyType

import pytest

from redline.parsing.lexicon import (
    CANONICAL_VALUES,
    FEATURE_LABELS,
    LEXICON,
    LexiconError,
    get_category,
    validate_lexicon,
)


def _lexicon_with(**tables):
    lexicon = dict(LEXICON)
    lexicon.update(tables)
    return lexicon


class TestLexiconTables:
    def test_category_order(self):
        assert list(LEXICON) == [
            "makes", "vehicleTypes", "conditions", "fuelTypes",
            "transmissions", "driveTypes", "features", "colors",
        ]

    def test_read_only(self):
        assert isinstance(LEXICON, MappingProxyType)
        with pytest.raises(TypeError):
            LEXICON["makes"] = ()

    def test_every_feature_has_label(self):
        for _, feature in LEXICON["features"]:
            assert feature in FEATURE_LABELS

    def test_get_category(self):
        assert ("sedan", "saloon") in get_category("vehicleTypes")

    def test_get_unknown_category(self):
        with pytest.raises(LexiconError):
            get_category("engines")

    def test_lexicon_error_is_value_error(self):
        assert issubclass(LexiconError, ValueError)


class TestValidateLexicon:
    def test_shipped_tables_valid(self):
        validate_lexicon(LEXICON, CANONICAL_VALUES)

    def test_empty_lexicon(self):
        with pytest.raises(LexiconError):
            validate_lexicon({}, CANONICAL_VALUES)

    def test_missing_category(self):
        lexicon = dict(LEXICON)
        del lexicon["colors"]
        with pytest.raises(LexiconError, match="missing"):
            validate_lexicon(lexicon, CANONICAL_VALUES)

    def test_unknown_category(self):
        with pytest.raises(LexiconError, match="Unknown"):
            validate_lexicon(_lexicon_with(engines=(("v8", "v8"),)), CANONICAL_VALUES)

    def test_value_outside_enumerated_set(self):
        lexicon = _lexicon_with(vehicleTypes=(("limo", "limousine"),))
        with pytest.raises(LexiconError, match="limousine"):
            validate_lexicon(lexicon, CANONICAL_VALUES)

    def test_open_set_accepts_any_value(self):
        validate_lexicon(_lexicon_with(makes=(("skoda", "Skoda"),)), CANONICAL_VALUES)

    def test_upper_case_keyword(self):
        with pytest.raises(LexiconError):
            validate_lexicon(_lexicon_with(makes=(("BMW", "BMW"),)), CANONICAL_VALUES)

    def test_duplicate_keyword(self):
        lexicon = _lexicon_with(colors=(("red", "Red"), ("red", "Crimson")))
        with pytest.raises(LexiconError, match="duplicate"):
            validate_lexicon(lexicon, CANONICAL_VALUES)

    def test_empty_category(self):
        with pytest.raises(LexiconError):
            validate_lexicon(_lexicon_with(colors=()), CANONICAL_VALUES)
