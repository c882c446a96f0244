"""Tests for merging per-turn entities into the accumulated filters."""

from redline.filters.models import CarFilters
from redline.filters.reconcile import reconcile
from redline.parsing.command_parser import parse
from redline.parsing.models import Entities, NumericRange


class TestReconcileLists:
    def test_into_empty_state(self):
        filters = reconcile(parse("used bmw suv").entities)
        assert filters.makes == ["BMW"]
        assert filters.vehicle_types == ["suv"]
        assert filters.conditions == ["used"]

    def test_lists_accumulate(self):
        current = CarFilters(makes=["BMW"])
        filters = reconcile(Entities(makes=["Audi"]), current)
        assert filters.makes == ["BMW", "Audi"]

    def test_repeats_kept_by_default(self):
        filters = reconcile(Entities(makes=["BMW"]), CarFilters(makes=["BMW"]))
        assert filters.makes == ["BMW", "BMW"]

    def test_dedupe(self):
        filters = reconcile(Entities(makes=["BMW", "Audi"]), CarFilters(makes=["BMW"]), dedupe=True)
        assert filters.makes == ["BMW", "Audi"]

    def test_colors_become_exterior_colors(self):
        filters = reconcile(Entities(colors=["Black"]))
        assert filters.exterior_colors == ["Black"]
        assert filters.to_dict() == {"exteriorColors": ["Black"]}


class TestReconcileScalars:
    def test_bound_overwrites_only_its_side(self):
        current = CarFilters(price_min=10000, price_max=50000)
        filters = reconcile(Entities(price_range=NumericRange(max=30000)), current)
        assert filters.price_min == 10000
        assert filters.price_max == 30000

    def test_year_and_mileage(self):
        entities = Entities(year_range=NumericRange(min=2018), mileage=NumericRange(max=60000))
        filters = reconcile(entities)
        assert filters.year_min == 2018
        assert filters.mileage_max == 60000

    def test_nan_bound_is_absent(self):
        entities = Entities(price_range=NumericRange(min=float("nan"), max=30000))
        filters = reconcile(entities, CarFilters(price_min=5000))
        assert filters.price_min == 5000
        assert filters.price_max == 30000

    def test_scalars_idempotent(self):
        entities = parse("under 30000 euros with heated seats").entities
        once = reconcile(entities)
        twice = reconcile(entities, once)
        assert twice.price_max == once.price_max == 30000
        assert twice.heated_seats is True


class TestReconcileFeatures:
    def test_feature_overwrites(self):
        filters = reconcile(Entities(features={"sunroof": False}), CarFilters(sunroof=True, heated_seats=True))
        assert filters.sunroof is False
        assert filters.heated_seats is True

    def test_unknown_feature_ignored(self):
        filters = reconcile(Entities(features={"jetPack": True}))
        assert filters.is_empty()


class TestReconcileInputs:
    def test_inputs_not_modified(self):
        current = CarFilters(makes=["BMW"])
        reconcile(Entities(makes=["Audi"]), current)
        assert current.makes == ["BMW"]

    def test_none_entities(self):
        current = CarFilters(makes=["BMW"], price_max=30000)
        assert reconcile(None, current) == current

    def test_camel_case_dicts(self):
        filters = reconcile({"makes": ["BMW"], "priceRange": {"max": 30000}}, {"priceMin": 10000})
        assert filters.to_dict() == {"makes": ["BMW"], "priceMin": 10000, "priceMax": 30000}

    def test_malformed_entities_ignored(self):
        filters = reconcile({"makes": 5}, CarFilters(makes=["BMW"]))
        assert filters.makes == ["BMW"]


class TestReconcileMalformedInput:
    def test_bad_bound_drops_only_that_bound(self):
        filters = reconcile({"makes": ["BMW"], "priceRange": {"min": 10000, "max": "abc"}}, {})
        assert filters.to_dict() == {"makes": ["BMW"], "priceMin": 10000}

    def test_bad_list_drops_only_that_category(self):
        filters = reconcile({"makes": 5, "vehicleTypes": ["suv"], "features": {"sunroof": True}})
        assert filters.makes is None
        assert filters.vehicle_types == ["suv"]
        assert filters.sunroof is True

    def test_bad_current_filter_field_dropped(self):
        filters = reconcile({"makes": ["BMW"]}, {"priceMax": "cheap", "priceMin": 5000})
        assert filters.to_dict() == {"makes": ["BMW"], "priceMin": 5000}

    def test_snake_case_keys(self):
        filters = reconcile({"price_range": {"max": "abc"}, "fuel_types": ["diesel"]}, {"year_min": "old"})
        assert filters.to_dict() == {"fuelTypes": ["diesel"]}

    def test_non_mapping_inputs(self):
        assert reconcile("bmw", ["not", "filters"]).is_empty()
