"""
Fold newly extracted entities into the accumulated filter state.

Merge rules (per field, independent of each other):
- list criteria: existing values + new values (repeats across turns are kept
  unless ``dedupe=True``); ``colors`` land in ``exterior_colors``
- feature flags: each mentioned flag is overwritten, others untouched
- price / year / mileage bounds: each present bound overwrites its field,
  the other bound keeps its previous value

Scalar and flag fields are therefore idempotent under repeated merges; list
fields accumulate.
"""
import copy
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from redline.filters.models import FEATURE_FIELDS, CarFilters
from redline.parsing.models import Entities, NumericRange
from redline.utils.logger import get_logger

logger = get_logger("filters.reconcile")

M = TypeVar("M", bound=BaseModel)

# Entities field -> CarFilters field
LIST_FIELDS = {
    "makes": "makes",
    "vehicle_types": "vehicle_types",
    "conditions": "conditions",
    "fuel_types": "fuel_types",
    "transmissions": "transmissions",
    "drive_types": "drive_types",
    "colors": "exterior_colors",
}

# Entities range field -> (min field, max field)
RANGE_FIELDS = {
    "price_range": ("price_min", "price_max"),
    "year_range": ("year_min", "year_max"),
    "mileage": ("mileage_min", "mileage_max"),
}


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (math.isnan(value) or math.isinf(value))


def _field_keys(model_cls: Type[BaseModel], key: Any) -> List[Any]:
    """Input keys (name and alias) that address the same model field as ``key``."""
    for name, info in model_cls.model_fields.items():
        if key in (name, info.alias):
            return [k for k in (name, info.alias) if k]
    return [key]


def _error_path(data: Dict[str, Any], loc: Tuple[Any, ...], model_cls: Type[BaseModel]) -> Optional[Tuple[Any, ...]]:
    """
    Resolve a validation error location to the innermost input key to drop.

    Locations can end in union tags ("int", "float") or list indexes that are
    not dict keys; the walk stops at the deepest key present in the input.
    """
    if not loc:
        return None
    top = next((k for k in _field_keys(model_cls, loc[0]) if k in data), None)
    if top is None:
        return None

    path = [top]
    value = data[top]
    for key in loc[1:]:
        if not isinstance(value, dict) or key not in value:
            break
        path.append(key)
        value = value[key]
    return tuple(path)


def _drop_path(data: Dict[str, Any], path: Tuple[Any, ...]) -> None:
    container = data
    for key in path[:-1]:
        container = container.get(key)
        if not isinstance(container, dict):
            return
    container.pop(path[-1], None)


def _validate_dropping_invalid(model_cls: Type[M], raw: Any) -> M:
    """
    Validate ``raw`` into ``model_cls``, dropping only the fields that fail.

    A bad price bound loses that bound; the rest of the payload survives.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring malformed {model_cls.__name__}: expected a mapping, got {type(raw).__name__}")
        return model_cls()

    data = copy.deepcopy(dict(raw))
    while True:
        try:
            return model_cls.model_validate(data)
        except ValidationError as e:
            paths = {_error_path(data, tuple(error["loc"]), model_cls) for error in e.errors()}
            paths.discard(None)
            if not paths:
                logger.warning(f"Ignoring malformed {model_cls.__name__}: {e}")
                return model_cls()
            logger.warning(f"Dropping malformed {model_cls.__name__} fields: {sorted(map(str, paths))}")
            for path in sorted(paths, key=len):
                _drop_path(data, path)


def _coerce_entities(entities: Union[Entities, Mapping[str, Any], None]) -> Entities:
    if entities is None:
        return Entities()
    if isinstance(entities, Entities):
        return entities
    return _validate_dropping_invalid(Entities, entities)


def _coerce_filters(current: Union[CarFilters, Mapping[str, Any], None]) -> CarFilters:
    if current is None:
        return CarFilters()
    if isinstance(current, CarFilters):
        return current
    return _validate_dropping_invalid(CarFilters, current)


def _merge_list(existing: Optional[List[str]], new: List[str], dedupe: bool) -> List[str]:
    merged = list(existing or []) + list(new)
    if dedupe:
        merged = list(dict.fromkeys(merged))
    return merged


def reconcile(
    entities: Union[Entities, Mapping[str, Any], None],
    current_filters: Union[CarFilters, Mapping[str, Any], None] = None,
    *,
    dedupe: bool = False,
) -> CarFilters:
    """
    Merge one turn's entities into the current filter state.

    Args:
        entities: Entities from ``parse`` (model or its camelCase dict shape)
        current_filters: Filter state so far (model, dict or None)
        dedupe: Drop repeated list values across turns

    Returns:
        A new CarFilters; the inputs are not modified.
    """
    entities = _coerce_entities(entities)
    current = _coerce_filters(current_filters)
    updates: Dict[str, Any] = {}

    for entity_field, filter_field in LIST_FIELDS.items():
        values = getattr(entities, entity_field)
        if values:
            updates[filter_field] = _merge_list(getattr(current, filter_field), values, dedupe)

    for feature, value in (entities.features or {}).items():
        filter_field = FEATURE_FIELDS.get(feature)
        if filter_field is None:
            logger.debug(f"Ignoring unknown feature flag: {feature}")
            continue
        updates[filter_field] = bool(value)

    for entity_field, (min_field, max_field) in RANGE_FIELDS.items():
        bounds: Optional[NumericRange] = getattr(entities, entity_field)
        if bounds is None:
            continue
        # NaN / non-numeric bounds count as absent
        if _is_number(bounds.min):
            updates[min_field] = bounds.min
        if _is_number(bounds.max):
            updates[max_field] = bounds.max

    return current.model_copy(update=updates, deep=True)
