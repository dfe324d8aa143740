from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

from elasto.core.exceptions import ValidationError

from ._models import (
    GeoDistanceOrder,
    GeoDistanceRangeClause,
    Location,
    TermClause,
    TermsClause,
)

UNSET: Any = object()


class ConditionInput(str, Enum):
    """Shape of the arguments passed to where() style methods."""

    PAIR = "pair"
    MAPPING = "mapping"
    MAPPINGS = "mappings"


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class Helper:
    @staticmethod
    def get_condition_input(key: Any, value: Any = UNSET) -> ConditionInput:
        if value is not UNSET:
            if not isinstance(key, str):
                raise ValidationError(
                    f"Field name must be a string, got {key!r}"
                )
            return ConditionInput.PAIR
        if isinstance(key, Mapping):
            return ConditionInput.MAPPING
        if isinstance(key, (list, tuple)) and all(
            isinstance(item, Mapping) for item in key
        ):
            return ConditionInput.MAPPINGS
        raise ValidationError(
            "Condition must be a field and value, a mapping "
            f"or a list of mappings, got {key!r}"
        )

    @staticmethod
    def get_conditions(
        key: Any, value: Any = UNSET
    ) -> list[TermClause | TermsClause]:
        input = Helper.get_condition_input(key, value)
        if input == ConditionInput.PAIR:
            return [Helper.get_condition(key, value)]
        if input == ConditionInput.MAPPING:
            return [Helper.get_condition(k, v) for k, v in key.items()]
        conditions: list[TermClause | TermsClause] = []
        for mapping in key:
            conditions.extend(
                Helper.get_condition(k, v) for k, v in mapping.items()
            )
        return conditions

    @staticmethod
    def get_condition(field: str, value: Any) -> TermClause | TermsClause:
        if isinstance(value, (list, tuple, set, frozenset)):
            return TermsClause(field=field, values=list(value))
        return TermClause(field=field, value=value)

    @staticmethod
    def get_fields(keys: tuple) -> list[str]:
        if len(keys) == 1 and isinstance(keys[0], (list, tuple, set)):
            keys = tuple(keys[0])
        fields: list[str] = []
        for key in keys:
            if not isinstance(key, str) or not key:
                raise ValidationError(f"Invalid field name {key!r}")
            fields.append(key)
        return fields

    @staticmethod
    def get_window(name: str, value: Any) -> int:
        if (
            not isinstance(value, int)
            or isinstance(value, bool)
            or value < 0
        ):
            raise ValidationError(
                f"{name} must be a non-negative integer, got {value!r}"
            )
        return value

    @staticmethod
    def get_coordinates(obj: Any) -> tuple[float, float]:
        lat = _get(obj, "lat")
        lon = _get(obj, "lon")
        if not _is_number(lat) or not -90 <= lat <= 90:
            raise ValidationError(f"Invalid latitude {lat!r}")
        if not _is_number(lon) or not -180 <= lon <= 180:
            raise ValidationError(f"Invalid longitude {lon!r}")
        return float(lat), float(lon)

    @staticmethod
    def get_location(loc: Any, default_radius: float) -> Location:
        if loc is None:
            raise ValidationError("Location is required")
        lat, lon = Helper.get_coordinates(loc)
        radius = _get(loc, "radius")
        if not radius:
            radius = default_radius
        if not _is_number(radius) or radius < 0:
            raise ValidationError(f"Invalid radius {radius!r}")
        return Location(lat=lat, lon=lon, radius=float(radius))

    @staticmethod
    def get_origin(
        opts: Any, location: Location | None
    ) -> tuple[float, float]:
        if opts is not None and (
            _get(opts, "lat") is not None or _get(opts, "lon") is not None
        ):
            return Helper.get_coordinates(opts)
        if location is None:
            raise ValidationError(
                "Coordinates are required: pass lat and lon "
                "or call near() first"
            )
        return location.lat, location.lon

    @staticmethod
    def get_distance_range(
        opts: Any, location: Location | None
    ) -> GeoDistanceRangeClause:
        if opts is None:
            raise ValidationError("Distance range requires from and to")
        lat, lon = Helper.get_origin(opts, location)
        from_distance = _get(opts, "from")
        to_distance = _get(opts, "to")
        if from_distance is not None and not _is_number(from_distance):
            raise ValidationError(f"Invalid distance {from_distance!r}")
        if not _is_number(to_distance):
            raise ValidationError(f"Invalid distance {to_distance!r}")
        if from_distance is not None and from_distance > to_distance:
            raise ValidationError(
                f"Distance range {from_distance}..{to_distance} is empty"
            )
        return GeoDistanceRangeClause(
            lat=lat,
            lon=lon,
            from_distance=from_distance,
            to_distance=to_distance,
        )

    @staticmethod
    def get_geo_order(
        opts: Any, location: Location | None, unit: str
    ) -> GeoDistanceOrder:
        lat, lon = Helper.get_origin(opts, location)
        direction = "asc"
        if isinstance(opts, str):
            direction = opts
        elif opts is not None:
            unit = _get(opts, "unit") or unit
            direction = _get(opts, "order") or direction
        return GeoDistanceOrder(
            lat=lat,
            lon=lon,
            unit=unit,
            direction=Helper.get_direction(direction),
        )

    @staticmethod
    def get_direction(direction: str) -> str:
        value = direction.lower() if isinstance(direction, str) else None
        if value not in ("asc", "desc"):
            raise ValidationError(f"Invalid sort direction {direction!r}")
        return value
