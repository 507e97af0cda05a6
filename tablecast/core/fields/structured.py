"""Geopoint, array and object fields."""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Literal, NamedTuple

import pyarrow as pa

from tablecast.core.fields.base import COMMON_CONSTRAINTS, LENGTH_CONSTRAINTS, BaseField


class GeoPoint(NamedTuple):
    lon: Decimal
    lat: Decimal


def _load_json(raw: str) -> Any:
    return json.loads(raw, parse_float=Decimal, parse_int=Decimal)


class GeopointField(BaseField):
    """Longitude/latitude pair.

    Formats: ``default`` is ``"lon, lat"``, ``array`` is ``[lon, lat]`` and
    ``object`` is ``{"lon": lon, "lat": lat}``.
    """

    type: Literal["geopoint"] = "geopoint"

    formats: ClassVar = ("default", "array", "object")
    supported_constraints: ClassVar = COMMON_CONSTRAINTS
    arrow_type: ClassVar = pa.list_(pa.float64())

    def parse(self, raw: str) -> GeoPoint:
        try:
            if self.format == "default":
                parts = [part.strip() for part in raw.split(",")]
                if len(parts) != 2:
                    raise ValueError("expected 'lon, lat'")
                lon, lat = (Decimal(part) for part in parts)
            elif self.format == "array":
                loaded = _load_json(raw)
                if not isinstance(loaded, list) or len(loaded) != 2:
                    raise ValueError("expected [lon, lat]")
                lon, lat = loaded
            else:
                loaded = _load_json(raw)
                if not isinstance(loaded, dict) or set(loaded) != {"lon", "lat"}:
                    raise ValueError('expected {"lon": ..., "lat": ...}')
                lon, lat = loaded["lon"], loaded["lat"]
        except (ValueError, InvalidOperation, RecursionError) as e:
            raise self.cast_error(raw, str(e) or "not a geopoint") from e

        if not isinstance(lon, Decimal) or not isinstance(lat, Decimal):
            raise self.cast_error(raw, "coordinates must be numbers")
        if not lon.is_finite() or not lat.is_finite():
            raise self.cast_error(raw, "coordinates must be finite")
        if not -180 <= lon <= 180:
            raise self.cast_error(raw, "longitude outside [-180, 180]")
        if not -90 <= lat <= 90:
            raise self.cast_error(raw, "latitude outside [-90, 90]")
        return GeoPoint(lon, lat)

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        lon, lat = value
        if self.format == "array":
            return f"[{lon}, {lat}]"
        if self.format == "object":
            return f'{{"lon": {lon}, "lat": {lat}}}'
        return f"{lon}, {lat}"

    def to_arrow(self, value: Any) -> Any:
        return None if value is None else [float(value.lon), float(value.lat)]


class JSONField(BaseField):
    """JSON text decoded into a Python container."""

    supported_constraints: ClassVar = LENGTH_CONSTRAINTS
    arrow_type: ClassVar = pa.string()

    container: ClassVar[type] = object

    def parse(self, raw: str) -> Any:
        try:
            loaded = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise self.cast_error(raw, f"invalid JSON: {e}") from e
        if not isinstance(loaded, self.container):
            raise self.cast_error(raw, f"JSON value is not an {self.type}")
        return loaded

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        return json.dumps(value, separators=(",", ":"))

    def to_arrow(self, value: Any) -> Any:
        return None if value is None else self.format_value(value)


class ArrayField(JSONField):
    type: Literal["array"] = "array"

    container: ClassVar = list


class ObjectField(JSONField):
    type: Literal["object"] = "object"

    container: ClassVar = dict
