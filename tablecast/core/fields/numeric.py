"""Integer, number and year fields."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Literal, Optional

import pyarrow as pa
from pydantic import Field, model_validator

from tablecast.core.fields.base import RANGE_CONSTRAINTS, BaseField

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")
_SPECIAL_NUMBERS = {"NaN": "NaN", "INF": "Infinity", "+INF": "Infinity", "-INF": "-Infinity"}
_YEAR = re.compile(r"[0-9]{4}")

# Leading/trailing text such as currency symbols or percent signs.
_NON_BARE = re.compile(r"^[^0-9+\-.]+|[^0-9.]+$")


def _strip_non_bare(text: str) -> str:
    return _NON_BARE.sub("", text)


class IntegerField(BaseField):
    """Signed 64-bit integer.

    Fractional values and values outside the 64-bit range fail to cast; they
    are never truncated or wrapped.
    """

    type: Literal["integer"] = "integer"
    bare_number: bool = Field(
        default=True, description="If False, strip leading/trailing non-numeric text"
    )
    group_char: Optional[str] = Field(
        default=None, description="Thousands separator to remove before parsing"
    )

    supported_constraints: ClassVar = RANGE_CONSTRAINTS
    arrow_type: ClassVar = pa.int64()

    def parse(self, raw: str) -> int:
        text = raw
        if self.group_char:
            text = text.replace(self.group_char, "")
        if not self.bare_number:
            text = _strip_non_bare(text)
        if _INTEGER.fullmatch(text) is None:
            raise self.cast_error(raw, "not an integer")
        if len(text.lstrip("+-").lstrip("0")) > 19:
            raise self.cast_error(raw, "outside the 64-bit integer range")
        value = int(text)
        if value < INT64_MIN or value > INT64_MAX:
            raise self.cast_error(raw, "outside the 64-bit integer range")
        return value

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        return str(int(value))

    def coerce_native(self, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"constraint value {value!r} is not an integer")
        return value


class NumberField(BaseField):
    """Decimal number, parsed exactly into :class:`decimal.Decimal`."""

    type: Literal["number"] = "number"
    decimal_char: str = Field(default=".", min_length=1)
    group_char: Optional[str] = None
    bare_number: bool = True

    supported_constraints: ClassVar = RANGE_CONSTRAINTS
    arrow_type: ClassVar = pa.float64()

    @model_validator(mode="after")
    def validate_separators(self):
        if self.group_char is not None and self.group_char == self.decimal_char:
            raise ValueError("decimal_char and group_char must differ")
        return self

    def parse(self, raw: str) -> Decimal:
        if raw in _SPECIAL_NUMBERS:
            return Decimal(_SPECIAL_NUMBERS[raw])

        text = raw
        if self.group_char:
            text = text.replace(self.group_char, "")
        if self.decimal_char != ".":
            text = text.replace(self.decimal_char, ".")
        if not self.bare_number:
            text = _strip_non_bare(text)
        if _NUMBER.fullmatch(text) is None:
            raise self.cast_error(raw, "not a number")
        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise self.cast_error(raw, str(e)) from e

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        value = Decimal(value)
        if value.is_nan():
            return "NaN"
        if value.is_infinite():
            return "-INF" if value < 0 else "INF"
        text = str(value)
        if self.decimal_char != ".":
            text = text.replace(".", self.decimal_char)
        return text

    def to_arrow(self, value: Any) -> Any:
        return None if value is None else float(value)

    def coerce_native(self, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"constraint value {value!r} is not a number")
        return Decimal(str(value))


class YearField(BaseField):
    """Four digit calendar year."""

    type: Literal["year"] = "year"

    supported_constraints: ClassVar = RANGE_CONSTRAINTS
    arrow_type: ClassVar = pa.int64()

    def parse(self, raw: str) -> int:
        if _YEAR.fullmatch(raw) is None:
            raise self.cast_error(raw, "not a four digit year")
        return int(raw)

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        return f"{int(value):04d}"
