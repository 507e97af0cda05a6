"""Date, time and datetime fields.

``format`` is ``default`` (ISO 8601), ``any`` (a list of common layouts tried
in order) or a ``strptime`` pattern, optionally prefixed with ``fmt:``.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, ClassVar, Literal

import pyarrow as pa

from tablecast.core.fields.base import RANGE_CONSTRAINTS, BaseField

ANY_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%d %B %Y",
    "%B %d, %Y",
)
ANY_TIME_FORMATS = ("%H:%M:%S", "%H:%M:%S.%f", "%H:%M", "%I:%M %p", "%I:%M:%S %p")
ANY_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%m/%d/%Y %H:%M",
)


class TemporalField(BaseField):
    """Shared parsing for the three temporal variants."""

    formats: ClassVar = None
    supported_constraints: ClassVar = RANGE_CONSTRAINTS

    any_formats: ClassVar[tuple[str, ...]] = ()
    default_layout: ClassVar[str] = "ISO 8601"

    @property
    def pattern(self) -> str:
        """The strptime pattern for a custom format."""
        return self.format[4:] if self.format.startswith("fmt:") else self.format

    def parse(self, raw: str) -> Any:
        if self.format == "default":
            try:
                return self._parse_default(raw)
            except ValueError as e:
                raise self.cast_error(raw, f"expected {self.default_layout}") from e
        if self.format == "any":
            try:
                return self._parse_default(raw)
            except ValueError:
                pass
            for pattern in self.any_formats:
                try:
                    return self._convert(datetime.strptime(raw, pattern))
                except ValueError:
                    continue
            raise self.cast_error(raw, f"no known {self.type} layout matches")
        try:
            return self._convert(datetime.strptime(raw, self.pattern))
        except ValueError as e:
            raise self.cast_error(raw, str(e)) from e

    def _parse_default(self, raw: str) -> Any:
        raise NotImplementedError

    def _convert(self, parsed: datetime) -> Any:
        raise NotImplementedError

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        if self.format in ("default", "any"):
            return self._format_default(value)
        return value.strftime(self.pattern)

    def _format_default(self, value: Any) -> str:
        return value.isoformat()


class DateField(TemporalField):
    type: Literal["date"] = "date"

    any_formats: ClassVar = ANY_DATE_FORMATS
    default_layout: ClassVar = "YYYY-MM-DD"
    arrow_type: ClassVar = pa.date32()

    def _parse_default(self, raw: str) -> date:
        return datetime.strptime(raw, "%Y-%m-%d").date()

    def _convert(self, parsed: datetime) -> date:
        return parsed.date()


class TimeField(TemporalField):
    """Time of day; the default format is ``HH:MM:SS`` with optional microseconds."""

    type: Literal["time"] = "time"

    any_formats: ClassVar = ANY_TIME_FORMATS
    default_layout: ClassVar = "HH:MM:SS"
    arrow_type: ClassVar = pa.time64("us")

    def _parse_default(self, raw: str) -> time:
        try:
            return datetime.strptime(raw, "%H:%M:%S").time()
        except ValueError:
            return datetime.strptime(raw, "%H:%M:%S.%f").time()

    def _convert(self, parsed: datetime) -> time:
        return parsed.time()


class DatetimeField(TemporalField):
    """Timestamp; the default format is ISO 8601 and a trailing ``Z`` means UTC."""

    type: Literal["datetime"] = "datetime"

    any_formats: ClassVar = ANY_DATETIME_FORMATS
    default_layout: ClassVar = "YYYY-MM-DDTHH:MM:SS"
    arrow_type: ClassVar = pa.timestamp("us")

    def _parse_default(self, raw: str) -> datetime:
        # Require a time part so plain dates stay dates.
        if len(raw) < 11 or raw[10] not in ("T", " "):
            raise ValueError(f"missing time component in '{raw}'")
        text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        return datetime.fromisoformat(text)

    def _convert(self, parsed: datetime) -> datetime:
        return parsed

    def _format_default(self, value: datetime) -> str:
        text = value.isoformat()
        if value.tzinfo is not None and value.utcoffset() == timedelta(0):
            text = text[: -len("+00:00")] + "Z"
        return text

    def to_arrow(self, value: Any) -> Any:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
