"""String, any and boolean fields."""

import base64
import binascii
import re
import uuid
from typing import Any, ClassVar, Literal
from urllib.parse import urlparse

import pyarrow as pa
from pydantic import Field, model_validator

from tablecast.core.constraints import ConstraintKind
from tablecast.core.fields.base import COMMON_CONSTRAINTS, LENGTH_CONSTRAINTS, BaseField

_EMAIL = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class StringField(BaseField):
    """Text, optionally checked against a well-known format.

    The parsed value is always the raw text; formats only decide whether the
    text is acceptable.
    """

    type: Literal["string"] = "string"

    formats: ClassVar = ("default", "email", "uri", "uuid", "binary")
    supported_constraints: ClassVar = LENGTH_CONSTRAINTS | {ConstraintKind.PATTERN}
    arrow_type: ClassVar = pa.string()

    def parse(self, raw: str) -> str:
        if self.format == "email":
            if _EMAIL.fullmatch(raw) is None:
                raise self.cast_error(raw, "not an email address")
        elif self.format == "uri":
            parts = urlparse(raw)
            if not parts.scheme or not (parts.netloc or parts.path):
                raise self.cast_error(raw, "not a URI")
        elif self.format == "uuid":
            try:
                uuid.UUID(raw)
            except ValueError as e:
                raise self.cast_error(raw, "not a UUID") from e
        elif self.format == "binary":
            try:
                base64.b64decode(raw, validate=True)
            except binascii.Error as e:
                raise self.cast_error(raw, "not base64 data") from e
        return raw


class AnyField(BaseField):
    """Passes the raw text through untouched."""

    type: Literal["any"] = "any"

    supported_constraints: ClassVar = COMMON_CONSTRAINTS | {ConstraintKind.PATTERN}

    def parse(self, raw: str) -> str:
        return raw


class BooleanField(BaseField):
    """Boolean read from a finite set of literal tokens.

    Tokens match exactly unless ``case_sensitive`` is False, in which case
    both the tokens and the cell are case-folded before comparison.
    """

    type: Literal["boolean"] = "boolean"
    true_values: list[str] = Field(
        default_factory=lambda: ["true", "True", "TRUE", "1"], min_length=1
    )
    false_values: list[str] = Field(
        default_factory=lambda: ["false", "False", "FALSE", "0"], min_length=1
    )
    case_sensitive: bool = True

    arrow_type: ClassVar = pa.bool_()

    @model_validator(mode="after")
    def validate_tokens(self):
        overlap = self._fold(self.true_values) & self._fold(self.false_values)
        if overlap:
            raise ValueError(
                f"values {sorted(overlap)} are listed as both true and false"
            )
        return self

    def _fold(self, tokens) -> set[str]:
        if self.case_sensitive:
            return set(tokens)
        return {token.casefold() for token in tokens}

    def parse(self, raw: str) -> bool:
        token = raw if self.case_sensitive else raw.casefold()
        if token in self._fold(self.true_values):
            return True
        if token in self._fold(self.false_values):
            return False
        raise self.cast_error(raw, "not a recognised boolean token")

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""
        return self.true_values[0] if value else self.false_values[0]

    def coerce_native(self, value: Any) -> Any:
        if not isinstance(value, bool):
            raise ValueError(f"constraint value {value!r} is not a boolean")
        return value
