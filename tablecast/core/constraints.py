"""Field constraints and the per-pass state needed to check them.

Per-value constraints (pattern, minimum, maximum, enum, minLength, maxLength)
are pure functions of one cell. ``required`` and ``unique`` need table context:
``required`` looks at the raw cell, ``unique`` at every value already seen for
the field in the current :class:`ValidationSession`.
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import TYPE_CHECKING, Any, Hashable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from tablecast.core.fields.base import BaseField


class ConstraintKind(str, Enum):
    """Kinds of constraint a field may declare."""

    REQUIRED = "required"
    UNIQUE = "unique"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    PATTERN = "pattern"
    ENUM = "enum"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"


class Constraints(BaseModel):
    """Constraints declared on a single field."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid"
    )

    required: bool = Field(default=False, description="Reject missing values")
    unique: bool = Field(
        default=False, description="Reject values already seen in this pass"
    )
    minimum: Any = Field(default=None, description="Inclusive lower bound")
    maximum: Any = Field(default=None, description="Inclusive upper bound")
    pattern: Optional[str] = Field(
        default=None, description="Regular expression the raw text must fully match"
    )
    enum: Optional[list[Any]] = Field(default=None, description="Allowed values")
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v):
        """Validate pattern compiles."""
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid pattern {v!r}: {e}") from e
        return v

    @field_validator("enum")
    @classmethod
    def validate_enum(cls, v):
        """Validate enum is non-empty."""
        if v is not None and len(v) == 0:
            raise ValueError("enum must list at least one value")
        return v

    def declared(self) -> set[ConstraintKind]:
        """Return the kinds this set actually constrains."""
        kinds = set()
        if self.required:
            kinds.add(ConstraintKind.REQUIRED)
        if self.unique:
            kinds.add(ConstraintKind.UNIQUE)
        for kind, value in (
            (ConstraintKind.MINIMUM, self.minimum),
            (ConstraintKind.MAXIMUM, self.maximum),
            (ConstraintKind.PATTERN, self.pattern),
            (ConstraintKind.ENUM, self.enum),
            (ConstraintKind.MIN_LENGTH, self.min_length),
            (ConstraintKind.MAX_LENGTH, self.max_length),
        ):
            if value is not None:
                kinds.add(kind)
        return kinds

    def check(
        self,
        field: BaseField,
        value: Any,
        raw: Optional[str],
        session: Optional[ValidationSession] = None,
    ) -> list[ConstraintKind]:
        """Return every constraint ``value`` violates.

        ``value`` is None when the cell was missing; a missing cell can only
        violate ``required``.
        """
        if value is None:
            return [ConstraintKind.REQUIRED] if self.required else []

        violated: list[ConstraintKind] = []
        bounds = field.constraint_bounds

        if self.pattern is not None and raw is not None:
            if re.fullmatch(self.pattern, raw) is None:
                violated.append(ConstraintKind.PATTERN)

        if bounds.minimum is not None and _below(value, bounds.minimum):
            violated.append(ConstraintKind.MINIMUM)
        if bounds.maximum is not None and _below(bounds.maximum, value):
            violated.append(ConstraintKind.MAXIMUM)

        if bounds.enum is not None and value not in bounds.enum:
            violated.append(ConstraintKind.ENUM)

        if self.min_length is not None and len(value) < self.min_length:
            violated.append(ConstraintKind.MIN_LENGTH)
        if self.max_length is not None and len(value) > self.max_length:
            violated.append(ConstraintKind.MAX_LENGTH)

        if self.unique and session is not None:
            if session.seen_before(field.name, value):
                violated.append(ConstraintKind.UNIQUE)

        return violated


def _below(left: Any, right: Any) -> bool:
    # Incomparable operands (NaN, naive vs aware datetimes) count as out of range.
    try:
        return left < right
    except (TypeError, ArithmeticError):
        return True


def _hashable(value: Any) -> Hashable:
    try:
        hash(value)
        return value
    except TypeError:
        return json.dumps(value, sort_keys=True, default=str)


class ValidationSession:
    """Values seen so far by one validation pass.

    A session belongs to exactly one pass over one table. It is never shared
    between passes or threads; open a new one with ``Schema.open_session()``.
    """

    def __init__(self) -> None:
        self._seen: dict[str, set[Hashable]] = {}

    def seen_before(self, key: str, value: Any) -> bool:
        """Record ``value`` under ``key`` and report whether it was already there."""
        marker = _hashable(value)
        seen = self._seen.setdefault(key, set())
        if marker in seen:
            return True
        seen.add(marker)
        return False

    def reset(self) -> None:
        self._seen.clear()

    def __len__(self) -> int:
        return sum(len(values) for values in self._seen.values())
