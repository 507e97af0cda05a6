"""Base class shared by every field variant."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

import pyarrow as pa
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel

from tablecast.core.constraints import ConstraintKind, Constraints
from tablecast.core.exceptions import CastError

COMMON_CONSTRAINTS = frozenset(
    {ConstraintKind.REQUIRED, ConstraintKind.UNIQUE, ConstraintKind.ENUM}
)
RANGE_CONSTRAINTS = COMMON_CONSTRAINTS | {
    ConstraintKind.MINIMUM,
    ConstraintKind.MAXIMUM,
}
LENGTH_CONSTRAINTS = COMMON_CONSTRAINTS | {
    ConstraintKind.MIN_LENGTH,
    ConstraintKind.MAX_LENGTH,
}


@dataclass(frozen=True)
class ConstraintBounds:
    """Constraint operands cast into the field's own value type."""

    minimum: Any = None
    maximum: Any = None
    enum: Optional[list[Any]] = None


class BaseField(BaseModel):
    """A typed column descriptor.

    Subclasses pin ``type`` to a literal tag and implement :meth:`parse`.
    Instances are immutable; :meth:`with_header_name` returns a copy carrying
    the name to use when writing output.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="ignore"
    )

    type: str
    name: str = Field(min_length=1, description="Column name")
    format: str = Field(default="default", description="Type-specific format")
    title: Optional[str] = None
    description: Optional[str] = None
    constraints: Constraints = Field(default_factory=Constraints)
    header_name: Optional[str] = Field(
        default=None, description="Output column name override", exclude=True
    )

    _bounds: Optional[ConstraintBounds] = PrivateAttr(default=None)

    # Formats accepted by the variant; None means any strptime-style pattern.
    formats: ClassVar[Optional[tuple[str, ...]]] = ("default",)
    supported_constraints: ClassVar[frozenset[ConstraintKind]] = COMMON_CONSTRAINTS
    arrow_type: ClassVar[pa.DataType] = pa.string()

    @model_validator(mode="after")
    def validate_definition(self):
        """Validate format and constraints against what the variant supports."""
        if self.formats is not None and self.format not in self.formats:
            raise ValueError(
                f"unsupported format '{self.format}' for {self.type} field "
                f"'{self.name}'; expected one of {list(self.formats)}"
            )
        unsupported = self.constraints.declared() - self.supported_constraints
        if unsupported:
            names = sorted(kind.value for kind in unsupported)
            raise ValueError(
                f"constraints {names} are not supported by {self.type} field '{self.name}'"
            )
        # Bad bounds fail at definition time rather than on the first cell.
        self._bounds = self._compute_bounds()
        return self

    def parse(self, raw: str) -> Any:
        """Interpret ``raw`` under this field's type and format.

        Raises:
            CastError: If the text is not a valid value of this type.
        """
        raise NotImplementedError

    def format_value(self, value: Any) -> str:
        """Render ``value`` as text that :meth:`parse` reads back."""
        if value is None:
            return ""
        return str(value)

    def to_arrow(self, value: Any) -> Any:
        """Convert a parsed value into something pyarrow accepts for ``arrow_type``."""
        return value

    def cast_error(self, raw: str, reason: str) -> CastError:
        return CastError(
            f"Cannot cast '{raw}' to {self.type}: {reason}",
            context={"field": self.name, "format": self.format},
        )

    @property
    def output_name(self) -> str:
        return self.header_name or self.name

    def with_header_name(self, header_name: Optional[str]) -> "BaseField":
        return self.model_copy(update={"header_name": header_name})

    @property
    def constraint_bounds(self) -> ConstraintBounds:
        """Constraint operands cast through :meth:`parse` when given as text."""
        if self._bounds is None:
            self._bounds = self._compute_bounds()
        return self._bounds

    def _compute_bounds(self) -> ConstraintBounds:
        constraints = self.constraints
        return ConstraintBounds(
            minimum=self._coerce_bound(constraints.minimum),
            maximum=self._coerce_bound(constraints.maximum),
            enum=(
                [self._coerce_bound(member) for member in constraints.enum]
                if constraints.enum is not None
                else None
            ),
        )

    def _coerce_bound(self, bound: Any) -> Any:
        if bound is None:
            return None
        if isinstance(bound, str):
            try:
                return self.parse(bound)
            except CastError as e:
                raise ValueError(
                    f"constraint value '{bound}' is not a valid {self.type}"
                ) from e
        return self.coerce_native(bound)

    def coerce_native(self, value: Any) -> Any:
        """Adapt a non-text constraint operand (e.g. from YAML) to the value type."""
        return value

    def to_descriptor(self) -> dict[str, Any]:
        """Return this field as a schema-document descriptor."""
        body = self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude_defaults=True
        )
        constraints = self.constraints.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude_defaults=True
        )
        body.pop("constraints", None)
        descriptor = {"name": self.name, "type": self.type, **body}
        if constraints:
            descriptor["constraints"] = constraints
        return descriptor
