"""Schema: an ordered, named collection of fields.

Field order is the default column order for output. Reading matches cells to
fields by header name, so a source may list its columns in any order.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import pyarrow as pa
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from tablecast.core.constraints import ConstraintKind, ValidationSession
from tablecast.core.exceptions import CastError, SchemaError
from tablecast.core.fields import BaseField, TableField
from tablecast.core.results import CastFailure, CastResult, ErrorKind, RowResult

logger = logging.getLogger(__name__)

_PRIMARY_KEY = "\x00primary_key"


class HeaderCheck(BaseModel):
    """Differences between a raw header and the schema's field names."""

    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)
    duplicates: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.missing or self.extra or self.duplicates)


class Schema(BaseModel):
    """Complete table schema."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    fields: list[TableField] = Field(description="Ordered field definitions")
    missing_values: list[str] = Field(
        default_factory=lambda: [""], description="Raw tokens that mean 'no value'"
    )
    primary_key: Optional[list[str]] = Field(
        default=None, description="Field names forming the primary key"
    )

    _positions: Optional[tuple[tuple[str, ...], dict[str, int]]] = PrivateAttr(default=None)

    @field_validator("primary_key", mode="before")
    @classmethod
    def validate_primary_key(cls, v):
        """Accept a single field name as a one-field key."""
        if isinstance(v, str):
            return [v]
        return v

    @model_validator(mode="after")
    def validate_names(self):
        """Validate field names are unique and the primary key refers to them."""
        seen: set[str] = set()
        duplicates = []
        for field in self.fields:
            if field.name in seen:
                duplicates.append(field.name)
            seen.add(field.name)
        if duplicates:
            raise ValueError(f"duplicate field names: {sorted(set(duplicates))}")
        if self.primary_key:
            unknown = [name for name in self.primary_key if name not in seen]
            if unknown:
                raise ValueError(f"primary key refers to unknown fields: {unknown}")
        return self

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> Schema:
        """Build a schema from an already-parsed schema document.

        Raises:
            SchemaError: If the document is not a valid schema.
        """
        if "fields" not in descriptor:
            raise SchemaError("Schema document has no 'fields' list")
        data = dict(descriptor)
        data["fields"] = [
            {"type": "string", **field} if isinstance(field, Mapping) else field
            for field in data["fields"] or []
        ]
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise SchemaError(f"Schema validation failed: {e}") from e

    def to_descriptor(self) -> dict[str, Any]:
        descriptor: dict[str, Any] = {
            "fields": [field.to_descriptor() for field in self.fields]
        }
        if self.missing_values != [""]:
            descriptor["missingValues"] = list(self.missing_values)
        if self.primary_key:
            descriptor["primaryKey"] = list(self.primary_key)
        return descriptor

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    @property
    def output_header(self) -> list[str]:
        """Column names to write, honouring per-field header overrides."""
        return [field.output_name for field in self.fields]

    def get_field(self, name: str) -> Optional[BaseField]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def open_session(self) -> ValidationSession:
        """Start the uniqueness bookkeeping for one validation pass."""
        return ValidationSession()

    def validate_header(self, raw_header: Sequence[str]) -> HeaderCheck:
        names = set(self.field_names)
        seen: set[str] = set()
        duplicates = []
        for column in raw_header:
            if column in seen and column not in duplicates:
                duplicates.append(column)
            seen.add(column)
        return HeaderCheck(
            missing=[name for name in self.field_names if name not in seen],
            extra=[column for column in dict.fromkeys(raw_header) if column not in names],
            duplicates=duplicates,
        )

    def cast_value(
        self,
        field: BaseField,
        raw: Optional[str],
        session: Optional[ValidationSession] = None,
    ) -> CastResult:
        """Cast one cell and check its constraints, collecting every failure."""
        if raw is None or raw in self.missing_values:
            violated = field.constraints.check(field, None, raw, session)
            if not violated and self.primary_key and field.name in self.primary_key:
                violated = [ConstraintKind.REQUIRED]
            return CastResult(
                field=field.name,
                raw=raw,
                failures=[self._violation(field, raw, kind) for kind in violated],
            )

        try:
            value = field.parse(raw)
        except CastError as e:
            return CastResult(
                field=field.name,
                raw=raw,
                failures=[
                    CastFailure(
                        kind=ErrorKind.CAST, message=e.message, field=field.name, raw=raw
                    )
                ],
            )

        violated = field.constraints.check(field, value, raw, session)
        return CastResult(
            field=field.name,
            raw=raw,
            value=value,
            failures=[self._violation(field, raw, kind) for kind in violated],
        )

    def cast_row(
        self,
        raw_row: Sequence[str],
        header: Optional[Sequence[str]] = None,
        session: Optional[ValidationSession] = None,
        row_number: Optional[int] = None,
    ) -> RowResult:
        """Cast every cell of ``raw_row``.

        ``header`` names the row's columns (defaults to the field names in
        schema order). Each field reads the cell under its own name; a field
        absent from the header is treated as missing. Results follow schema
        field order.

        A row whose width differs from the header's is rejected whole with a
        structural failure and no cell results.
        """
        header = list(header) if header is not None else self.field_names
        if len(raw_row) != len(header):
            logger.debug(
                "Row width mismatch",
                extra={
                    "row_number": row_number,
                    "context": {"cells": len(raw_row), "header": len(header)},
                },
            )
            return RowResult(
                row_number=row_number,
                error=CastFailure(
                    kind=ErrorKind.STRUCTURE,
                    message=f"row has {len(raw_row)} cells but the header has {len(header)}",
                ),
            )

        positions = self._header_positions(header)
        results = []
        for field in self.fields:
            position = positions.get(field.name)
            raw = raw_row[position] if position is not None else None
            results.append(self.cast_value(field, raw, session))

        if self.primary_key and session is not None:
            self._check_primary_key(results, session)

        return RowResult(row_number=row_number, results=results)

    def _check_primary_key(
        self, results: list[CastResult], session: ValidationSession
    ) -> None:
        by_name = {result.field: result for result in results}
        key_results = [by_name[name] for name in self.primary_key]
        if not all(result.ok for result in key_results):
            return
        key = tuple(result.value for result in key_results)
        if session.seen_before(_PRIMARY_KEY, key):
            first = key_results[0]
            first.failures.append(
                CastFailure(
                    kind=ErrorKind.CONSTRAINT,
                    message=f"duplicate primary key {list(map(str, key))}",
                    field=first.field,
                    raw=first.raw,
                    constraint=ConstraintKind.UNIQUE,
                )
            )

    def _header_positions(self, header: list[str]) -> dict[str, int]:
        # Only the most recent header is kept; a pass reuses one header.
        key = tuple(header)
        if self._positions is not None and self._positions[0] == key:
            return self._positions[1]
        positions: dict[str, int] = {}
        for index, name in enumerate(header):
            positions.setdefault(name, index)
        self._positions = (key, positions)
        return positions

    @staticmethod
    def _violation(
        field: BaseField, raw: Optional[str], kind: ConstraintKind
    ) -> CastFailure:
        if kind == ConstraintKind.REQUIRED:
            message = f"field '{field.name}' is required"
        else:
            message = f"value '{raw}' violates the {kind.value} constraint of '{field.name}'"
        return CastFailure(
            kind=ErrorKind.CONSTRAINT,
            message=message,
            field=field.name,
            raw=raw,
            constraint=kind,
        )

    def to_arrow_schema(self) -> pa.Schema:
        return pa.schema(
            [
                pa.field(field.name, field.arrow_type, nullable=not field.constraints.required)
                for field in self.fields
            ]
        )
