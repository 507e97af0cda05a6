"""Result types produced by casting and validation.

Casting never raises per cell: every outcome is a value carrying an error
kind, so a single pass can report every violation in a table.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, List, Optional

from pydantic import BaseModel, Field

from tablecast.core.constraints import ConstraintKind


class ErrorKind(str, Enum):
    CAST = "cast_error"
    CONSTRAINT = "constraint_violation"
    STRUCTURE = "structural_error"


class CastFailure(BaseModel):
    """Why one cell (or one whole row, for structural failures) was rejected."""

    kind: ErrorKind
    message: str
    field: Optional[str] = None
    raw: Optional[str] = None
    constraint: Optional[ConstraintKind] = None


class CastResult(BaseModel):
    """Outcome of casting and constraint-checking one cell."""

    field: str
    raw: Optional[str] = None
    value: Any = None
    failures: List[CastFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class RowResult(BaseModel):
    """Outcome of casting one row.

    A structural failure (row width differs from header width) sets ``error``
    and leaves ``results`` empty: no cell is cast on a misaligned row.
    """

    row_number: Optional[int] = None
    results: List[CastResult] = Field(default_factory=list)
    error: Optional[CastFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None and all(result.ok for result in self.results)

    @property
    def values(self) -> list[Any]:
        return [result.value for result in self.results]

    def failures(self) -> Iterator[CastFailure]:
        if self.error is not None:
            yield self.error
        for result in self.results:
            yield from result.failures


class ValidationIssue(BaseModel):
    level: str = "error"
    kind: ErrorKind
    message: str
    row: Optional[int] = None
    field: Optional[str] = None
    raw: Optional[str] = None
    constraint: Optional[ConstraintKind] = None

    @classmethod
    def from_failure(
        cls, failure: CastFailure, row: Optional[int] = None
    ) -> ValidationIssue:
        return cls(
            kind=failure.kind,
            message=failure.message,
            row=row,
            field=failure.field,
            raw=failure.raw,
            constraint=failure.constraint,
        )


class ValidationReport(BaseModel):
    """Every issue found by one validation pass."""

    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)
    row_count: int = 0
    invalid_row_count: int = 0
    truncated: bool = Field(
        default=False, description="True if the pass stopped before the end of the data"
    )

    @property
    def ok(self) -> bool:
        return not self.errors

    def errors_for(self, field: str) -> list[ValidationIssue]:
        return [issue for issue in self.errors if issue.field == field]

    def errors_of_kind(self, kind: ErrorKind) -> list[ValidationIssue]:
        return [issue for issue in self.errors if issue.kind == kind]
