"""Core module for tablecast package."""

from tablecast.core.constraints import ConstraintKind, Constraints, ValidationSession
from tablecast.core.exceptions import (
    CastError,
    ConnectorError,
    SchemaError,
    SecurityError,
    StructuralError,
    TableCastError,
    ValidationError,
)
from tablecast.core.results import (
    CastFailure,
    CastResult,
    ErrorKind,
    RowResult,
    ValidationIssue,
    ValidationReport,
)
from tablecast.core.schema import (
    HeaderCheck,
    InferenceResult,
    Schema,
    SchemaValidator,
    TypeInferrer,
)

__all__ = [
    "ConstraintKind",
    "Constraints",
    "ValidationSession",
    "CastFailure",
    "CastResult",
    "ErrorKind",
    "RowResult",
    "ValidationIssue",
    "ValidationReport",
    "TableCastError",
    "CastError",
    "SchemaError",
    "StructuralError",
    "SecurityError",
    "ConnectorError",
    "ValidationError",
    "Schema",
    "HeaderCheck",
    "SchemaValidator",
    "TypeInferrer",
    "InferenceResult",
]
