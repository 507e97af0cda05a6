"""tablecast - Typed CSV schemas, inference and validation.

Cast raw CSV cells into typed values under a declared or inferred schema,
report every violation in one pass, and rewrite files with their columns
in a declared order.
"""

__version__ = "0.1.0"

# Public API
from tablecast.api import (
    infer_file,
    open_source,
    read_table,
    reorder_file,
    validate_file,
)

# Core classes
from tablecast.connectors.paths import PathResolver
from tablecast.connectors.source import TabularDataSource
from tablecast.core.constraints import Constraints, ValidationSession

# Exceptions
from tablecast.core.exceptions import (
    CastError,
    ConnectorError,
    SchemaError,
    SecurityError,
    StructuralError,
    TableCastError,
    ValidationError,
)
from tablecast.core.fields import create_field, field_from_descriptor
from tablecast.core.results import (
    CastResult,
    ErrorKind,
    RowResult,
    ValidationIssue,
    ValidationReport,
)
from tablecast.core.schema import InferenceResult, Schema, SchemaValidator, TypeInferrer

# Configuration
from tablecast.models.dialect import CSVDialect
from tablecast.models.loader import dump_schema, load_schema
from tablecast.models.validation_config import HeaderPolicy, InferenceConfig, ValidationConfig

__all__ = [
    # Version
    "__version__",
    # Public API
    "infer_file",
    "open_source",
    "read_table",
    "reorder_file",
    "validate_file",
    "load_schema",
    "dump_schema",
    # Core classes
    "Schema",
    "SchemaValidator",
    "TypeInferrer",
    "InferenceResult",
    "TabularDataSource",
    "PathResolver",
    "Constraints",
    "ValidationSession",
    "create_field",
    "field_from_descriptor",
    "CastResult",
    "RowResult",
    "ErrorKind",
    "ValidationIssue",
    "ValidationReport",
    # Configuration
    "CSVDialect",
    "HeaderPolicy",
    "InferenceConfig",
    "ValidationConfig",
    # Exceptions
    "TableCastError",
    "CastError",
    "SchemaError",
    "StructuralError",
    "SecurityError",
    "ConnectorError",
    "ValidationError",
]
