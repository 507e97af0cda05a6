"""Models module for dialect, configuration and schema documents."""

from tablecast.models.dialect import CSVDialect
from tablecast.models.validation_config import (
    HeaderPolicy,
    InferenceConfig,
    ValidationConfig,
)

__all__ = [
    "CSVDialect",
    "HeaderPolicy",
    "InferenceConfig",
    "ValidationConfig",
]
