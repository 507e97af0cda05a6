"""Schema package: models, inference, and validation."""

from tablecast.core.schema.inference import DEFAULT_PRIORITY, InferenceResult, TypeInferrer
from tablecast.core.schema.models import HeaderCheck, Schema
from tablecast.core.schema.validation import SchemaValidator

__all__ = [
    "DEFAULT_PRIORITY",
    "HeaderCheck",
    "InferenceResult",
    "Schema",
    "SchemaValidator",
    "TypeInferrer",
]
