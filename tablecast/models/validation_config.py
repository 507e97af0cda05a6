"""Configuration models for inference and validation passes."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class HeaderPolicy(str, Enum):
    """How to treat header columns that do not line up with the expected set."""

    STRICT = "strict"  # Fail on missing or extra columns
    LENIENT = "lenient"  # Warn, drop extra columns and leave missing ones empty


class InferenceConfig(BaseModel):
    """Configuration for type inference."""

    sample_size: int = Field(
        default=100, description="Maximum number of rows to sample", gt=0
    )
    confidence: float = Field(
        default=1.0,
        description="Share of sampled non-empty values that must cast for a type to win",
        gt=0,
        le=1,
    )

    @field_validator("sample_size")
    @classmethod
    def validate_sample_size(cls, v):
        """Validate sample_size is positive."""
        if v <= 0:
            raise ValueError("sample_size must be greater than 0")
        return v


class ValidationConfig(BaseModel):
    """Configuration for a validation pass."""

    fail_fast: bool = Field(
        default=False, description="Stop at the first issue instead of scanning the whole table"
    )
    header_policy: HeaderPolicy = Field(
        default=HeaderPolicy.STRICT, description="Policy for missing/extra header columns"
    )
    max_issues: Optional[int] = Field(
        default=None, description="Stop after collecting this many errors", gt=0
    )
