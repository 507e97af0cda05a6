"""Public Python API for tablecast package.

This module provides the main entry points for inferring, validating and
reordering CSV files.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

import pyarrow as pa

from tablecast.connectors.source import TabularDataSource
from tablecast.core.results import ValidationReport
from tablecast.core.schema.inference import InferenceResult, TypeInferrer
from tablecast.core.schema.models import Schema
from tablecast.core.schema.validation import SchemaValidator
from tablecast.models.dialect import CSVDialect
from tablecast.models.loader import load_schema
from tablecast.models.validation_config import HeaderPolicy

PathOrStr = Union[str, Path]


def open_source(
    path: PathOrStr,
    working_root: Optional[PathOrStr] = None,
    dialect: Optional[CSVDialect] = None,
) -> TabularDataSource:
    """Open a CSV file, or a ``.zip`` entry written as ``archive.zip/entry.csv``.

    Args:
        path: File path, or archive path followed by the entry name
        working_root: Directory every read and write must stay inside;
            defaults to the file's directory
        dialect: CSV dialect; defaults to RFC 4180

    Returns:
        A lazy TabularDataSource
    """
    text = str(path)
    marker = text.lower().find(".zip/")
    if marker != -1 and working_root is None:
        archive, member = text[: marker + 4], text[marker + 5 :]
        return TabularDataSource.from_archive(archive, member, dialect=dialect)
    return TabularDataSource.from_path(path, working_root=working_root, dialect=dialect)


def infer_file(
    path: PathOrStr,
    sample_size: int = 100,
    confidence: float = 1.0,
    dialect: Optional[CSVDialect] = None,
) -> InferenceResult:
    """Infer a schema from the first ``sample_size`` rows of a CSV file.

    Example:
        >>> result = infer_file("people.csv")
        >>> [field.type for field in result.schema.fields]
        ['integer', 'string']
    """
    source = open_source(path, dialect=dialect)
    inferrer = TypeInferrer(sample_size=sample_size, confidence=confidence)
    return inferrer.infer_source(source)


def validate_file(
    path: PathOrStr,
    schema: Union[Schema, PathOrStr],
    fail_fast: bool = False,
    header_policy: HeaderPolicy = HeaderPolicy.STRICT,
    dialect: Optional[CSVDialect] = None,
) -> ValidationReport:
    """Validate a CSV file against a schema object or schema file.

    Raises:
        SchemaError: If the schema file is invalid
        SecurityError: If the path escapes its working root
        ConnectorError: If the file cannot be read
    """
    if not isinstance(schema, Schema):
        schema = load_schema(schema)
    source = open_source(path, dialect=dialect)
    validator = SchemaValidator(schema, fail_fast=fail_fast, header_policy=header_policy)
    return validator.validate(source)


def read_table(
    path: PathOrStr,
    schema: Union[Schema, PathOrStr, None] = None,
    dialect: Optional[CSVDialect] = None,
) -> pa.Table:
    """Load a CSV file into a typed Arrow table, inferring the schema if none is given.

    Raises:
        ValidationError: On the first row that fails to validate
    """
    source = open_source(path, dialect=dialect)
    if schema is None:
        schema = TypeInferrer().infer_source(source).schema
    elif not isinstance(schema, Schema):
        schema = load_schema(schema)
    return SchemaValidator(schema).read_arrow(source)


def reorder_file(
    path: PathOrStr,
    output: PathOrStr,
    header: Sequence[str],
    policy: HeaderPolicy = HeaderPolicy.STRICT,
    dialect: Optional[CSVDialect] = None,
    output_dialect: Optional[CSVDialect] = None,
) -> int:
    """Rewrite a CSV file with its columns in ``header`` order.

    The output must lie in the input file's directory or below it.

    Returns:
        Number of data rows written

    Raises:
        StructuralError: If the header does not match the data columns
    """
    source = open_source(path, dialect=dialect)
    return source.write(output, output_header=header, dialect=output_dialect, policy=policy)
