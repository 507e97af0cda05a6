"""Schema document loader for YAML and JSON files."""

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from tablecast.core.exceptions import SchemaError
from tablecast.core.schema.models import Schema


def load_schema(path: Union[str, Path]) -> Schema:
    """
    Load a schema document from a YAML or JSON file.

    JSON is a subset of YAML, so any extension is parsed as YAML except
    ``.json``, which is parsed strictly as JSON.

    Args:
        path: Path to the schema file

    Returns:
        Validated Schema instance

    Raises:
        SchemaError: If the file is missing, unparsable, or not a valid schema
    """
    schema_path = Path(path)
    descriptor = _read_document(schema_path)
    try:
        return Schema.from_descriptor(descriptor)
    except SchemaError as e:
        raise SchemaError(e.message, context={"path": str(path), **e.context}) from e


def _read_document(schema_path: Path) -> Dict[str, Any]:
    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            if schema_path.suffix.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise SchemaError(
            f"Schema file not found: {schema_path}", context={"path": str(schema_path)}
        ) from e
    except json.JSONDecodeError as e:
        raise SchemaError(
            f"Invalid JSON in schema file: {e}", context={"path": str(schema_path)}
        ) from e
    except yaml.YAMLError as e:
        raise SchemaError(
            f"Invalid YAML in schema file: {e}", context={"path": str(schema_path)}
        ) from e

    if not isinstance(document, dict):
        raise SchemaError(
            "Schema file must contain a mapping", context={"path": str(schema_path)}
        )
    return document


def dump_schema(schema: Schema, path: Union[str, Path]) -> None:
    """
    Write ``schema`` as a schema document; ``.json`` paths get JSON, others YAML.

    Args:
        schema: Schema to write
        path: Destination file path
    """
    schema_path = Path(path)
    descriptor = schema.to_descriptor()
    with open(schema_path, "w", encoding="utf-8") as f:
        if schema_path.suffix.lower() == ".json":
            json.dump(descriptor, f, indent=2)
            f.write("\n")
        else:
            yaml.safe_dump(descriptor, f, sort_keys=False)
