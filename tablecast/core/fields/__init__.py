"""Field family: one variant per logical type.

Variants form a closed union discriminated by ``type``. Schema and the type
inferrer only ever call ``parse`` and ``format_value``, so adding a variant
means adding a class here and nothing else.
"""

from typing import Annotated, Any, Mapping, Union

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tablecast.core.exceptions import SchemaError
from tablecast.core.fields.base import BaseField, ConstraintBounds
from tablecast.core.fields.numeric import IntegerField, NumberField, YearField
from tablecast.core.fields.structured import ArrayField, GeoPoint, GeopointField, ObjectField
from tablecast.core.fields.temporal import DateField, DatetimeField, TimeField
from tablecast.core.fields.text import AnyField, BooleanField, StringField

TableField = Annotated[
    Union[
        StringField,
        IntegerField,
        NumberField,
        BooleanField,
        DateField,
        TimeField,
        DatetimeField,
        YearField,
        GeopointField,
        ArrayField,
        ObjectField,
        AnyField,
    ],
    Field(discriminator="type"),
]

FIELD_TYPES: dict[str, type[BaseField]] = {
    "string": StringField,
    "integer": IntegerField,
    "number": NumberField,
    "boolean": BooleanField,
    "date": DateField,
    "time": TimeField,
    "datetime": DatetimeField,
    "year": YearField,
    "geopoint": GeopointField,
    "array": ArrayField,
    "object": ObjectField,
    "any": AnyField,
}

_field_adapter = TypeAdapter(TableField)


def get_field_class(type_name: str) -> type[BaseField]:
    """Return the variant registered for ``type_name``.

    Raises:
        SchemaError: If the type is not supported.
    """
    field_class = FIELD_TYPES.get(type_name)
    if field_class is None:
        raise SchemaError(
            f"Unknown field type: '{type_name}'",
            context={"type": type_name, "available_types": ", ".join(sorted(FIELD_TYPES))},
        )
    return field_class


def field_from_descriptor(descriptor: Mapping[str, Any]) -> BaseField:
    """Build a field from one schema-document descriptor.

    A descriptor without ``type`` is a string field.

    Raises:
        SchemaError: If the descriptor is invalid.
    """
    data = dict(descriptor)
    data.setdefault("type", "string")
    get_field_class(data["type"])
    try:
        return _field_adapter.validate_python(data)
    except PydanticValidationError as e:
        raise SchemaError(
            f"Invalid field definition: {e}",
            context={"field": data.get("name"), "type": data["type"]},
        ) from e


def create_field(name: str, type_name: str = "string", **options: Any) -> BaseField:
    """Build a field programmatically, e.g. ``create_field("id", "integer")``."""
    return field_from_descriptor({"name": name, "type": type_name, **options})


__all__ = [
    "AnyField",
    "ArrayField",
    "BaseField",
    "BooleanField",
    "ConstraintBounds",
    "DateField",
    "DatetimeField",
    "FIELD_TYPES",
    "GeoPoint",
    "GeopointField",
    "IntegerField",
    "NumberField",
    "ObjectField",
    "StringField",
    "TableField",
    "TimeField",
    "YearField",
    "create_field",
    "field_from_descriptor",
    "get_field_class",
]
