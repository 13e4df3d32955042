"""
JSON-schema generation for structured output and tool parameters.

A parameter shape is described explicitly with ``SchemaField`` values
grouped into an ``ObjectSchema``.  Dataclasses can be turned into such a
description with ``ObjectSchema.from_dataclass`` so that the same type is
used both to describe the schema and to decode the model's answer.

The produced schema follows the rules OpenAI-style strict mode expects:

* every object has ``additionalProperties: false``
* ``required`` lists every non-optional field
* optional fields stay in ``properties`` and are marked ``nullable``
"""

from __future__ import annotations

import dataclasses
import enum
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Union

from aiclient.errors import SchemaError

__all__ = [
    "FieldType",
    "JsonSchemaDescription",
    "ObjectSchema",
    "ResponseFormat",
    "SchemaField",
]


class FieldType(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


_SCALARS: dict[type, FieldType] = {
    str: FieldType.STRING,
    float: FieldType.NUMBER,
    int: FieldType.INTEGER,
    bool: FieldType.BOOLEAN,
}


@dataclass(frozen=True)
class SchemaField:
    """One named property of an object schema.

    ``items`` describes array elements, ``properties`` the shape of a nested
    object.  ``enum`` restricts string values.
    """

    name: str
    type: FieldType
    description: str = ""
    optional: bool = False
    items: SchemaField | ObjectSchema | None = None
    properties: ObjectSchema | None = None
    enum: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, FieldType):
            try:
                object.__setattr__(self, "type", FieldType(self.type))
            except ValueError:
                raise SchemaError(f"Unknown field type for {self.name!r}: {self.type!r}") from None
        if self.type is FieldType.ARRAY and self.items is None:
            raise SchemaError(f"Array field {self.name!r} needs an items description")
        if self.type is FieldType.OBJECT and self.properties is None:
            raise SchemaError(f"Object field {self.name!r} needs a properties description")
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(self.enum))

    def to_json_schema(self, *, with_description: bool = True) -> dict[str, Any]:
        if self.type is FieldType.OBJECT:
            assert self.properties is not None
            out = self.properties.to_json_schema(with_title=False)
        else:
            out = {"type": self.type.value}
        if with_description:
            out["description"] = self.description
        if self.type is FieldType.ARRAY:
            items = self.items
            if isinstance(items, ObjectSchema):
                out["items"] = items.to_json_schema(with_title=False)
            else:
                assert items is not None
                out["items"] = items.to_json_schema(with_description=bool(items.description))
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.optional:
            out["nullable"] = True
        return out


@dataclass(frozen=True)
class ObjectSchema:
    """An ordered set of fields forming one JSON object."""

    title: str
    fields: tuple[SchemaField, ...]
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise SchemaError(f"Duplicate field {f.name!r} in {self.title!r}")
            seen.add(f.name)

    @property
    def required(self) -> list[str]:
        return [f.name for f in self.fields if not f.optional]

    def to_json_schema(self, *, with_title: bool = True) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object"}
        if with_title and self.title:
            schema["title"] = self.title
        if self.description:
            schema["description"] = self.description
        schema["properties"] = {f.name: f.to_json_schema() for f in self.fields}
        schema["required"] = self.required
        schema["additionalProperties"] = False
        return schema

    @classmethod
    def from_dataclass(cls, dc: type, description: str = "") -> ObjectSchema:
        """Describe a dataclass.

        Field descriptions come from ``field(metadata={"description": ...})``.
        ``X | None`` marks a field optional.  Supported annotations are
        ``str``, ``int``, ``float``, ``bool``, ``list[X]``, ``Literal`` of
        strings, string enums and nested dataclasses.
        """
        if not (isinstance(dc, type) and dataclasses.is_dataclass(dc)):
            raise SchemaError(f"{dc!r} is not a dataclass type")
        try:
            hints = typing.get_type_hints(dc)
        except NameError as exc:
            raise SchemaError(f"Cannot resolve annotations of {dc.__name__}: {exc}") from exc

        out: list[SchemaField] = []
        for f in dataclasses.fields(dc):
            hint = hints[f.name]
            optional = False
            inner = _strip_none(hint)
            if inner is not hint:
                optional = True
            out.append(
                _field_for(
                    f.name,
                    inner,
                    description=f.metadata.get("description", ""),
                    optional=optional,
                )
            )
        return cls(title=dc.__name__, fields=tuple(out), description=description)


def _strip_none(hint: Any) -> Any:
    """Return the single non-None member of an optional annotation."""
    origin = typing.get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == len(typing.get_args(hint)):
            raise SchemaError(f"Unions are not supported: {hint!r}")
        if len(args) != 1:
            raise SchemaError(f"Only X | None unions are supported: {hint!r}")
        return args[0]
    return hint


def _field_for(name: str, hint: Any, *, description: str = "", optional: bool = False) -> SchemaField:
    if hint in _SCALARS:
        return SchemaField(name, _SCALARS[hint], description, optional)

    origin = typing.get_origin(hint)
    if origin is typing.Literal:
        values = typing.get_args(hint)
        if not all(isinstance(v, str) for v in values):
            raise SchemaError(f"Only string literals are supported for {name!r}")
        return SchemaField(name, FieldType.STRING, description, optional, enum=tuple(values))

    if origin in (list, tuple, set, frozenset):
        args = typing.get_args(hint)
        if not args:
            raise SchemaError(f"Element type of {name!r} is not annotated")
        elem = args[0]
        if dataclasses.is_dataclass(elem):
            items: SchemaField | ObjectSchema = ObjectSchema.from_dataclass(elem)
        else:
            items = _field_for("", elem)
        return SchemaField(name, FieldType.ARRAY, description, optional, items=items)

    if isinstance(hint, type) and issubclass(hint, enum.Enum):
        values = tuple(str(m.value) for m in hint)
        return SchemaField(name, FieldType.STRING, description, optional, enum=values)

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return SchemaField(
            name,
            FieldType.OBJECT,
            description,
            optional,
            properties=ObjectSchema.from_dataclass(hint),
        )

    raise SchemaError(f"No schema mapping for field {name!r} of type {hint!r}")


def as_object_schema(shape: ObjectSchema | type) -> ObjectSchema:
    if isinstance(shape, ObjectSchema):
        return shape
    return ObjectSchema.from_dataclass(shape)


@dataclass(frozen=True)
class JsonSchemaDescription:
    """Named schema for the structured-output feature."""

    name: str
    schema: dict[str, Any]
    strict: bool = True

    @classmethod
    def for_shape(cls, name: str, shape: ObjectSchema | type, strict: bool = True) -> JsonSchemaDescription:
        return cls(name=name, schema=as_object_schema(shape).to_json_schema(), strict=strict)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "strict": self.strict, "schema": self.schema}


@dataclass(frozen=True)
class ResponseFormat:
    json_schema: JsonSchemaDescription | None = None
    type: str = field(default="json_schema")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.json_schema is not None:
            out["json_schema"] = self.json_schema.to_dict()
        return out
