"""Tests for the JSON-schema codec."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Literal, Optional

import jsonschema
import pytest

from aiclient.errors import SchemaError
from aiclient.schema import (
    FieldType,
    JsonSchemaDescription,
    ObjectSchema,
    ResponseFormat,
    SchemaField,
)


@dataclass
class Weather:
    location: str = field(metadata={"description": "City or location name"})
    temperature: float = field(metadata={"description": "Temperature in Celsius"})
    conditions: str = field(metadata={"description": "Weather conditions description"})
    humidity: Optional[float] = field(
        default=None,
        metadata={"description": "Optionally, the humidity level in percentage"},
    )


class Unit(enum.Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


@dataclass
class Point:
    x: int
    y: int


@dataclass
class Shape:
    name: str
    vertices: list[Point]
    tags: list[str]
    origin: Point | None
    unit: Unit
    kind: Literal["open", "closed"]
    visible: bool


WEATHER_FIELDS = ObjectSchema(
    "weather",
    [
        SchemaField("location", FieldType.STRING, "City or location name"),
        SchemaField("temperature", FieldType.NUMBER, "Temperature in Celsius"),
        SchemaField("conditions", FieldType.STRING, "Weather conditions description"),
        SchemaField(
            "humidity",
            FieldType.NUMBER,
            "Optionally, the humidity level in percentage",
            optional=True,
        ),
    ],
)


class TestObjectSchema:
    def test_object_rules(self):
        schema = WEATHER_FIELDS.to_json_schema()
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert set(schema["required"]) == {"location", "temperature", "conditions"}

    def test_properties_keep_insertion_order(self):
        schema = WEATHER_FIELDS.to_json_schema()
        assert list(schema["properties"]) == ["location", "temperature", "conditions", "humidity"]

    def test_every_property_has_type_and_description(self):
        schema = WEATHER_FIELDS.to_json_schema()
        for prop in schema["properties"].values():
            assert "type" in prop
            assert "description" in prop
        assert schema["properties"]["temperature"] == {
            "type": "number",
            "description": "Temperature in Celsius",
        }

    def test_optional_field_is_kept_and_nullable(self):
        schema = WEATHER_FIELDS.to_json_schema()
        humidity = schema["properties"]["humidity"]
        assert humidity["type"] == "number"
        assert humidity["nullable"] is True
        assert "humidity" not in schema["required"]

    def test_survives_json_round_trip(self):
        schema = WEATHER_FIELDS.to_json_schema()
        reparsed = json.loads(json.dumps(schema))
        assert reparsed == schema
        assert list(reparsed["properties"]) == list(schema["properties"])

    def test_is_valid_json_schema(self):
        schema = WEATHER_FIELDS.to_json_schema()
        jsonschema.Draft202012Validator.check_schema(schema)
        jsonschema.validate(
            {"location": "Paris", "temperature": 21.5, "conditions": "sunny"}, schema
        )
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(
                {"location": "Paris", "temperature": 21.5, "conditions": "sunny", "x": 1},
                schema,
            )

    def test_duplicate_field_rejected(self):
        with pytest.raises(SchemaError, match="Duplicate"):
            ObjectSchema(
                "dup",
                [SchemaField("a", FieldType.STRING), SchemaField("a", FieldType.INTEGER)],
            )

    def test_array_requires_items(self):
        with pytest.raises(SchemaError, match="items"):
            SchemaField("values", FieldType.ARRAY)

    def test_field_type_from_string(self):
        f = SchemaField("n", "integer")
        assert f.type is FieldType.INTEGER
        with pytest.raises(SchemaError):
            SchemaField("n", "complex")


class TestFromDataclass:
    def test_matches_explicit_description(self):
        assert ObjectSchema.from_dataclass(Weather).to_json_schema(with_title=False) == (
            WEATHER_FIELDS.to_json_schema(with_title=False)
        )

    def test_title_is_class_name(self):
        assert ObjectSchema.from_dataclass(Weather).to_json_schema()["title"] == "Weather"

    def test_nested_shapes(self):
        schema = ObjectSchema.from_dataclass(Shape).to_json_schema()
        props = schema["properties"]

        assert props["vertices"]["type"] == "array"
        item = props["vertices"]["items"]
        assert item["type"] == "object"
        assert item["additionalProperties"] is False
        assert set(item["required"]) == {"x", "y"}

        assert props["tags"]["items"] == {"type": "string"}
        assert props["origin"]["type"] == "object"
        assert props["origin"]["nullable"] is True
        assert props["unit"] == {"type": "string", "description": "", "enum": ["celsius", "fahrenheit"]}
        assert props["kind"]["enum"] == ["open", "closed"]
        assert props["visible"]["type"] == "boolean"
        assert set(schema["required"]) == {"name", "vertices", "tags", "unit", "kind", "visible"}
        jsonschema.Draft202012Validator.check_schema(schema)

    def test_not_a_dataclass(self):
        with pytest.raises(SchemaError, match="not a dataclass"):
            ObjectSchema.from_dataclass(dict)

    def test_unmappable_annotation(self):
        @dataclass
        class Bad:
            data: dict

        with pytest.raises(SchemaError, match="No schema mapping"):
            ObjectSchema.from_dataclass(Bad)


class TestResponseFormat:
    def test_wire_form(self):
        fmt = ResponseFormat(JsonSchemaDescription("weather", WEATHER_FIELDS.to_json_schema()))
        wire = fmt.to_dict()
        assert wire["type"] == "json_schema"
        assert wire["json_schema"]["name"] == "weather"
        assert wire["json_schema"]["strict"] is True
        assert set(wire["json_schema"]["schema"]["required"]) == {
            "location",
            "temperature",
            "conditions",
        }

    def test_for_shape_accepts_dataclass(self):
        desc = JsonSchemaDescription.for_shape("Weather", Weather, strict=False)
        assert desc.strict is False
        assert desc.schema["title"] == "Weather"
