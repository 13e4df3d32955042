"""Tool descriptors and tool-choice policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from aiclient.errors import DeserializationError
from aiclient.schema import ObjectSchema, as_object_schema

__all__ = ["JsonFunctionInfo", "JsonTool", "Tool", "ToolChoice"]


@dataclass(frozen=True)
class JsonFunctionInfo:
    name: str
    description: str
    parameters: dict[str, Any]
    strict: bool = True


@dataclass(frozen=True)
class JsonTool:
    """A tool definition as sent in the ``tools`` array."""

    function: JsonFunctionInfo
    type: str = "function"

    @property
    def name(self) -> str:
        return self.function.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "function": {
                "name": self.function.name,
                "description": self.function.description,
                "strict": self.function.strict,
                "parameters": self.function.parameters,
            },
        }


class Tool:
    """
    A named capability the model may ask the caller to run.

    Parameters
    ----------
    name:
        Function name the model will reference in its tool calls.
    description:
        Short natural-language description shown to the model.
    parameters:
        The argument shape, either an ``ObjectSchema`` or a dataclass type.
        Conversion happens here so an unmappable shape fails at
        construction, before any request is built.
    """

    def __init__(self, name: str, description: str, parameters: ObjectSchema | type) -> None:
        self._name = name
        self._description = description
        self._parameters = as_object_schema(parameters)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> ObjectSchema:
        return self._parameters

    def into_json(self) -> JsonTool:
        return JsonTool(
            function=JsonFunctionInfo(
                name=self._name,
                description=self._description,
                parameters=self._parameters.to_json_schema(),
                strict=True,
            )
        )

    def __repr__(self) -> str:
        return f"Tool(name={self._name!r})"


@dataclass(frozen=True)
class ToolChoice:
    """
    Whether, and which, tool the model must call.

    Use the constructors ``auto()``, ``required()`` and ``function(name)``.
    """

    mode: str
    function_name: str | None = None

    AUTO = "auto"
    REQUIRED = "required"
    FUNCTION = "function"

    @classmethod
    def auto(cls) -> ToolChoice:
        return cls(cls.AUTO)

    @classmethod
    def required(cls) -> ToolChoice:
        return cls(cls.REQUIRED)

    @classmethod
    def function(cls, name: str) -> ToolChoice:
        return cls(cls.FUNCTION, name)

    @property
    def is_function(self) -> bool:
        return self.mode == self.FUNCTION

    def to_wire(self) -> str | dict[str, Any]:
        if self.is_function:
            return {"type": "function", "function": {"name": self.function_name}}
        return self.mode

    @classmethod
    def from_wire(cls, value: str | dict[str, Any]) -> ToolChoice:
        if value in (cls.AUTO, cls.REQUIRED):
            return cls(value)
        if isinstance(value, dict) and value.get("type") == "function":
            name = (value.get("function") or {}).get("name")
            if name:
                return cls.function(name)
        raise DeserializationError(f"Unrecognised tool_choice: {value!r}")
