"""Message, tool-call and response types of the chat-completion API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from aiclient.errors import DeserializationError

__all__ = [
    "ChatCompletionResponse",
    "Choice",
    "FunctionCall",
    "Message",
    "ToolCall",
    "Usage",
]


def _require(data: dict, key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DeserializationError(f"missing field `{key}` in {where}") from None
    except TypeError:
        raise DeserializationError(f"expected an object for {where}, got {type(data).__name__}") from None


@dataclass(frozen=True)
class FunctionCall:
    name: str
    arguments: str  # raw JSON text, decoded by the caller


@dataclass(frozen=True)
class ToolCall:
    """A function invocation requested by the model."""

    index: int
    id: str
    function_call: FunctionCall
    type: str = "function"

    def parse_arguments(self) -> Any:
        """Decode the JSON-encoded arguments. No schema check is made."""
        try:
            return json.loads(self.function_call.arguments)
        except json.JSONDecodeError as exc:
            raise DeserializationError(
                f"Invalid arguments for {self.function_call.name}: {exc}"
            ) from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.function_call.name,
                "arguments": self.function_call.arguments,
            },
        }

    @classmethod
    def from_dict(cls, data: dict, position: int = 0) -> ToolCall:
        func = _require(data, "function", "tool call")
        return cls(
            index=data.get("index", position),
            id=_require(data, "id", "tool call"),
            type=data.get("type", "function"),
            function_call=FunctionCall(
                name=_require(func, "name", "tool call function"),
                arguments=func.get("arguments") or "",
            ),
        )


@dataclass(frozen=True)
class Message:
    """A single chat turn.

    ``tool_call_id`` is only set on ``tool`` replies, ``tool_calls`` only on
    assistant turns that request calls.  Both are left out of the wire
    form when empty.
    """

    role: str  # "user", "assistant", "system", "tool"
    content: str
    tool_call_id: str = ""
    tool_calls: tuple[ToolCall, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    @classmethod
    def user(cls, content: str) -> Message:
        return cls("user", content)

    @classmethod
    def system(cls, content: str) -> Message:
        return cls("system", content)

    @classmethod
    def assistant(cls, content: str, tool_calls: list[ToolCall] | tuple[ToolCall, ...] = ()) -> Message:
        return cls("assistant", content, tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> Message:
        return cls("tool", content, tool_call_id=tool_call_id)

    def to_dict(self) -> dict[str, Any]:
        m: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_call_id:
            m["tool_call_id"] = self.tool_call_id
        if self.tool_calls:
            m["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        return m

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        raw_tcs = data.get("tool_calls") or []
        return cls(
            role=_require(data, "role", "message"),
            content=data.get("content") or "",
            tool_call_id=data.get("tool_call_id") or "",
            tool_calls=tuple(ToolCall.from_dict(tc, i) for i, tc in enumerate(raw_tcs)),
        )


@dataclass(frozen=True)
class Choice:
    index: int
    finish_reason: str
    native_finish_reason: str
    message: Message

    @classmethod
    def from_dict(cls, data: dict) -> Choice:
        return cls(
            index=_require(data, "index", "choice"),
            finish_reason=data.get("finish_reason") or "",
            native_finish_reason=data.get("native_finish_reason") or "",
            message=Message.from_dict(_require(data, "message", "choice")),
        )


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> Usage:
        return cls(
            prompt_tokens=_require(data, "prompt_tokens", "usage"),
            completion_tokens=_require(data, "completion_tokens", "usage"),
            total_tokens=_require(data, "total_tokens", "usage"),
        )


@dataclass(frozen=True)
class ChatCompletionResponse:
    """The decoded ``/chat/completions`` envelope."""

    id: str
    created: int
    usage: Usage
    choices: list[Choice] = field(default_factory=list)
    provider: str = ""
    model: str = ""
    object: str = ""
    system_fingerprint: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ChatCompletionResponse:
        if not isinstance(data, dict):
            raise DeserializationError(f"expected an object, got {type(data).__name__}")
        raw_choices = _require(data, "choices", "response")
        if not isinstance(raw_choices, list):
            raise DeserializationError("`choices` must be a list")
        return cls(
            id=_require(data, "id", "response"),
            created=_require(data, "created", "response"),
            usage=Usage.from_dict(_require(data, "usage", "response")),
            choices=[Choice.from_dict(c) for c in raw_choices],
            provider=data.get("provider") or "",
            model=data.get("model") or "",
            object=data.get("object") or "",
            system_fingerprint=data.get("system_fingerprint"),
        )

    @classmethod
    def from_json(cls, text: str) -> ChatCompletionResponse:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DeserializationError(str(exc)) from exc
        return cls.from_dict(data)
