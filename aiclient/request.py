"""
Request builder for chat completions.

One ``ChatCompletionParameter`` is kept per conversation and grows across
the turns of a tool-calling exchange::

    param = ChatCompletionParameter("openai/gpt-4.1", [Message.user("Weather in Paris?")])
    param.add_tool(Tool("get_weather", "Current temperature", WeatherParameter))
    param.set_tool_choice(ToolChoice.required())
    choices = await client.chat_completion(param)
    param.add_message(choices[0].message)
    param.add_message(Message.tool(call.id, "21.5"))
    choices = await client.chat_completion(param)

Tools must be added before a function tool-choice that names them: the
check in ``set_tool_choice`` only sees the tools registered so far.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from aiclient.errors import ToolNotFoundError
from aiclient.schema import ResponseFormat
from aiclient.tools import JsonTool, Tool, ToolChoice
from aiclient.types import Message

logger = logging.getLogger(__name__)

__all__ = ["ChatCompletionParameter"]


class ChatCompletionParameter:
    """Accumulates model, messages, tools, tool choice and response format."""

    def __init__(self, model: str, messages: Iterable[Message] = ()) -> None:
        self.model = model
        self._messages: list[Message] = list(messages)
        self._tools: list[JsonTool] = []
        self._tool_choice: ToolChoice | None = None
        self._response_format: ResponseFormat | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def tools(self) -> tuple[JsonTool, ...]:
        return tuple(self._tools)

    @property
    def tool_choice(self) -> ToolChoice | None:
        return self._tool_choice

    @property
    def response_format(self) -> ResponseFormat | None:
        return self._response_format

    def has_tool(self, name: str) -> bool:
        return any(t.name == name for t in self._tools)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_message(self, message: Message) -> None:
        self._messages.append(message)

    def add_tool(self, tool: Tool | JsonTool) -> None:
        json_tool = tool.into_json() if isinstance(tool, Tool) else tool
        if self.has_tool(json_tool.name):
            logger.warning("Tool %r added more than once", json_tool.name)
        self._tools.append(json_tool)

    def set_tool_choice(self, choice: ToolChoice) -> None:
        """Store the tool-choice policy.

        Raises ``ToolNotFoundError`` if *choice* names a function that has
        not been added with ``add_tool``.
        """
        if choice.is_function and not self.has_tool(choice.function_name or ""):
            raise ToolNotFoundError(choice.function_name or "")
        self._tool_choice = choice

    def set_response_format(self, response_format: ResponseFormat) -> None:
        self._response_format = response_format

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    def to_body(self) -> dict[str, Any]:
        """The JSON envelope; unset optional keys are left out entirely."""
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self._messages],
        }
        if self._tools:
            body["tools"] = [t.to_dict() for t in self._tools]
        if self._tool_choice is not None:
            body["tool_choice"] = self._tool_choice.to_wire()
        if self._response_format is not None:
            body["response_format"] = self._response_format.to_dict()
        return body

    def __repr__(self) -> str:
        return (
            f"ChatCompletionParameter(model={self.model!r}, "
            f"messages={len(self._messages)}, tools={len(self._tools)})"
        )
