"""aiclient -- typed client for OpenAI-compatible chat-completion APIs."""

from aiclient.client import DEFAULT_API_URL, Client
from aiclient.errors import (
    AIClientError,
    BadRequestError,
    ConfigError,
    DeserializationError,
    HTTPStatusError,
    SchemaError,
    ToolNotFoundError,
    TransportError,
)
from aiclient.models import ModelCatalog, ModelEntry
from aiclient.request import ChatCompletionParameter
from aiclient.schema import (
    FieldType,
    JsonSchemaDescription,
    ObjectSchema,
    ResponseFormat,
    SchemaField,
)
from aiclient.tools import JsonTool, Tool, ToolChoice
from aiclient.types import (
    ChatCompletionResponse,
    Choice,
    FunctionCall,
    Message,
    ToolCall,
    Usage,
)

__version__ = "0.1.0"

__all__ = [
    "AIClientError",
    "BadRequestError",
    "ChatCompletionParameter",
    "ChatCompletionResponse",
    "Choice",
    "Client",
    "ConfigError",
    "DEFAULT_API_URL",
    "DeserializationError",
    "FieldType",
    "FunctionCall",
    "HTTPStatusError",
    "JsonSchemaDescription",
    "JsonTool",
    "Message",
    "ModelCatalog",
    "ModelEntry",
    "ObjectSchema",
    "ResponseFormat",
    "SchemaError",
    "SchemaField",
    "Tool",
    "ToolCall",
    "ToolChoice",
    "ToolNotFoundError",
    "TransportError",
    "Usage",
]
