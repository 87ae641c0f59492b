"""vertexchat: a chat-model adapter for Gemini on Vertex AI.

Public API:
    - VertexAiGeminiChatModel: generate()/agenerate()/close()
    - Config: Configuration dataclass
    - Message, tool and response types
"""

from __future__ import annotations

import logging

from vertexchat.chat import VertexAiGeminiChatModel
from vertexchat.config import Config
from vertexchat.errors import ConfigurationError, ResponseError, VertexChatError
from vertexchat.models import (
    AiMessage,
    ChatMessage,
    ChatResponse,
    FinishReason,
    SystemMessage,
    TokenUsage,
    ToolExecutionRequest,
    ToolExecutionResultMessage,
    ToolSpecification,
    UserMessage,
)
from vertexchat.retry import RetryPolicy

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("vertexchat")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("vertexchat").addHandler(logging.NullHandler())

__all__ = [
    "AiMessage",
    "ChatMessage",
    "ChatResponse",
    "Config",
    "ConfigurationError",
    "FinishReason",
    "ResponseError",
    "RetryPolicy",
    "SystemMessage",
    "TokenUsage",
    "ToolExecutionRequest",
    "ToolExecutionResultMessage",
    "ToolSpecification",
    "UserMessage",
    "VertexAiGeminiChatModel",
    "VertexChatError",
]
