"""Application-side message, tool and response types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Literal

FinishReason = Literal["stop", "length", "content_filter", "other"]


@dataclass(frozen=True)
class ToolSpecification:
    """A function the model may ask the application to run."""

    name: str
    description: str = ""
    #: JSON-schema-shaped description of the arguments object.
    parameters: dict[str, Any] | None = None


@dataclass(frozen=True)
class ToolExecutionRequest:
    """A tool call requested by the model."""

    name: str
    #: JSON-encoded arguments object.
    arguments: str = "{}"
    id: str | None = None


@dataclass(frozen=True)
class SystemMessage:
    """Instruction that frames the whole conversation."""

    role: ClassVar[str] = "system"

    text: str


@dataclass(frozen=True)
class UserMessage:
    """A user turn.

    ``content`` is either plain text or a list of parts. A part can be a
    string, ``{"uri": ..., "mime_type": ...}`` for a file reference,
    ``{"data": bytes, "mime_type": ...}`` for inline bytes, or a native
    ``google.genai.types.Part``.
    """

    role: ClassVar[str] = "user"

    content: str | list[Any]


@dataclass(frozen=True)
class AiMessage:
    """A model turn: text, tool execution requests, or (in history) both."""

    role: ClassVar[str] = "assistant"

    text: str | None = None
    tool_execution_requests: tuple[ToolExecutionRequest, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "tool_execution_requests", tuple(self.tool_execution_requests)
        )

    def has_tool_execution_requests(self) -> bool:
        """Whether the model asked for at least one tool call."""
        return bool(self.tool_execution_requests)


@dataclass(frozen=True)
class ToolExecutionResultMessage:
    """The application's answer to a ``ToolExecutionRequest``."""

    role: ClassVar[str] = "tool"

    tool_name: str
    text: str
    id: str | None = None


ChatMessage = SystemMessage | UserMessage | AiMessage | ToolExecutionResultMessage


def _add_counts(a: int | None, b: int | None) -> int | None:
    if a is None:
        return b
    if b is None:
        return a
    return a + b


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported for one call."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None

    def add(self, other: TokenUsage | None) -> TokenUsage:
        """Return the sum of two usages; missing counts are treated as absent."""
        if other is None:
            return self
        return TokenUsage(
            input_tokens=_add_counts(self.input_tokens, other.input_tokens),
            output_tokens=_add_counts(self.output_tokens, other.output_tokens),
            total_tokens=_add_counts(self.total_tokens, other.total_tokens),
        )


@dataclass(frozen=True)
class ChatResponse:
    """Result of one ``generate`` call.

    The message carries either text or tool execution requests, never both.
    """

    message: AiMessage
    token_usage: TokenUsage | None = None
    finish_reason: FinishReason | None = None

    def __post_init__(self) -> None:
        if self.message.text is not None and self.message.tool_execution_requests:
            raise ValueError(
                "ChatResponse message must carry text or tool calls, not both"
            )

    @property
    def text(self) -> str | None:
        """Text answer, or None for a tool-call response."""
        return self.message.text

    @property
    def tool_execution_requests(self) -> tuple[ToolExecutionRequest, ...]:
        """Requested tool calls, empty for a text response."""
        return self.message.tool_execution_requests

    def has_tool_execution_requests(self) -> bool:
        """Whether this response asks the application to run tools."""
        return self.message.has_tool_execution_requests()
