"""Exception hierarchy for vertexchat."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class VertexChatError(Exception):
    """Base exception for all vertexchat errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(VertexChatError):
    """Configuration validation or resolution failed."""


class ResponseError(VertexChatError):
    """The model returned a response with no usable candidate."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        block_reason: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.block_reason = block_reason


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
