"""Vertex AI Gemini chat model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from google import genai

from vertexchat.errors import ConfigurationError, ResponseError, VertexChatError
from vertexchat.models import AiMessage, ChatResponse
from vertexchat.request import build_request
from vertexchat.retry import retry_async, retry_call
from vertexchat.tools import from_function_calls, normalize_tool_specifications
from vertexchat.usage import map_finish_reason, map_token_usage

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from vertexchat.config import Config
    from vertexchat.models import ChatMessage, ToolSpecification
    from vertexchat.request import GenerateRequest

logger = logging.getLogger(__name__)


class VertexAiGeminiChatModel:
    """Chat model backed by Gemini on Vertex AI.

    Credentials are resolved by the google-genai SDK (Application Default
    Credentials, or ``GOOGLE_APPLICATION_CREDENTIALS`` pointing at a service
    account key).

    Example:
        config = Config(model="gemini-2.0-flash", project="p", location="us-central1")
        with VertexAiGeminiChatModel(config) as chat:
            response = chat.generate([UserMessage("Hello")])
            print(response.text)
    """

    def __init__(self, config: Config, *, client: Any = None) -> None:
        """Open a Vertex AI client, or adopt *client* without taking ownership."""
        self.config = config
        self._closed = False
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            self._client = self._open_client(config)
            self._owns_client = True

    @staticmethod
    def _open_client(config: Config) -> Any:
        if not config.project:
            raise ConfigurationError(
                "project is required to open a Vertex AI client",
                hint="Pass Config(project=...) or set GOOGLE_CLOUD_PROJECT.",
            )
        if not config.location:
            raise ConfigurationError(
                "location is required to open a Vertex AI client",
                hint="Pass Config(location=...) or set GOOGLE_CLOUD_LOCATION.",
            )
        return genai.Client(
            vertexai=True, project=config.project, location=config.location
        )

    @property
    def model_name(self) -> str:
        """Gemini model name used for every call."""
        return self.config.model

    def _require_open(self) -> Any:
        if self._closed:
            raise VertexChatError(
                "Chat model is closed",
                hint="Create a new VertexAiGeminiChatModel after close().",
            )
        return self._client

    def _prepare(
        self,
        messages: Sequence[ChatMessage],
        tools: ToolSpecification | Sequence[ToolSpecification] | None,
    ) -> GenerateRequest:
        request = build_request(
            self.config, messages, normalize_tool_specifications(tools)
        )
        if self.config.log_requests and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "GEMINI (%s) request: instruction=%r contents=%s tools=%s",
                request.model,
                request.system_instruction,
                request.contents,
                request.tools,
            )
        return request

    def generate(
        self,
        messages: Sequence[ChatMessage],
        tools: ToolSpecification | Sequence[ToolSpecification] | None = None,
    ) -> ChatResponse:
        """Send *messages* to the model and return its reply.

        Args:
            messages: Conversation so far, in order.
            tools: None, one tool specification, or a sequence of them.

        Returns:
            ChatResponse holding either text or tool execution requests.

        Raises:
            ResponseError: If the model returned no candidate, or an empty
                candidate that did not stop normally.
            Exception: The last remote failure, once retries are exhausted.
        """
        client = self._require_open()
        request = self._prepare(messages, tools)
        policy = self.config.retry

        response = retry_call(
            lambda: client.models.generate_content(
                model=request.model,
                contents=request.contents,
                config=request.config,
            ),
            policy=policy,
            should_retry=policy.predicate(),
        )
        return self._parse_response(response)

    async def agenerate(
        self,
        messages: Sequence[ChatMessage],
        tools: ToolSpecification | Sequence[ToolSpecification] | None = None,
    ) -> ChatResponse:
        """Async variant of :meth:`generate` using the SDK's ``aio`` client."""
        client = self._require_open()
        request = self._prepare(messages, tools)
        policy = self.config.retry

        response = await retry_async(
            lambda: client.aio.models.generate_content(
                model=request.model,
                contents=request.contents,
                config=request.config,
            ),
            policy=policy,
            should_retry=policy.predicate(),
        )
        return self._parse_response(response)

    def _parse_response(self, response: Any) -> ChatResponse:
        """Turn a ``GenerateContentResponse`` into a ChatResponse."""
        if self.config.log_responses and logger.isEnabledFor(logging.DEBUG):
            logger.debug("GEMINI (%s) response: %s", self.config.model, response)

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            feedback = getattr(response, "prompt_feedback", None)
            block_reason = getattr(feedback, "block_reason", None)
            reason = getattr(block_reason, "name", block_reason)
            raise ResponseError(
                "Gemini returned no candidates"
                + (f" (blocked: {reason})" if reason else ""),
                hint="The prompt may have been blocked by safety filters.",
                block_reason=str(reason) if reason else None,
            )

        candidate = candidates[0]
        content = getattr(candidate, "content", None)
        parts = list(getattr(content, "parts", None) or [])

        raw_finish_reason = getattr(candidate, "finish_reason", None)
        token_usage = map_token_usage(getattr(response, "usage_metadata", None))
        finish_reason = map_finish_reason(raw_finish_reason)

        # An empty candidate is only a valid reply when the model stopped normally.
        if not parts and finish_reason != "stop":
            reason = getattr(raw_finish_reason, "name", raw_finish_reason)
            raise ResponseError(
                "Gemini returned a candidate without content"
                + (f" (finish reason: {reason})" if reason else ""),
                hint="The reply may have been blocked for safety or recitation.",
                block_reason=str(reason) if reason else None,
            )

        function_calls = [
            part.function_call
            for part in parts
            if getattr(part, "function_call", None) is not None
        ]
        if function_calls:
            message = AiMessage(
                tool_execution_requests=tuple(from_function_calls(function_calls))
            )
        else:
            text = "".join(
                part.text
                for part in parts
                if isinstance(getattr(part, "text", None), str)
                and not getattr(part, "thought", False)
            )
            message = AiMessage(text=text)

        return ChatResponse(
            message=message,
            token_usage=token_usage,
            finish_reason=finish_reason,
        )

    def close(self) -> None:
        """Release the owned client's sync transport. Safe to call more than once.

        After :meth:`agenerate`, prefer :meth:`aclose`, which also releases
        the async session.
        """
        if self._closed:
            return
        self._closed = True
        if not self._owns_client:
            return
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    async def aclose(self) -> None:
        """Release the owned client's async session and sync transport."""
        if self._closed:
            return
        if self._owns_client:
            aclose = getattr(self._client.aio, "aclose", None)
            if callable(aclose):
                try:
                    await aclose()
                finally:
                    self.close()
                return
        self.close()

    def __enter__(self) -> VertexAiGeminiChatModel:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    async def __aenter__(self) -> VertexAiGeminiChatModel:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
