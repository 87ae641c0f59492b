"""Test helpers (small, reusable doubles and response builders).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off fake clients as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

from google.genai import types

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeModels:
    """Records generate_content() calls and replays a scripted sequence.

    Script items are either responses or exceptions to raise.
    """

    script: list[Any] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)

    def _next(self, kwargs: dict[str, Any]) -> Any:
        self.calls.append(kwargs)
        if not self.script:
            return make_text_response("ok")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def generate_content(self, **kwargs: Any) -> Any:
        return self._next(kwargs)


@dataclass
class FakeAsyncModels(FakeModels):
    async def generate_content(self, **kwargs: Any) -> Any:  # type: ignore[override]
        return self._next(kwargs)


@dataclass
class FakeClient:
    """Stand-in for ``genai.Client`` with sync and ``aio`` surfaces."""

    models: FakeModels = field(default_factory=FakeModels)
    async_models: FakeAsyncModels = field(default_factory=FakeAsyncModels)
    close_calls: int = 0
    aclose_calls: int = 0

    @property
    def aio(self) -> Any:
        return SimpleNamespace(models=self.async_models, aclose=self._aclose)

    def close(self) -> None:
        self.close_calls += 1

    async def _aclose(self) -> None:
        self.aclose_calls += 1


# =============================================================================
# Response Builders
# =============================================================================


def make_response(
    parts: list[types.Part],
    *,
    finish_reason: types.FinishReason | None = types.FinishReason.STOP,
    prompt_tokens: int | None = 7,
    output_tokens: int | None = 3,
) -> types.GenerateContentResponse:
    """Build a single-candidate response from parts."""
    usage = None
    if prompt_tokens is not None or output_tokens is not None:
        usage = types.GenerateContentResponseUsageMetadata(
            prompt_token_count=prompt_tokens,
            candidates_token_count=output_tokens,
            total_token_count=(prompt_tokens or 0) + (output_tokens or 0),
        )
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=parts),
                finish_reason=finish_reason,
            )
        ],
        usage_metadata=usage,
    )


def make_text_response(text: str, **kwargs: Any) -> types.GenerateContentResponse:
    return make_response([types.Part.from_text(text=text)], **kwargs)


def make_function_call_response(
    *calls: tuple[str, dict[str, Any]], **kwargs: Any
) -> types.GenerateContentResponse:
    parts = [types.Part.from_function_call(name=name, args=args) for name, args in calls]
    return make_response(parts, **kwargs)

