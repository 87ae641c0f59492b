"""Token usage and finish reason mapping."""

from __future__ import annotations

from typing import Any

from vertexchat.models import FinishReason, TokenUsage

_FINISH_REASONS: dict[str, FinishReason] = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
    "BLOCKLIST": "content_filter",
    "PROHIBITED_CONTENT": "content_filter",
    "SPII": "content_filter",
    "IMAGE_SAFETY": "content_filter",
}


def _count(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def map_token_usage(usage_metadata: Any) -> TokenUsage | None:
    """Map Gemini ``usage_metadata`` to provider-agnostic token counts."""
    if usage_metadata is None:
        return None
    return TokenUsage(
        input_tokens=_count(getattr(usage_metadata, "prompt_token_count", None)),
        output_tokens=_count(getattr(usage_metadata, "candidates_token_count", None)),
        total_tokens=_count(getattr(usage_metadata, "total_token_count", None)),
    )


def _reason_name(reason: Any) -> str | None:
    """Extract a stable upper-case name from SDK enums or plain strings."""
    if isinstance(reason, str):
        return reason.upper() or None
    name = getattr(reason, "name", None)
    if isinstance(name, str) and name:
        return name.upper()
    return None


def map_finish_reason(reason: Any) -> FinishReason | None:
    """Normalize a Gemini finish reason; unspecified maps to None."""
    name = _reason_name(reason)
    if name is None or name == "FINISH_REASON_UNSPECIFIED":
        return None
    return _FINISH_REASONS.get(name, "other")
