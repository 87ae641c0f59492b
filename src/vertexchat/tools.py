"""Tool mapping: tool specifications <-> Gemini function calling."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from google.genai import types

from vertexchat.models import ToolExecutionRequest, ToolSpecification

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from vertexchat.config import ToolCallingMode


def normalize_tool_specifications(
    tools: ToolSpecification | Sequence[ToolSpecification] | None,
) -> list[ToolSpecification]:
    """Accept None, a single specification, or a sequence of them."""
    if tools is None:
        return []
    if isinstance(tools, ToolSpecification):
        return [tools]
    specs = list(tools)
    for spec in specs:
        if not isinstance(spec, ToolSpecification):
            raise TypeError(
                f"Expected ToolSpecification, got {type(spec).__name__}"
            )
    return specs


def to_function_declaration(spec: ToolSpecification) -> types.FunctionDeclaration:
    """Convert one tool specification into a function declaration."""
    return types.FunctionDeclaration(
        name=spec.name,
        description=spec.description,
        parameters=spec.parameters,
    )


def to_tool(specs: Sequence[ToolSpecification] | None) -> types.Tool | None:
    """Bundle specifications into a single ``Tool``; None when there are none."""
    if not specs:
        return None
    return types.Tool(
        function_declarations=[to_function_declaration(spec) for spec in specs]
    )


def from_function_calls(calls: Iterable[Any]) -> list[ToolExecutionRequest]:
    """Convert model function calls into tool execution requests, in order."""
    requests: list[ToolExecutionRequest] = []
    for fc in calls:
        # Gemini args are typed as Optional[dict[str, Any]].
        # Default to an empty dictionary to keep the arguments valid JSON.
        call_id = getattr(fc, "id", None)
        requests.append(
            ToolExecutionRequest(
                name=str(fc.name),
                arguments=json.dumps(fc.args or {}),
                id=call_id if isinstance(call_id, str) and call_id else None,
            )
        )
    return requests


def google_search_tool() -> types.Tool:
    """Grounding tool backed by Google Search."""
    return types.Tool(google_search=types.GoogleSearch())


def vertex_search_tool(datastore: str) -> types.Tool:
    """Grounding tool backed by a Vertex AI Search datastore."""
    return types.Tool(
        retrieval=types.Retrieval(
            vertex_ai_search=types.VertexAISearch(datastore=datastore)
        )
    )


def build_tool_config(
    mode: ToolCallingMode,
    allowed_function_names: Sequence[str] = (),
) -> types.ToolConfig:
    """Resolve the function-calling mode.

    ``"any"`` pins calling to ``allowed_function_names`` only when that list is
    non-empty; ``"none"`` disables calling; everything else is AUTO.
    """
    if mode == "any" and allowed_function_names:
        calling_config = types.FunctionCallingConfig(
            mode=types.FunctionCallingConfigMode.ANY,
            allowed_function_names=list(allowed_function_names),
        )
    elif mode == "none":
        calling_config = types.FunctionCallingConfig(
            mode=types.FunctionCallingConfigMode.NONE,
        )
    else:
        calling_config = types.FunctionCallingConfig(
            mode=types.FunctionCallingConfigMode.AUTO,
        )
    return types.ToolConfig(function_calling_config=calling_config)
