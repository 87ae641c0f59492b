"""Per-call request descriptor built from config, messages and tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from google.genai import types

from vertexchat.contents import split_instruction_and_contents
from vertexchat.safety import map_safety_settings
from vertexchat.tools import (
    build_tool_config,
    google_search_tool,
    to_tool,
    vertex_search_tool,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vertexchat.config import Config
    from vertexchat.models import ChatMessage, ToolSpecification


@dataclass(frozen=True)
class GenerateRequest:
    """Everything needed for one ``generate_content`` call."""

    model: str
    contents: list[types.Content]
    config: types.GenerateContentConfig
    system_instruction: str | None = None
    tools: list[types.Tool] = field(default_factory=list)


def resolve_tools(
    config: Config, tool_specifications: Sequence[ToolSpecification]
) -> list[types.Tool]:
    """Function declarations first, then Google Search, then Vertex AI Search."""
    tools: list[types.Tool] = []
    function_tool = to_tool(tool_specifications)
    if function_tool is not None:
        tools.append(function_tool)
    if config.use_google_search:
        tools.append(google_search_tool())
    if config.vertex_search_datastore is not None:
        tools.append(vertex_search_tool(config.vertex_search_datastore))
    return tools


def build_request(
    config: Config,
    messages: Sequence[ChatMessage],
    tool_specifications: Sequence[ToolSpecification] = (),
) -> GenerateRequest:
    """Build a fresh request; nothing on *config* is mutated."""
    split = split_instruction_and_contents(messages)
    tools = resolve_tools(config, tool_specifications)

    config_kwargs = config.generation_params()
    if tools:
        config_kwargs["tools"] = tools
        config_kwargs["tool_config"] = build_tool_config(
            config.tool_calling_mode, config.allowed_function_names
        )
    if split.system_instruction is not None:
        config_kwargs["system_instruction"] = split.system_instruction
    if config.safety_settings:
        config_kwargs["safety_settings"] = map_safety_settings(config.safety_settings)

    return GenerateRequest(
        model=config.model,
        contents=split.contents,
        config=types.GenerateContentConfig(**config_kwargs),
        system_instruction=split.system_instruction,
        tools=tools,
    )
