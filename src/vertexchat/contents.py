"""Message mapping: chat history -> system instruction + Gemini content turns."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import TYPE_CHECKING, Any

from google.genai import types

from vertexchat.models import (
    AiMessage,
    SystemMessage,
    ToolExecutionResultMessage,
    UserMessage,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vertexchat.models import ChatMessage


@dataclass(frozen=True)
class InstructionAndContents:
    """System instruction (if any) plus the remaining turns in order."""

    system_instruction: str | None = None
    contents: list[types.Content] = field(default_factory=list)


def convert_parts(parts: str | Sequence[Any]) -> list[types.Part]:
    """Convert user content into google-genai parts."""
    if isinstance(parts, str):
        return [types.Part.from_text(text=parts)]

    converted: list[types.Part] = []
    for p in parts:
        if isinstance(p, str):
            converted.append(types.Part.from_text(text=p))
        elif isinstance(p, types.Part):
            converted.append(p)
        elif isinstance(p, dict):
            # URI-based parts (uploaded files, gs:// objects)
            if "uri" in p and "mime_type" in p:
                converted.append(
                    types.Part.from_uri(file_uri=p["uri"], mime_type=p["mime_type"])
                )
            elif "data" in p and "mime_type" in p:
                converted.append(
                    types.Part.from_bytes(data=p["data"], mime_type=p["mime_type"])
                )
            elif "text" in p:
                converted.append(types.Part.from_text(text=p["text"]))
            else:
                raise ValueError(
                    f"Unsupported content part keys: {sorted(p)}; "
                    "expected text, uri+mime_type or data+mime_type"
                )
        else:
            raise TypeError(f"Unsupported content part: {type(p).__name__}")
    return converted


def _function_call_part(name: str, arguments: str) -> types.Part:
    try:
        args = json.loads(arguments) if arguments else {}
    except ValueError:
        args = {}
    if not isinstance(args, dict):
        args = {}
    return types.Part.from_function_call(name=name, args=args)


def _function_response_part(message: ToolExecutionResultMessage) -> types.Part:
    response: dict[str, Any] = {}
    if message.text:
        try:
            parsed = json.loads(message.text)
        except ValueError:
            parsed = None
        response = parsed if isinstance(parsed, dict) else {"result": message.text}
    return types.Part.from_function_response(
        name=message.tool_name, response=response
    )


def split_instruction_and_contents(
    messages: Sequence[ChatMessage],
) -> InstructionAndContents:
    """Split chat messages into a system instruction and Gemini content turns.

    System messages are joined with newlines. Consecutive tool results are
    folded into a single user turn, because Gemini expects every function
    response for one model turn to arrive together.
    """
    instructions: list[str] = []
    contents: list[types.Content] = []
    last_was_tool_result = False

    for message in messages:
        if isinstance(message, SystemMessage):
            instructions.append(message.text)
            last_was_tool_result = False
        elif isinstance(message, UserMessage):
            contents.append(
                types.Content(role="user", parts=convert_parts(message.content))
            )
            last_was_tool_result = False
        elif isinstance(message, AiMessage):
            ai_parts: list[types.Part] = []
            if message.text:
                ai_parts.append(types.Part.from_text(text=message.text))
            for request in message.tool_execution_requests:
                ai_parts.append(_function_call_part(request.name, request.arguments))
            if not ai_parts:
                # Keep the turn so the user/model alternation survives.
                ai_parts.append(types.Part.from_text(text=""))
            contents.append(types.Content(role="model", parts=ai_parts))
            last_was_tool_result = False
        elif isinstance(message, ToolExecutionResultMessage):
            part = _function_response_part(message)
            if last_was_tool_result:
                contents[-1].parts.append(part)
            else:
                contents.append(types.Content(role="user", parts=[part]))
            last_was_tool_result = True
        else:
            raise TypeError(f"Unsupported chat message: {type(message).__name__}")

    return InstructionAndContents(
        system_instruction="\n".join(instructions) if instructions else None,
        contents=contents,
    )
