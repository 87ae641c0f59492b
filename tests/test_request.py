"""Per-call request building tests (characterization of the SDK config)."""

from __future__ import annotations

from google.genai import types
import pytest

from vertexchat.config import Config
from vertexchat.models import SystemMessage, ToolSpecification, UserMessage
from vertexchat.request import build_request

pytestmark = pytest.mark.contract

DATASTORE = "projects/p/locations/global/collections/default_collection/dataStores/d"
WEATHER = ToolSpecification(name="get_weather", description="Weather lookup.")


def test_plain_request_has_no_tools_instruction_or_safety(config: Config) -> None:
    request = build_request(config, [UserMessage("Hello")])

    assert request.model == config.model
    assert request.system_instruction is None
    assert request.tools == []
    dumped = request.config.model_dump(exclude_none=True)
    assert "tools" not in dumped
    assert "tool_config" not in dumped
    assert request.config.tool_config is None
    assert "system_instruction" not in dumped
    assert "safety_settings" not in dumped


def test_request_carries_generation_params(gemini_model: str) -> None:
    cfg = Config(
        model=gemini_model,
        temperature=0.3,
        max_output_tokens=256,
        top_k=20,
        top_p=0.9,
        response_schema={"type": "object", "properties": {"a": {"type": "string"}}},
        response_mime_type="text/plain",
    )

    gen = build_request(cfg, [UserMessage("q")]).config

    assert gen.temperature == 0.3
    assert gen.max_output_tokens == 256
    assert gen.top_k == 20
    assert gen.top_p == 0.9
    assert gen.response_mime_type == "application/json"


def test_tools_are_ordered_functions_then_search_then_datastore(
    gemini_model: str,
) -> None:
    cfg = Config(
        model=gemini_model,
        use_google_search=True,
        vertex_search_datastore=DATASTORE,
    )

    request = build_request(cfg, [UserMessage("q")], [WEATHER])

    first, second, third = request.tools
    assert first.function_declarations is not None
    assert first.function_declarations[0].name == "get_weather"
    assert second.google_search is not None
    assert third.retrieval is not None
    assert request.config.tools == request.tools


def test_grounding_tools_apply_without_function_specifications(
    gemini_model: str,
) -> None:
    cfg = Config(model=gemini_model, use_google_search=True)

    request = build_request(cfg, [UserMessage("q")])

    (tool,) = request.tools
    assert tool.google_search is not None


def test_tool_config_follows_configured_mode(gemini_model: str) -> None:
    cfg = Config(
        model=gemini_model,
        tool_calling_mode="any",
        allowed_function_names=("get_weather",),
    )

    request = build_request(cfg, [UserMessage("q")], [WEATHER])

    tool_config = request.config.tool_config
    assert tool_config is not None
    fcc = tool_config.function_calling_config
    assert fcc is not None
    assert fcc.mode == types.FunctionCallingConfigMode.ANY
    assert fcc.allowed_function_names == ["get_weather"]


def test_system_instruction_and_safety_are_attached(gemini_model: str) -> None:
    cfg = Config(model=gemini_model, safety_settings={"hate_speech": "block_none"})

    request = build_request(cfg, [SystemMessage("Be terse."), UserMessage("q")])

    assert request.system_instruction == "Be terse."
    assert request.config.system_instruction == "Be terse."
    assert len(request.contents) == 1
    safety = request.config.safety_settings
    assert safety is not None
    assert safety[0].category == types.HarmCategory.HARM_CATEGORY_HATE_SPEECH


def test_building_requests_does_not_leak_between_calls(config: Config) -> None:
    with_tools = build_request(config, [UserMessage("q")], [WEATHER])
    without_tools = build_request(config, [UserMessage("q")])

    assert with_tools.tools
    assert without_tools.tools == []
    assert without_tools.config.tools is None
