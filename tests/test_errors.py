from __future__ import annotations

import pytest

from vertexchat.errors import ConfigurationError, ResponseError, VertexChatError

pytestmark = pytest.mark.unit


def test_error_carries_hint() -> None:
    err = VertexChatError("boom", hint="do this")
    assert str(err) == "boom"
    assert err.hint == "do this"


def test_hint_defaults_to_none() -> None:
    assert VertexChatError("fail").hint is None
    assert ResponseError("empty").block_reason is None


def test_subclass_hierarchy() -> None:
    """Specific errors are catchable as VertexChatError."""
    assert isinstance(ConfigurationError("bad"), VertexChatError)
    assert isinstance(ResponseError("empty", block_reason="SAFETY"), VertexChatError)
