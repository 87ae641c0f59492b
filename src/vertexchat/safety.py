"""Safety settings mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from google.genai import types

if TYPE_CHECKING:
    from collections.abc import Mapping


def map_harm_category(name: str) -> types.HarmCategory:
    """Map a lower-case category name such as ``"hate_speech"`` to the SDK enum."""
    return types.HarmCategory[f"HARM_CATEGORY_{name.upper()}"]


def map_threshold(name: str) -> types.HarmBlockThreshold:
    """Map a lower-case threshold name such as ``"block_only_high"`` to the SDK enum."""
    return types.HarmBlockThreshold[name.upper()]


def map_safety_settings(settings: Mapping[str, str]) -> list[types.SafetySetting]:
    """Convert ``{category: threshold}`` into SDK safety settings, in input order."""
    return [
        types.SafetySetting(
            category=map_harm_category(category),
            threshold=map_threshold(threshold),
        )
        for category, threshold in settings.items()
    ]
