"""Configuration: frozen Config with eager validation."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel

from vertexchat.errors import ConfigurationError
from vertexchat.retry import RetryPolicy

load_dotenv()

ToolCallingMode = Literal["auto", "any", "none"]
ResponseSchemaInput = type[BaseModel] | dict[str, Any]

JSON_MIME_TYPE = "application/json"

PROJECT_ENV_VAR = "GOOGLE_CLOUD_PROJECT"
LOCATION_ENV_VAR = "GOOGLE_CLOUD_LOCATION"

HARM_CATEGORIES: frozenset[str] = frozenset(
    {
        "harassment",
        "hate_speech",
        "sexually_explicit",
        "dangerous_content",
        "civic_integrity",
    }
)
SAFETY_THRESHOLDS: frozenset[str] = frozenset(
    {
        "block_none",
        "block_only_high",
        "block_medium_and_above",
        "block_low_and_above",
        "off",
    }
)
_TOOL_CALLING_MODES: frozenset[str] = frozenset({"auto", "any", "none"})


def _normalize_name(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a Vertex AI Gemini chat model.

    Only ``model`` is always required. ``project`` and ``location`` are
    auto-resolved from ``GOOGLE_CLOUD_PROJECT`` / ``GOOGLE_CLOUD_LOCATION``
    and are needed whenever the chat model opens its own client.
    Generation parameters left as *None* fall back to the model's defaults.

    Example:
        config = Config(model="gemini-2.0-flash", project="my-proj", location="us-central1")
    """

    model: str
    project: str | None = None
    location: str | None = None

    temperature: float | None = None
    max_output_tokens: int | None = None
    top_k: int | None = None
    top_p: float | None = None
    response_mime_type: str | None = None
    #: Pydantic ``BaseModel`` subclass or JSON Schema dict. Forces JSON output.
    response_schema: ResponseSchemaInput | None = None

    #: Harm category name -> block threshold name, e.g. ``{"harassment": "block_only_high"}``.
    safety_settings: dict[str, str] = field(default_factory=dict)

    use_google_search: bool = False
    #: Full datastore resource path for Vertex AI Search grounding.
    vertex_search_datastore: str | None = None

    tool_calling_mode: ToolCallingMode = "auto"
    allowed_function_names: tuple[str, ...] = ()

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    log_requests: bool = False
    log_responses: bool = False

    def __post_init__(self) -> None:
        """Resolve environment defaults and validate eagerly."""
        if not isinstance(self.model, str) or not self.model.strip():
            raise ConfigurationError(
                "model must be a non-empty string",
                hint="Pass Config(model='gemini-2.0-flash', ...).",
            )

        if self.project is None:
            object.__setattr__(self, "project", os.environ.get(PROJECT_ENV_VAR))
        if self.location is None:
            object.__setattr__(self, "location", os.environ.get(LOCATION_ENV_VAR))
        for name, env_var in (
            ("project", PROJECT_ENV_VAR),
            ("location", LOCATION_ENV_VAR),
        ):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ConfigurationError(
                    f"{name} must not be blank",
                    hint=f"Pass {name}=... or set {env_var}.",
                )

        self._validate_generation()
        self._validate_safety()
        self._validate_tools()

        if not isinstance(self.retry, RetryPolicy):
            raise ConfigurationError(
                "retry must be a RetryPolicy",
                hint="Pass retry=RetryPolicy(max_attempts=3).",
            )

    def _validate_generation(self) -> None:
        if self.temperature is not None and self.temperature < 0:
            raise ConfigurationError(
                f"temperature must be ≥ 0, got {self.temperature}",
            )
        if self.top_p is not None and not 0 <= self.top_p <= 1:
            raise ConfigurationError(
                f"top_p must be within [0, 1], got {self.top_p}",
            )
        for name in ("max_output_tokens", "top_k"):
            value = getattr(self, name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, int) or value <= 0
            ):
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}",
                )

        schema = self.response_schema
        if schema is not None and not (
            isinstance(schema, dict)
            or (isinstance(schema, type) and issubclass(schema, BaseModel))
        ):
            raise ConfigurationError(
                "response_schema must be a Pydantic model class or JSON schema dict",
                hint="Pass a BaseModel subclass or a dict following JSON Schema.",
            )

    def _validate_safety(self) -> None:
        normalized: dict[str, str] = {}
        for category, threshold in dict(self.safety_settings or {}).items():
            cat = _normalize_name(category)
            thr = _normalize_name(threshold)
            if cat not in HARM_CATEGORIES:
                raise ConfigurationError(
                    f"Unknown harm category: {category!r}",
                    hint=f"Supported categories: {', '.join(sorted(HARM_CATEGORIES))}",
                )
            if thr not in SAFETY_THRESHOLDS:
                raise ConfigurationError(
                    f"Unknown safety threshold for {cat}: {threshold!r}",
                    hint=f"Supported thresholds: {', '.join(sorted(SAFETY_THRESHOLDS))}",
                )
            normalized[cat] = thr
        object.__setattr__(self, "safety_settings", normalized)

    def _validate_tools(self) -> None:
        mode = _normalize_name(self.tool_calling_mode)
        if mode not in _TOOL_CALLING_MODES:
            raise ConfigurationError(
                f"Unknown tool_calling_mode: {self.tool_calling_mode!r}",
                hint="Use 'auto', 'any' or 'none'.",
            )
        object.__setattr__(self, "tool_calling_mode", mode)

        names = self.allowed_function_names
        if isinstance(names, str):
            raise ConfigurationError(
                "allowed_function_names must be a sequence of names",
                hint="Pass allowed_function_names=('get_weather',).",
            )
        object.__setattr__(self, "allowed_function_names", tuple(names or ()))

        datastore = self.vertex_search_datastore
        if datastore is not None and (
            not isinstance(datastore, str) or not datastore.strip()
        ):
            raise ConfigurationError(
                "vertex_search_datastore must be a non-blank string",
                hint=(
                    "Pass the full resource path: projects/<p>/locations/<l>/"
                    "collections/default_collection/dataStores/<id>"
                ),
            )

    @property
    def effective_response_mime_type(self) -> str | None:
        """MIME type actually sent; a response schema always wins."""
        if self.response_schema is not None:
            return JSON_MIME_TYPE
        return self.response_mime_type

    def response_schema_json(self) -> dict[str, Any] | None:
        """Return JSON Schema for the provider API."""
        schema = self.response_schema
        if schema is None:
            return None
        if isinstance(schema, dict):
            return schema
        return schema.model_json_schema()

    def generation_params(self) -> dict[str, Any]:
        """Return only the generation parameters that were explicitly set."""
        params: dict[str, Any] = {}
        for name in ("temperature", "max_output_tokens", "top_k", "top_p"):
            value = getattr(self, name)
            if value is not None:
                params[name] = value
        mime_type = self.effective_response_mime_type
        if mime_type is not None:
            params["response_mime_type"] = mime_type
        schema = self.response_schema_json()
        if schema is not None:
            params["response_json_schema"] = schema
        return params

    def __str__(self) -> str:
        """Return a compact, developer-friendly representation."""
        return (
            f"Config(model={self.model!r}, project={self.project!r}, "
            f"location={self.location!r}, tool_calling_mode={self.tool_calling_mode!r})"
        )

    __repr__ = __str__
