from __future__ import annotations

import os
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from salesbot.errors import ConfigurationError
from salesbot.services.prompt_builder import CHAT_TEMPLATES

DEFAULT_CATALOG: Tuple[str, ...] = (
    "RiverLite 2–6hp (portable)",
    "CoastCruiser 8–15hp (compact)",
    "BayRunner 20–40hp (family)",
    "OffshorePro 50–90hp (performance)",
    "WorkHorse 100–150hp (commercial)",
    "OceanMax 200–300hp (large boats)",
)


class SamplingSettings(BaseModel):
    """Sampling parameters passed to the generation engine on every turn."""

    model_config = ConfigDict(frozen=True)

    max_new_tokens: int = Field(default=300, ge=1)
    temperature: float = Field(default=0.15, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, gt=0.0, le=1.0)


class Settings(BaseModel):
    """Configuration container for the backend, prompt format and catalog."""

    model_config = ConfigDict(frozen=True)

    backend: Literal["openai", "ollama", "none"] = "openai"
    model: str = "qwen3-14b-instruct"
    openai_base_url: str = "http://localhost:8080/v1"
    openai_api_key: str = "not-needed"
    ollama_base_url: str = "http://localhost:11434"
    request_timeout: float = Field(default=120.0, gt=0)
    chat_template: str = "chatml"
    reasoning_open: str = "<think>"
    reasoning_close: str = "</think>"
    no_think_directive: Optional[str] = "/no_think"
    catalog: Tuple[str, ...] = DEFAULT_CATALOG
    sampling: SamplingSettings = Field(default_factory=SamplingSettings)

    @field_validator("chat_template")
    @classmethod
    def _known_template(cls, value: str) -> str:
        if value not in CHAT_TEMPLATES:
            raise ValueError(f"unknown chat template {value!r}; expected one of {sorted(CHAT_TEMPLATES)}")
        return value

    @field_validator("catalog")
    @classmethod
    def _clean_catalog(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("catalog must list at least one offering")
        if any(not item.strip() for item in value):
            raise ValueError("catalog entries must not be blank")
        if len(set(value)) != len(value):
            raise ValueError("catalog entries must be unique")
        return value

    @field_validator("no_think_directive")
    @classmethod
    def _empty_directive_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def _reasoning_tags_present(self) -> "Settings":
        if not self.reasoning_open or not self.reasoning_close:
            raise ValueError("reasoning_open and reasoning_close must both be set")
        return self


_ENV_FIELDS = {
    "SALESBOT_BACKEND": "backend",
    "SALESBOT_MODEL": "model",
    "SALESBOT_OPENAI_BASE_URL": "openai_base_url",
    "SALESBOT_OPENAI_API_KEY": "openai_api_key",
    "SALESBOT_OLLAMA_BASE_URL": "ollama_base_url",
    "SALESBOT_REQUEST_TIMEOUT": "request_timeout",
    "SALESBOT_CHAT_TEMPLATE": "chat_template",
    "SALESBOT_REASONING_OPEN": "reasoning_open",
    "SALESBOT_REASONING_CLOSE": "reasoning_close",
    "SALESBOT_NO_THINK_DIRECTIVE": "no_think_directive",
}

_ENV_SAMPLING_FIELDS = {
    "SALESBOT_MAX_NEW_TOKENS": "max_new_tokens",
    "SALESBOT_TEMPERATURE": "temperature",
    "SALESBOT_TOP_P": "top_p",
}


def load_settings(environ: Optional[Dict[str, str]] = None) -> Settings:
    """Build Settings from SALESBOT_* environment variables.

    Unset variables keep their defaults. SALESBOT_CATALOG is a ``;``-separated
    list of offering names. Out-of-range or malformed values raise
    ConfigurationError.
    """
    env = os.environ if environ is None else environ
    kwargs: Dict[str, Any] = {}
    for var, field in _ENV_FIELDS.items():
        if var in env:
            kwargs[field] = env[var]
    sampling = {field: env[var] for var, field in _ENV_SAMPLING_FIELDS.items() if var in env}
    if sampling:
        kwargs["sampling"] = sampling
    catalog = env.get("SALESBOT_CATALOG")
    if catalog:
        kwargs["catalog"] = tuple(part.strip() for part in catalog.split(";") if part.strip())
    try:
        return Settings(**kwargs)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
