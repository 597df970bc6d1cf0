from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from agent.errors import ConfigurationError


load_dotenv()


OPENROUTER_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
OPENAI_ENDPOINT = "https://api.openai.com/v1/chat/completions"
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
PLACES_ENDPOINT = "https://maps.googleapis.com/maps/api/place/textsearch/json"
GITHUB_API_URL = "https://api.github.com"

DEFAULT_PROVIDERS = "openrouter-gpt,openrouter-mistral"


class ProviderConfig(BaseModel):
    """One upstream text-generation service in the fallback chain."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str
    kind: str = Field(..., description="'chat' (chat-completion) or 'generation'")
    endpoint: str
    model_id: str
    api_key_env: str
    api_key: Optional[str] = Field(default=None, repr=False)


class Settings(BaseModel):
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. Instances are frozen and
    handed to ``build_agent`` so request handling never reads the environment.
    """

    model_config = ConfigDict(frozen=True)

    app_env: str = "development"
    log_level: str = "INFO"
    app_title: str = "AYUR VIDHYA"
    openrouter_referer: str = "https://myayurveda.netlify.app"
    providers: Tuple[ProviderConfig, ...] = ()
    request_timeout: float = 10.0
    places_api_key: Optional[str] = Field(default=None, repr=False)
    places_endpoint: str = PLACES_ENDPOINT
    default_search_location: str = "28.6139,77.2090"
    places_radius: int = 5000
    github_token: Optional[str] = Field(default=None, repr=False)
    chatlog_repo: str = "ayurvidhya/chat-logs"
    github_api_url: str = GITHUB_API_URL

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        names = env.get("WELLNESS_PROVIDERS", DEFAULT_PROVIDERS)
        return cls(
            app_env=env.get("APP_ENV", "development"),
            log_level=env.get("LOG_LEVEL", "INFO"),
            app_title=env.get("APP_TITLE", "AYUR VIDHYA"),
            openrouter_referer=env.get("OPENROUTER_REFERER", "https://myayurveda.netlify.app"),
            providers=resolve_providers(names, env),
            request_timeout=float(env.get("REQUEST_TIMEOUT", "10")),
            places_api_key=_blank_to_none(env.get("GOOGLE_PLACES_API_KEY")),
            default_search_location=env.get("DEFAULT_SEARCH_LOCATION", "28.6139,77.2090"),
            places_radius=int(env.get("PLACES_RADIUS", "5000")),
            github_token=_blank_to_none(env.get("GITHUB_TOKEN")),
            chatlog_repo=env.get("CHATLOG_REPO", "ayurvidhya/chat-logs"),
        )

    def missing_provider_keys(self) -> Tuple[str, ...]:
        return tuple(p.api_key_env for p in self.providers if not p.api_key)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def provider_catalog(env: Mapping[str, str]) -> Dict[str, Dict[str, str]]:
    """Known providers keyed by the names accepted in ``WELLNESS_PROVIDERS``."""
    gemini_model = env.get("GEMINI_MODEL", "gemini-2.0-flash")
    return {
        "openrouter-gpt": {
            "kind": "chat",
            "endpoint": OPENROUTER_ENDPOINT,
            "model_id": env.get("OPENROUTER_GPT_MODEL", "gpt-3.5-turbo"),
            "api_key_env": "OPENROUTER_API_KEY",
        },
        "openrouter-mistral": {
            "kind": "chat",
            "endpoint": OPENROUTER_ENDPOINT,
            "model_id": env.get("OPENROUTER_MISTRAL_MODEL", "mistralai/mistral-7b-instruct"),
            "api_key_env": "OPENROUTER_API_KEY",
        },
        "openai": {
            "kind": "chat",
            "endpoint": OPENAI_ENDPOINT,
            "model_id": env.get("OPENAI_MODEL", "gpt-4o-mini"),
            "api_key_env": "OPENAI_API_KEY",
        },
        "gemini": {
            "kind": "generation",
            "endpoint": GEMINI_ENDPOINT.format(model=gemini_model),
            "model_id": gemini_model,
            "api_key_env": "GEMINI_API_KEY",
        },
    }


def resolve_providers(names: str, env: Mapping[str, str]) -> Tuple[ProviderConfig, ...]:
    catalog = provider_catalog(env)
    resolved = []
    for raw in names.split(","):
        name = raw.strip().lower()
        if not name:
            continue
        entry = catalog.get(name)
        if entry is None:
            raise ConfigurationError(
                f"Unknown provider '{name}' in WELLNESS_PROVIDERS "
                f"(known: {', '.join(sorted(catalog))})"
            )
        resolved.append(
            ProviderConfig(
                name=name,
                api_key=_blank_to_none(env.get(entry["api_key_env"])),
                **entry,
            )
        )
    return tuple(resolved)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
