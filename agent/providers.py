from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx
from langchain_core.messages import BaseMessage

from agent.errors import ConfigurationError, UpstreamError
from config.settings import ProviderConfig, Settings


_ROLES = {"system": "system", "human": "user", "ai": "assistant"}


def _dig(data: Any, path: Sequence[Any]) -> Any:
    current = data
    for key in path:
        try:
            current = current[key]
        except (KeyError, IndexError, TypeError):
            return None
    return current


class Provider:
    """A text-generation service: ``generate(messages) -> str``.

    Subclasses describe the request shape and where the reply text lives in
    the response; transport, status and JSON checks are shared here. Every
    failure surfaces as ``UpstreamError``.
    """

    reply_path: Sequence[Any] = ()

    def __init__(self, config: ProviderConfig, client: httpx.Client):
        self.config = config
        self.client = client

    @property
    def name(self) -> str:
        return self.config.name

    def build_request(self, messages: List[BaseMessage]) -> httpx.Request:
        raise NotImplementedError

    def generate(self, messages: List[BaseMessage]) -> str:
        request = self.build_request(messages)
        try:
            response = self.client.send(request)
        except httpx.HTTPError as exc:
            raise UpstreamError(self.name, f"request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        error = data.get("error") if isinstance(data, dict) else None
        if response.is_error or error:
            detail = error.get("message") if isinstance(error, dict) else error
            raise UpstreamError(
                self.name,
                f"HTTP {response.status_code}" + (f": {detail}" if detail else ""),
            )
        if data is None:
            raise UpstreamError(self.name, "response body is not valid JSON")

        text = _dig(data, self.reply_path)
        if not isinstance(text, str) or not text.strip():
            raise UpstreamError(
                self.name, "no reply text at " + ".".join(str(p) for p in self.reply_path)
            )
        return text.strip()


class ChatCompletionProvider(Provider):
    """OpenAI-compatible ``/chat/completions`` APIs (OpenRouter, OpenAI)."""

    reply_path = ("choices", 0, "message", "content")

    def __init__(
        self,
        config: ProviderConfig,
        client: httpx.Client,
        extra_headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(config, client)
        self.extra_headers = dict(extra_headers or {})

    def build_request(self, messages: List[BaseMessage]) -> httpx.Request:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            **self.extra_headers,
        }
        payload = {
            "model": self.config.model_id,
            "messages": [
                {"role": _ROLES.get(m.type, "user"), "content": m.content} for m in messages
            ],
        }
        return self.client.build_request("POST", self.config.endpoint, headers=headers, json=payload)


class GenerationProvider(Provider):
    """Gemini-style ``generateContent`` APIs keyed by query parameter.

    The system prompt is folded into the single user turn.
    """

    reply_path = ("candidates", 0, "content", "parts", 0, "text")

    def build_request(self, messages: List[BaseMessage]) -> httpx.Request:
        text = "\n\n".join(str(m.content) for m in messages)
        payload = {"contents": [{"role": "user", "parts": [{"text": text}]}]}
        return self.client.build_request(
            "POST",
            self.config.endpoint,
            params={"key": self.config.api_key},
            headers={"Content-Type": "application/json"},
            json=payload,
        )


def build_providers(settings: Settings, client: httpx.Client) -> List[Provider]:
    providers: List[Provider] = []
    for config in settings.providers:
        if config.kind == "generation":
            providers.append(GenerationProvider(config, client))
        elif config.kind == "chat":
            extra = None
            if "openrouter.ai" in config.endpoint:
                extra = {"HTTP-Referer": settings.openrouter_referer, "X-Title": settings.app_title}
            providers.append(ChatCompletionProvider(config, client, extra_headers=extra))
        else:
            raise ConfigurationError(f"Unsupported provider kind '{config.kind}' for {config.name}")
    return providers
