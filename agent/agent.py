from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from agent.core.prompt import FALLBACK_REPLY, build_messages
from agent.core.remedies import TOPICS, TopicEntry, format_remedy, match_topic
from agent.errors import ConfigurationError, UpstreamError, ValidationError, WellnessError
from agent.providers import Provider, build_providers
from agent.tools import ChatLogger, PlacesLookup
from config.settings import Settings, get_settings


logger = logging.getLogger("ayurvidhya.agent")


class WellnessAgent:
    """Answers one wellness question: topic table first, then the provider chain."""

    def __init__(
        self,
        settings: Settings,
        providers: List[Provider],
        places: PlacesLookup,
        chat_logger: ChatLogger,
        topics: Mapping[str, TopicEntry] = TOPICS,
        client: Optional[httpx.Client] = None,
    ):
        self.settings = settings
        self.providers = providers
        self.places = places
        self.chat_logger = chat_logger
        self.topics = topics
        self._client = client

    def check_configuration(self) -> None:
        missing = self.settings.missing_provider_keys()
        if missing:
            raise ConfigurationError(
                f"Missing {', '.join(dict.fromkeys(missing))} in environment or .env"
            )

    def ask_providers(self, message: str) -> Optional[Dict[str, str]]:
        messages = build_messages(message)
        for provider in self.providers:
            try:
                reply = provider.generate(messages)
            except UpstreamError as exc:
                logger.warning("Provider %s failed, trying next: %s", provider.name, exc)
                continue
            return {"reply": reply, "source": provider.name}
        return None

    def answer(self, message: Optional[str], location: Optional[str] = None) -> Dict[str, str]:
        """Return ``{"reply", "source"}`` for a question.

        Raises ``ValidationError`` for a blank message and ``ConfigurationError``
        when a configured provider has no API key; both happen before any
        network call. Provider failures never escape.
        """
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Missing user message")
        message = message.strip()
        self.check_configuration()

        matched = match_topic(message, self.topics)
        if matched:
            keyword, entry = matched
            logger.info("Answered from topic table: %s", keyword)
            result = {"reply": format_remedy(keyword, entry), "source": "local"}
        else:
            result = self.ask_providers(message)
            if result is None:
                logger.warning("All %s providers failed; sending fallback reply", len(self.providers))
                result = {"reply": FALLBACK_REPLY, "source": "fallback"}
            else:
                logger.info("Answered by provider %s", result["source"])

        result["reply"] = self.places.enrich(message, result["reply"], location)
        return result

    def log_chat(self, question: str, reply: str) -> None:
        self.chat_logger.log(question, reply)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def build_agent(
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> WellnessAgent:
    settings = settings or get_settings()
    if client is None:
        client = httpx.Client(timeout=settings.request_timeout)
    return WellnessAgent(
        settings=settings,
        providers=build_providers(settings, client),
        places=PlacesLookup(settings, client),
        chat_logger=ChatLogger(settings, client),
        client=client,
    )


def run_agent(agent: WellnessAgent, payload: Any) -> Tuple[int, Dict[str, str]]:
    """Run one request through the agent and map the outcome to (status, body)."""
    try:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        result = agent.answer(payload.get("message"), payload.get("location"))
    except WellnessError as exc:
        logger.warning("Request rejected (%s): %s", exc.status_code, exc)
        return exc.status_code, {"error": str(exc)}
    except Exception as exc:
        logger.exception("Chat processing failed: %s", exc)
        return 500, {"error": str(exc)}
    return 200, {"reply": result["reply"]}
