from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional

import httpx

from agent.agent import WellnessAgent, build_agent
from config.settings import Settings


def chat_completion(text: str) -> Dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def generation(text: str) -> Dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def request_json(request: httpx.Request) -> Dict:
    return json.loads(request.content.decode("utf-8"))


class RecordingTransport:
    """Mock transport that records every outbound request.

    ``routes`` maps a predicate to a response factory; the first predicate that
    matches a request answers it. Unmatched requests get a 599 so tests fail
    loudly rather than silently.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: List = []

    def add(self, predicate: Callable[[httpx.Request], bool], respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes.append((predicate, respond))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for predicate, respond in self.routes:
            if predicate(request):
                return respond(request)
        return httpx.Response(599, json={"error": {"message": f"unrouted {request.url}"}})

    def hosts(self) -> List[str]:
        return [request.url.host for request in self.requests]


def make_agent(env: Dict[str, str], transport: Optional[RecordingTransport] = None) -> WellnessAgent:
    transport = transport or RecordingTransport()
    client = httpx.Client(transport=httpx.MockTransport(transport), timeout=1.0)
    return build_agent(Settings.from_env(env), client=client)


def by_model(model: str) -> Callable[[httpx.Request], bool]:
    def predicate(request: httpx.Request) -> bool:
        return request.url.host == "openrouter.ai" and request_json(request).get("model") == model

    return predicate
