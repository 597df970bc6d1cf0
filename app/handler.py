"""Serverless entry point (Netlify Functions / AWS Lambda proxy events)."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Optional

from agent.agent import WellnessAgent, build_agent, run_agent
from agent.errors import WellnessError
from config.settings import get_settings


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("ayurvidhya")

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

_agent: Optional[WellnessAgent] = None


def _response(status_code: int, body: Optional[Dict[str, str]]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(body, ensure_ascii=False) if body is not None else "",
    }


def _get_agent() -> WellnessAgent:
    global _agent
    if _agent is None:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level.upper())
        _agent = build_agent(settings)
    return _agent


def _decode_body(event: Dict[str, Any]) -> Any:
    raw = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def handle_event(event: Dict[str, Any], agent: WellnessAgent) -> Dict[str, Any]:
    method = (event.get("httpMethod") or "POST").upper()
    if method == "OPTIONS":
        return _response(204, None)
    if method != "POST":
        return _response(405, {"error": "Method not allowed"})

    payload = _decode_body(event)
    status_code, body = run_agent(agent, payload)
    if status_code == 200:
        # Inline: delays the response by at most ChatLogger's own short timeout.
        agent.log_chat(payload["message"], body["reply"])
    return _response(status_code, body)


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    try:
        agent = _get_agent()
    except WellnessError as exc:
        logger.error("Agent could not be built: %s", exc)
        return _response(exc.status_code, {"error": str(exc)})
    except Exception as exc:
        logger.exception("AYUR VIDHYA startup failed: %s", exc)
        return _response(500, {"error": str(exc)})
    try:
        return handle_event(event or {}, agent)
    except Exception as exc:
        logger.exception("AYUR VIDHYA Error: %s", exc)
        return _response(500, {"error": str(exc)})
