from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from config.settings import Settings


logger = logging.getLogger("ayurvidhya.chatlog")

TITLE_MAX_CHARS = 60
CHATLOG_TIMEOUT = 3.0


class ChatLogger:
    """Files each question/reply pair as an issue in a GitHub repository.

    Enabled only when ``GITHUB_TOKEN`` is set. ``log`` never raises and
    waits at most ``CHATLOG_TIMEOUT`` seconds for GitHub.
    """

    def __init__(self, settings: Settings, client: httpx.Client):
        self.token = settings.github_token
        self.url = f"{settings.github_api_url.rstrip('/')}/repos/{settings.chatlog_repo}/issues"
        self.client = client

    @property
    def enabled(self) -> bool:
        return bool(self.token)

    def log(self, question: str, reply: str) -> None:
        if not self.enabled:
            return
        title = " ".join(question.split())
        if len(title) > TITLE_MAX_CHARS:
            title = title[: TITLE_MAX_CHARS - 1] + "…"
        payload = {
            "title": f"Chat: {title}",
            "body": (
                f"**Asked at:** {datetime.now(timezone.utc).isoformat()}\n\n"
                f"**Question**\n\n{question}\n\n"
                f"**Reply**\n\n{reply}"
            ),
            "labels": ["chat-log"],
        }
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            response = self.client.post(
                self.url, json=payload, headers=headers, timeout=CHATLOG_TIMEOUT
            )
            response.raise_for_status()
        except Exception as exc:
            logger.warning("Chat log not recorded: %s", exc)
            return
        logger.info("Chat log recorded (status=%s)", response.status_code)
