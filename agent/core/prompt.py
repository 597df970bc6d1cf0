from __future__ import annotations

from typing import List

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate


DISCLAIMER = "This is informational only — not medical advice."

SYSTEM_PROMPT = (
    "You are AYUR VIDHYA 🌿, a calm, well-informed Ayurvedic wellness assistant.\n"
    "Answer with Ayurveda-based insights, herbal remedies, diet tips, and yoga suggestions.\n"
    "Respond compassionately and concisely. Never diagnose or prescribe; for severe or "
    "persistent symptoms, suggest seeing a qualified practitioner. Always add:\n"
    f'"{DISCLAIMER}"'
)

FALLBACK_REPLY = "⚠️ I’m unable to reach the Ayurvedic servers right now. Please try again later."

_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_prompt}"),
        ("human", "{question}"),
    ]
)


def build_messages(question: str, system_prompt: str = SYSTEM_PROMPT) -> List[BaseMessage]:
    """Return the [system, human] message pair sent to every provider."""
    return _PROMPT.format_messages(system_prompt=system_prompt, question=question)
