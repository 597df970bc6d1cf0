from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from agent.core.prompt import DISCLAIMER


class TopicEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    herbs: Tuple[str, ...]
    yoga: Tuple[str, ...]
    diet: str


# Declaration order is the match order.
TOPICS: Mapping[str, TopicEntry] = MappingProxyType(
    {
        "stress": TopicEntry(
            herbs=("Ashwagandha", "Brahmi", "Jatamansi"),
            yoga=("Shavasana", "Nadi Shodhana", "Viparita Karani"),
            diet=(
                "Avoid caffeine and spicy food. Drink warm milk with nutmeg. "
                "Include fruits like banana and dates."
            ),
        ),
        "acidity": TopicEntry(
            herbs=("Amla", "Licorice (Yashtimadhu)", "Triphala"),
            yoga=("Vajrasana", "Pavanamuktasana"),
            diet="Avoid fried or spicy food. Eat small light meals. Drink warm water with honey.",
        ),
        "cold": TopicEntry(
            herbs=("Tulsi", "Ginger", "Turmeric", "Black Pepper"),
            yoga=("Anulom Vilom", "Kapalbhati"),
            diet="Avoid cold drinks. Drink herbal tea with ginger and tulsi.",
        ),
        "joint pain": TopicEntry(
            herbs=("Guggul", "Turmeric", "Ashwagandha"),
            yoga=("Vrikshasana", "Trikonasana", "Ardha Matsyendrasana"),
            diet="Include warm milk with turmeric. Avoid sour and cold foods.",
        ),
    }
)


def match_topic(
    message: str, topics: Mapping[str, TopicEntry] = TOPICS
) -> Optional[Tuple[str, TopicEntry]]:
    query = message.lower()
    for keyword, entry in topics.items():
        if keyword.lower() in query:
            return keyword, entry
    return None


def format_remedy(keyword: str, entry: TopicEntry) -> str:
    return (
        f"🪷 **Ayurvedic Tips for {keyword.upper()}**\n"
        f"🌿 **Herbs:** {', '.join(entry.herbs)}\n"
        f"🧘 **Yoga:** {', '.join(entry.yoga)}\n"
        f"🥗 **Diet:** {entry.diet}\n\n"
        f"✨ Stay balanced and peaceful. ({DISCLAIMER})"
    )
