from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from config.settings import Settings


logger = logging.getLogger("ayurvidhya.places")

MAX_RESULTS = 5
MAPS_PLACE_URL = "https://www.google.com/maps/place/?q=place_id:{place_id}"

NEARBY_PATTERN = re.compile(
    r"\b(near\s*me|near\s*by|nearby|around\s*me)\b"
    r"|\b(find|locate|where)\b.*\b(clinic|centre|center|doctor|practitioner|vaidya"
    r"|spa|hospital|pharmacy|store|shop)s?\b",
    re.IGNORECASE,
)

_LAT_LNG = re.compile(r"^\s*-?\d+(\.\d+)?\s*,\s*-?\d+(\.\d+)?\s*$")


def wants_nearby_services(message: str) -> bool:
    return bool(NEARBY_PATTERN.search(message or ""))


def _simplify_results(raw: Dict[str, Any]) -> List[Dict[str, Optional[str]]]:
    results = raw.get("results") or []
    simplified = []
    for item in results[:MAX_RESULTS]:
        simplified.append(
            {
                "name": item.get("name"),
                "formatted_address": item.get("formatted_address"),
                "place_id": item.get("place_id"),
            }
        )
    return simplified


def format_places(places: List[Dict[str, Optional[str]]]) -> str:
    lines = ["📍 **Nearby Ayurvedic services:**"]
    for index, place in enumerate(places, start=1):
        line = f"{index}. {place.get('name') or 'Unnamed'}"
        if place.get("formatted_address"):
            line += f" ({place['formatted_address']})"
        if place.get("place_id"):
            line += f" {MAPS_PLACE_URL.format(place_id=place['place_id'])}"
        lines.append(line)
    return "\n".join(lines)


class PlacesLookup:
    """Appends nearby Ayurvedic services to a reply when the user asks for them.

    Runs after the main reply exists and never raises: on any failure the
    reply comes back untouched.
    """

    def __init__(self, settings: Settings, client: httpx.Client):
        self.api_key = settings.places_api_key
        self.endpoint = settings.places_endpoint
        self.default_location = settings.default_search_location
        self.radius = settings.places_radius
        self.client = client

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def search(self, location: Optional[str] = None) -> List[Dict[str, Optional[str]]]:
        query = "ayurvedic clinic"
        params: Dict[str, Any] = {"query": query, "radius": self.radius, "key": self.api_key}
        if location and not _LAT_LNG.match(location):
            # Free-text places go into the query; the API only takes lat,lng here.
            params["query"] = f"{query} in {location.strip()}"
            params["location"] = self.default_location
        else:
            params["location"] = (location or self.default_location).replace(" ", "")

        try:
            response = self.client.get(self.endpoint, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RuntimeError(f"Places search API call failed: {exc}") from exc

        status = data.get("status")
        if status not in (None, "OK", "ZERO_RESULTS"):
            raise RuntimeError(f"Places search returned status {status}: {data.get('error_message', '')}")
        return _simplify_results(data)

    def enrich(self, message: str, reply: str, location: Optional[str] = None) -> str:
        if not self.enabled or not wants_nearby_services(message):
            return reply
        try:
            places = self.search(location)
        except Exception as exc:
            logger.warning("Nearby lookup skipped: %s", exc)
            return reply
        logger.info("Nearby lookup returned %s places", len(places))
        if not places:
            return reply
        return f"{reply}\n\n{format_places(places)}"
