from .chat_log import ChatLogger
from .nearby_search import PlacesLookup, wants_nearby_services

__all__ = ["ChatLogger", "PlacesLookup", "wants_nearby_services"]
