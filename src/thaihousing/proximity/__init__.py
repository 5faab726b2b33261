"""Proximity-to-services scoring over the Overpass API."""

from thaihousing.proximity.cache import ProximityCache
from thaihousing.proximity.models import CATEGORY_RULES, ProximityCategory, ProximityResult
from thaihousing.proximity.overpass import OverpassClient, OverpassError
from thaihousing.proximity.queue import RateLimitedQueue
from thaihousing.proximity.scorer import ProximityScorer

__all__ = [
    "CATEGORY_RULES",
    "OverpassClient",
    "OverpassError",
    "ProximityCache",
    "ProximityCategory",
    "ProximityResult",
    "ProximityScorer",
    "RateLimitedQueue",
]
