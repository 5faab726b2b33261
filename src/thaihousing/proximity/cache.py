"""In-memory store for proximity results and nearby-place data."""

from __future__ import annotations

import time
from typing import Callable

from thaihousing.proximity.models import NearbyPlace, ProximityResult


class ProximityCache:
    """Keyed by property id.

    Holds final results, partial scores for runs still in progress, the
    set of in-progress ids, and the nearby places each category query
    returned (with the radius actually used).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._results: dict[str, tuple[float, ProximityResult]] = {}
        self._partial: dict[str, int] = {}
        self._in_progress: set[str] = set()
        self._places: dict[str, dict[str, tuple[int, list[NearbyPlace]]]] = {}

    # -- results -------------------------------------------------------------

    def get_result(self, property_id: str) -> ProximityResult | None:
        entry = self._results.get(property_id)
        return entry[1] if entry else None

    def get_score(self, property_id: str) -> int | None:
        result = self.get_result(property_id)
        return result.score if result else None

    def set_result(self, result: ProximityResult) -> None:
        self._results[result.property_id] = (self._clock(), result)
        self._partial.pop(result.property_id, None)

    def scores(self) -> dict[str, int]:
        return {pid: result.score for pid, (_ts, result) in self._results.items()}

    # -- progress ------------------------------------------------------------

    def start(self, property_id: str) -> bool:
        """Mark a run as started; ``False`` if one is already in progress."""
        if property_id in self._in_progress:
            return False
        self._in_progress.add(property_id)
        return True

    def finish(self, property_id: str) -> None:
        self._in_progress.discard(property_id)

    def is_in_progress(self, property_id: str) -> bool:
        return property_id in self._in_progress

    def set_partial(self, property_id: str, score: int) -> None:
        self._partial[property_id] = score

    def get_partial(self, property_id: str) -> int | None:
        return self._partial.get(property_id)

    def partial_scores(self) -> dict[str, int]:
        return dict(self._partial)

    # -- nearby places -------------------------------------------------------

    def set_places(
        self,
        property_id: str,
        category: str,
        places: list[NearbyPlace],
        radius_m: int,
    ) -> None:
        self._places.setdefault(property_id, {})[category] = (radius_m, places)

    def get_places(self, property_id: str) -> dict[str, tuple[int, list[NearbyPlace]]]:
        return dict(self._places.get(property_id, {}))

    def discard_places(self, property_id: str) -> None:
        self._places.pop(property_id, None)

    # -- maintenance ---------------------------------------------------------

    def clear_expired(self, max_age_seconds: float) -> int:
        """Drop results (and their places) older than *max_age_seconds*."""
        now = self._clock()
        expired = [
            pid for pid, (stored_at, _result) in self._results.items()
            if now - stored_at >= max_age_seconds
        ]
        for pid in expired:
            del self._results[pid]
            self._places.pop(pid, None)
        return len(expired)

    def clear(self) -> None:
        self._results.clear()
        self._partial.clear()
        self._places.clear()

    def stats(self) -> dict[str, int]:
        return {
            "scores": len(self._results),
            "partial": len(self._partial),
            "in_progress": len(self._in_progress),
            "places": len(self._places),
        }
