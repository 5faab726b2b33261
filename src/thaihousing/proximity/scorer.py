"""Proximity scorer: counts nearby services per category and weights them.

Each category is one Overpass request, issued through the shared
:class:`RateLimitedQueue` so requests from all scoring runs are spaced out.
A 429 is retried once after a back-off; a 504 is retried once with a
smaller radius and the count scaled back up. Any other failure counts the
category as empty.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from thaihousing.core.config import OverpassConfig, ProximityConfig
from thaihousing.housing.models import Property
from thaihousing.housing.normalize import is_valid_coordinate
from thaihousing.proximity.cache import ProximityCache
from thaihousing.proximity.models import (
    CATEGORY_RULES,
    CategoryResult,
    CategoryRule,
    ProximityResult,
)
from thaihousing.proximity.overpass import (
    OverpassClient,
    OverpassError,
    OverpassRateLimited,
    OverpassTimeout,
)
from thaihousing.proximity.queries import build_query
from thaihousing.proximity.queue import RateLimitedQueue
from thaihousing.proximity.scoring import (
    category_score,
    distance_score,
    round_half_up,
    to_places,
    weighted_score,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, bool], Any]


class ProximityScorer:
    """Computes and caches proximity scores for properties."""

    def __init__(
        self,
        client: OverpassClient,
        cache: ProximityCache | None = None,
        queue: RateLimitedQueue | None = None,
        config: ProximityConfig | None = None,
        overpass_config: OverpassConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or ProximityConfig()
        self._client = client
        self._cache = cache or ProximityCache()
        self._queue = queue or RateLimitedQueue(
            self.config.concurrency,
            max_per_window=self.config.requests_per_minute,
            sleep=sleep,
        )
        self._query_timeout = (overpass_config or client.config).query_timeout
        self._sleep = sleep

    @property
    def cache(self) -> ProximityCache:
        return self._cache

    @property
    def queue(self) -> RateLimitedQueue:
        return self._queue

    # -- public API ----------------------------------------------------------

    async def score(
        self,
        property_id: str,
        latitude: float,
        longitude: float,
        on_progress: ProgressCallback | None = None,
    ) -> int | None:
        """Return the property's score, computing it if needed.

        Returns the cached score without any request when one exists, and
        ``None`` when a run for the same property is already in progress.
        """
        result = await self.score_detailed(property_id, latitude, longitude, on_progress)
        return result.score if result else None

    async def score_detailed(
        self,
        property_id: str,
        latitude: float,
        longitude: float,
        on_progress: ProgressCallback | None = None,
    ) -> ProximityResult | None:
        existing = self._cache.get_result(property_id)
        if existing is not None:
            return existing
        if not self._cache.start(property_id):
            logger.debug("Proximity score for %s already in progress", property_id)
            return None

        try:
            if not is_valid_coordinate(latitude, longitude):
                result = ProximityResult(property_id=property_id, score=0, failed=True)
            else:
                result = await self._compute(property_id, latitude, longitude, on_progress)
        except Exception:
            logger.exception("Proximity scoring failed for %s", property_id)
            self._cache.discard_places(property_id)
            result = ProximityResult(property_id=property_id, score=0, failed=True)
        finally:
            self._cache.finish(property_id)

        self._cache.set_result(result)
        return result

    async def score_many(
        self,
        properties: Iterable[Property],
        limit: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict[str, int]:
        """Score up to *limit* properties one after another.

        Properties already being scored elsewhere are left out of the
        returned mapping.
        """
        limit = self.config.batch_limit if limit is None else limit
        scores: dict[str, int] = {}
        for index, prop in enumerate(list(properties)[:limit]):
            score = await self.score(prop.id, prop.latitude, prop.longitude, on_progress)
            if score is not None:
                scores[prop.id] = score
                logger.info("Proximity score %d/%d for %s: %d", index + 1, limit, prop.id, score)
        return scores

    # -- internals -----------------------------------------------------------

    async def _compute(
        self,
        property_id: str,
        latitude: float,
        longitude: float,
        on_progress: ProgressCallback | None,
    ) -> ProximityResult:
        categories: dict[str, CategoryResult] = {}
        rules = list(CATEGORY_RULES.values())

        for rule in rules:
            outcome = await self._queue.submit(
                self._fetch_category, rule, latitude, longitude,
                delay_after=self._pacing_delay,
            )
            self._cache.set_places(property_id, rule.category, outcome.places, outcome.radius_m)
            categories[rule.category] = outcome

            if len(categories) % 2 == 0 and len(categories) < len(rules):
                partial = weighted_score({name: r.score for name, r in categories.items()})
                self._cache.set_partial(property_id, partial)
                if on_progress is not None:
                    on_progress(property_id, partial, False)

        score = weighted_score({name: r.score for name, r in categories.items()})
        if on_progress is not None:
            on_progress(property_id, score, True)
        return ProximityResult(property_id=property_id, score=score, categories=categories)

    async def _fetch_category(
        self,
        rule: CategoryRule,
        latitude: float,
        longitude: float,
    ) -> CategoryResult:
        radius = rule.radius_m
        try:
            elements = await self._query(rule, latitude, longitude, radius)
            count = len(elements)
        except OverpassRateLimited:
            logger.warning(
                "Overpass rate limited on %s, retrying in %.1fs",
                rule.category, self.config.rate_limit_backoff_seconds,
            )
            await self._sleep(self.config.rate_limit_backoff_seconds)
            try:
                elements = await self._query(rule, latitude, longitude, radius)
            except OverpassError as exc:
                return self._empty(rule, radius, exc)
            count = len(elements)
        except OverpassTimeout:
            radius = round_half_up(rule.radius_m * self.config.timeout_radius_factor)
            logger.warning("Overpass timeout on %s, retrying with radius %dm", rule.category, radius)
            try:
                elements = await self._query(rule, latitude, longitude, radius)
            except OverpassError as exc:
                return self._empty(rule, radius, exc)
            count = round_half_up(len(elements) * self.config.timeout_count_factor)
        except OverpassError as exc:
            return self._empty(rule, radius, exc)

        places = to_places(elements, latitude, longitude, fallback_name=rule.name_th)
        return CategoryResult(
            category=rule.category,
            count=count,
            score=category_score(count, rule),
            radius_m=radius,
            distance_score=distance_score(places),
            places=places,
        )

    async def _query(
        self,
        rule: CategoryRule,
        latitude: float,
        longitude: float,
        radius: int,
    ) -> list[dict[str, Any]]:
        query = build_query(rule.category, latitude, longitude, radius, self._query_timeout)
        return await self._client.fetch(query)

    def _empty(self, rule: CategoryRule, radius: int, exc: Exception) -> CategoryResult:
        logger.warning("Overpass query for %s failed: %s", rule.category, exc)
        return CategoryResult(category=rule.category, radius_m=radius, error=str(exc))

    def _pacing_delay(self, outcome: CategoryResult | None) -> float:
        """Seconds to wait before the next request; denser areas wait longer."""
        count = outcome.count if outcome is not None else 0
        if count < 10:
            delay_ms = self.config.min_delay_ms
        elif count < 30:
            delay_ms = self.config.mid_delay_ms
        else:
            delay_ms = self.config.max_delay_ms
        return delay_ms / 1000
