"""FastAPI router for proximity scores and cached nearby places."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from thaihousing.maps.styles import PLACE_CATEGORY_COLORS
from thaihousing.proximity.models import CATEGORY_RULES
from thaihousing.proximity.scorer import ProximityScorer
from thaihousing.proximity.scoring import score_statistics

router = APIRouter()


class ScoreRequest(BaseModel):
    property_id: str
    latitude: float
    longitude: float


class BatchScoreRequest(BaseModel):
    property_ids: list[str] = Field(default_factory=list)
    limit: int | None = None


def _scorer(request: Request) -> ProximityScorer:
    scorer = getattr(request.app.state, "proximity_scorer", None)
    if scorer is None:
        raise HTTPException(status_code=503, detail="Proximity scoring not available")
    return scorer


@router.get("/api/proximity/categories")
async def list_categories() -> list[dict[str, Any]]:
    return [rule.model_dump() for rule in CATEGORY_RULES.values()]


@router.post("/api/proximity/score")
async def score_property(body: ScoreRequest, request: Request) -> dict[str, Any]:
    """Score one property; ``in_progress`` is true when another run owns it."""
    scorer = _scorer(request)
    result = await scorer.score_detailed(body.property_id, body.latitude, body.longitude)
    if result is None:
        return {
            "property_id": body.property_id,
            "score": scorer.cache.get_partial(body.property_id),
            "in_progress": True,
        }
    return {**result.model_dump(), "in_progress": False}


@router.post("/api/proximity/batch")
async def score_batch(body: BatchScoreRequest, request: Request) -> dict[str, int]:
    """Score loaded apartments one after another (all of them if no ids given)."""
    scorer = _scorer(request)
    properties = await request.app.state.apartment_service.list_properties()
    if body.property_ids:
        wanted = set(body.property_ids)
        properties = [p for p in properties if p.id in wanted]
    return await scorer.score_many(properties, limit=body.limit)


@router.get("/api/proximity/scores")
async def list_scores(request: Request) -> dict[str, Any]:
    scorer = _scorer(request)
    return {
        "scores": scorer.cache.scores(),
        "partial": scorer.cache.partial_scores(),
    }


@router.get("/api/proximity/scores/{property_id}")
async def get_score(property_id: str, request: Request) -> dict[str, Any]:
    scorer = _scorer(request)
    result = scorer.cache.get_result(property_id)
    if result is not None:
        return {**result.model_dump(), "in_progress": False}
    if scorer.cache.is_in_progress(property_id):
        return {
            "property_id": property_id,
            "score": scorer.cache.get_partial(property_id),
            "in_progress": True,
        }
    raise HTTPException(status_code=404, detail=f"No proximity score for {property_id!r}")


@router.get("/api/proximity/nearby/{property_id}")
async def nearby_places(property_id: str, request: Request) -> dict[str, Any]:
    """Places found while scoring, as one coloured point layer per category."""
    scorer = _scorer(request)
    cached = scorer.cache.get_places(property_id)
    if not cached:
        raise HTTPException(status_code=404, detail=f"No nearby places cached for {property_id!r}")

    layers: dict[str, Any] = {}
    for category, (radius, places) in cached.items():
        rule = CATEGORY_RULES[category]
        layers[category] = {
            "name": rule.name_th,
            "icon": rule.icon,
            "radius_m": radius,
            "color": PLACE_CATEGORY_COLORS.get(category),
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [p.longitude, p.latitude]},
                    "properties": p.model_dump(exclude={"latitude", "longitude"}),
                }
                for p in places
            ],
        }
    return {"property_id": property_id, "categories": layers}


@router.get("/api/proximity/stats")
async def proximity_stats(request: Request) -> dict[str, Any]:
    scorer = _scorer(request)
    return {
        "scores": score_statistics(scorer.cache.scores().values()).model_dump(),
        "cache": scorer.cache.stats(),
        "queue": scorer.queue.stats(),
    }


@router.post("/api/proximity/cache/expire")
async def expire_cache(request: Request) -> dict[str, int]:
    scorer = _scorer(request)
    removed = scorer.cache.clear_expired(scorer.config.cache_ttl_seconds)
    return {"removed": removed}
