"""City ranking API routes."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from core.clients.supabase import SnapshotFetchError, SnapshotUnavailableError, SupabaseClient
from core.config import get_settings
from domain.scoring import (
    CityComparison,
    CityRecord,
    Preferences,
    ScoringOptions,
    ScoringResult,
    TrueCostOfLiving,
    build_scoring_result,
    calculate_true_cost_of_living,
    compare_cities,
    score_cities,
)
from domain.scoring.comparison import find_scores

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scoring"])


class RankingRequest(BaseModel):
    cities: Optional[List[CityRecord]] = None
    preferences: Preferences = Field(default_factory=Preferences)


class CompareRequest(RankingRequest):
    city_ids: List[str] = Field(min_length=2, max_length=2)


class CitySnapshot(BaseModel):
    cities: List[CityRecord]
    count: int


def get_supabase_client() -> SupabaseClient:
    return SupabaseClient()


def get_scoring_options() -> ScoringOptions:
    settings = get_settings()
    return ScoringOptions(
        fallback_spread=settings.fallback_spread,
        precision=settings.score_precision,
    )


async def _load_snapshot(client: SupabaseClient) -> List[CityRecord]:
    try:
        return await client.fetch_city_snapshot()
    except SnapshotUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except SnapshotFetchError as exc:
        logger.error("City snapshot fetch failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc


async def _resolve_cities(
    request: RankingRequest, client: SupabaseClient
) -> List[CityRecord]:
    if request.cities is not None:
        return request.cities
    return await _load_snapshot(client)


@router.post("/rankings", response_model=ScoringResult)
async def rank_cities(
    request: RankingRequest,
    client: SupabaseClient = Depends(get_supabase_client),
    options: ScoringOptions = Depends(get_scoring_options),
) -> ScoringResult:
    cities = await _resolve_cities(request, client)
    return build_scoring_result(score_cities(cities, request.preferences, options))


@router.post("/compare", response_model=CityComparison)
async def compare(
    request: CompareRequest,
    client: SupabaseClient = Depends(get_supabase_client),
    options: ScoringOptions = Depends(get_scoring_options),
) -> CityComparison:
    cities = await _resolve_cities(request, client)
    scores = score_cities(cities, request.preferences, options)
    try:
        first, second = find_scores(scores, request.city_ids)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    return compare_cities(first, second)


@router.get("/cities", response_model=CitySnapshot)
async def list_cities(client: SupabaseClient = Depends(get_supabase_client)) -> CitySnapshot:
    cities = await _load_snapshot(client)
    return CitySnapshot(cities=cities, count=len(cities))


@router.get("/cities/{city_id}/cost-of-living", response_model=TrueCostOfLiving)
async def city_cost_of_living(
    city_id: str, client: SupabaseClient = Depends(get_supabase_client)
) -> TrueCostOfLiving:
    for record in await _load_snapshot(client):
        if record.city.id == city_id:
            return calculate_true_cost_of_living(record.metrics.cost)
    raise HTTPException(status_code=404, detail=f"Unknown city id: {city_id}")
