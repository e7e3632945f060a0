"""Supabase client helpers for the city snapshot."""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from core.config import get_settings
from domain.scoring.models import City, CityMetrics, CityRecord

logger = logging.getLogger(__name__)

CITY_COLUMNS = (
    "id",
    "name",
    "state",
    "region_id",
    "latitude",
    "longitude",
    "sports_teams",
    "has_international_airport",
    "teleport_slug",
    "walkscore_slug",
)


class SnapshotUnavailableError(RuntimeError):
    """Raised when no Supabase credentials are configured."""


class SnapshotFetchError(RuntimeError):
    """Raised when the snapshot request fails or returns unusable rows."""


def row_to_record(row: Dict[str, Any]) -> CityRecord:
    city = City(**{column: row.get(column) for column in CITY_COLUMNS if row.get(column) is not None})
    metrics = CityMetrics.model_validate(row.get("metrics") or {})
    return CityRecord(city=city, metrics=metrics)


class SupabaseClient:
    """Lightweight async client for Supabase REST endpoints."""

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        key: Optional[str] = None,
        table: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._url = url or settings.supabase_url
        self._key = key or settings.supabase_key
        self._table = table or settings.cities_table
        self._timeout = timeout or settings.request_timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._url and self._key)

    async def fetch(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Any:
        if not self.is_configured:
            raise SnapshotUnavailableError("Supabase credentials not configured")

        headers: Dict[str, str] = {
            "apikey": str(self._key),
            "Authorization": f"Bearer {self._key}",
        }
        url = f"{str(self._url).rstrip('/')}/rest/v1/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise SnapshotFetchError(f"Supabase request failed: {exc}") from exc

        if response.status_code == 200:
            return response.json()
        raise SnapshotFetchError(
            f"Supabase error {response.status_code}: {response.text[:200]}"
        )

    async def fetch_city_snapshot(self) -> List[CityRecord]:
        rows = await self.fetch(self._table, params={"select": "*", "order": "name.asc"})
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise SnapshotFetchError("Supabase returned an unexpected city payload")

        try:
            records = [row_to_record(row) for row in rows]
        except ValidationError as exc:
            raise SnapshotFetchError(f"Invalid city row in snapshot: {exc}") from exc

        logger.info("Loaded %d cities from Supabase table '%s'", len(records), self._table)
        return records
