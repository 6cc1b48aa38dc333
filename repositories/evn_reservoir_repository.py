#!/usr/bin/env python3
"""
EVN Reservoir Repository - backend store access for reservoir batches

The backend keeps one batch per day in its database and exposes it over
HTTP. It names fields after the EVN table headers (htl, hdbt, total_qx...),
so records are translated in both directions here.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

import httpx
from pydantic import ValidationError

from config import Settings, get_settings
from models import ReservoirReading, SyncResult
from services.errors import UpstreamError

logger = logging.getLogger(__name__)

TODAY_PATH = "/api/evn-reservoirs/today"
SYNC_PATH = "/api/evn-reservoirs/sync"

# ReservoirReading attribute -> backend field
BACKEND_FIELD_MAP = {
    "name": "name",
    "current_level": "htl",
    "normal_level": "hdbt",
    "dead_level": "hc",
    "inflow": "qve",
    "total_outflow": "total_qx",
    "turbine_outflow": "qxt",
    "surface_outflow": "qxm",
    "deep_gates_open": "ncxs",
    "surface_gates_open": "ncxm",
}

# Only sent back by the backend, never pushed
BACKEND_EXTRA_FIELDS = {
    "basin": "basin",
    "water_percent": "water_percent",
}


def to_backend(reading: ReservoirReading) -> Dict[str, Any]:
    """Sync payload record for one reading"""
    return {backend: getattr(reading, field) for field, backend in BACKEND_FIELD_MAP.items()}


def from_backend(record: Dict[str, Any], default_captured_at: Optional[str] = None) -> ReservoirReading:
    """
    Build a reading from a backend record.

    Raises:
        ValidationError: record has no usable name
    """
    values = {field: record.get(backend) for field, backend in BACKEND_FIELD_MAP.items()}
    values.update(
        {field: record.get(backend) for field, backend in BACKEND_EXTRA_FIELDS.items()}
    )
    values["captured_at"] = (
        record.get("fetched_at")
        or default_captured_at
        or datetime.now(timezone.utc).isoformat()
    )
    return ReservoirReading(**values)


class TodayBatch(NamedTuple):
    readings: List[ReservoirReading]
    fetched_at: Optional[str]


class EVNReservoirRepository:
    """Repository for the backend's daily reservoir cache"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def base_url(self) -> str:
        return self.settings.backend_url

    async def get_today_data(self) -> Optional[TodayBatch]:
        """
        Get today's batch from the backend DB cache.

        Returns:
            TodayBatch, or None when the backend has nothing for today

        Raises:
            UpstreamError: backend unreachable or response malformed
        """
        try:
            async with httpx.AsyncClient(timeout=self.settings.backend_timeout) as client:
                response = await client.get(self.base_url + TODAY_PATH)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Backend today check failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Backend returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise UpstreamError("Backend today response is not an object")

        count = body.get("count")
        has_count = isinstance(count, (int, float)) and not isinstance(count, bool) and count > 0
        if not body.get("cached") or not has_count:
            return None

        fetched_at = body.get("fetched_at")
        readings = []
        for record in body.get("data") or []:
            try:
                readings.append(from_backend(record, fetched_at))
            except (ValidationError, AttributeError) as e:
                logger.warning("[EVN] Skipping invalid backend record %r: %s", record, e)

        if not readings:
            return None
        return TodayBatch(readings=readings, fetched_at=fetched_at)

    async def save_batch(self, readings: Iterable[ReservoirReading]) -> SyncResult:
        """
        Push a scraped batch to the backend.

        Never raises; the outcome is reported in the returned SyncResult.
        """
        payload = [to_backend(r) for r in readings]
        try:
            async with httpx.AsyncClient(timeout=self.settings.backend_timeout) as client:
                response = await client.post(self.base_url + SYNC_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.warning("[EVN] Error syncing to backend: %s", e)
            return SyncResult(success=False, total_received=len(payload), error=str(e))

        if response.is_error:
            logger.warning("[EVN] Backend sync rejected: HTTP %d", response.status_code)
            return SyncResult(
                success=False,
                total_received=len(payload),
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )

        saved_count = None
        try:
            body = response.json()
            if isinstance(body, dict):
                saved_count = body.get("saved_count")
        except ValueError:
            logger.debug("[EVN] Backend sync response was not JSON")

        if isinstance(saved_count, bool) or not isinstance(saved_count, int):
            if saved_count is not None:
                logger.warning("[EVN] Ignoring non-integer saved_count %r from backend", saved_count)
            saved_count = None

        logger.info("[EVN] Synced %s/%d reservoirs to backend", saved_count, len(payload))
        return SyncResult(
            success=True,
            total_received=len(payload),
            status_code=response.status_code,
            saved_count=saved_count,
        )
