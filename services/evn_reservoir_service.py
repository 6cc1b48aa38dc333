#!/usr/bin/env python3
"""
EVN Reservoir Service - tiered access to hydropower reservoir data

Lookup order for every request:
1. Backend DB cache for today (1 day)
2. In-process cache (30 minutes)
3. Fresh scrape of the EVN page, pushed back to the backend
4. Stale in-process cache if the scrape fails
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from config import Settings, get_settings
from data import HIGH_WATER_PERCENT, RESERVOIR_BASINS, UNKNOWN_BASIN
from models import ReservoirReading, ReservoirResponse, ReservoirSummary
from repositories.evn_reservoir_repository import EVNReservoirRepository
from services.errors import ReservoirDataUnavailable, ScrapeError, UpstreamError
from services.page_fetcher import PageFetcher, build_page_fetcher
from services.record_normalizer import normalize_rows
from services.reservoir_cache import CacheEntry, ReservoirCache

logger = logging.getLogger(__name__)

SOURCE_DB = "DB cache"
SOURCE_MEMORY = "memory cache"
SOURCE_STALE = "stale cache"
STALE_ERROR = "Using cached data due to scraping error"


def water_percent(reading: ReservoirReading) -> Optional[float]:
    """Current level as % of normal level"""
    if reading.current_level is None or not reading.normal_level:
        return None
    return round(reading.current_level / reading.normal_level * 100, 1)


def enrich(reading: ReservoirReading) -> ReservoirReading:
    """Fill basin and water_percent unless the record already has them"""
    updates = {}
    if not reading.basin:
        updates["basin"] = RESERVOIR_BASINS.get(reading.name, UNKNOWN_BASIN)
    if reading.water_percent is None:
        updates["water_percent"] = water_percent(reading)
    return reading.model_copy(update=updates) if updates else reading


class EVNReservoirService:
    """Service for EVN reservoir data operations"""

    def __init__(
        self,
        cache: Optional[ReservoirCache] = None,
        fetcher: Optional[PageFetcher] = None,
        repo: Optional[EVNReservoirRepository] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else ReservoirCache()
        self.fetcher = fetcher or build_page_fetcher(self.settings)
        self.repo = repo or EVNReservoirRepository(self.settings)

    async def get_reservoir_data(
        self,
        force_refresh: bool = False,
        bypass_db: Optional[bool] = None,
    ) -> ReservoirResponse:
        """
        Get the current reservoir batch.

        Args:
            force_refresh: Drop the in-process cache first
            bypass_db: With force_refresh, also skip the backend DB cache
                (default from FORCE_REFRESH_BYPASS_DB)

        Raises:
            ReservoirDataUnavailable: scrape failed and nothing is cached
        """
        skip_db = False
        if force_refresh:
            self.cache.clear()
            skip_db = self.settings.force_refresh_bypass_db if bypass_db is None else bypass_db

        if not skip_db:
            response = await self._from_db_cache()
            if response is not None:
                return response

        entry = self.cache.get()
        if entry is not None and entry.is_fresh(self.settings.cache_ttl_seconds):
            logger.info("[EVN] Using memory cache - %d reservoirs", len(entry.readings))
            return self._cached_response(entry, SOURCE_MEMORY)

        logger.info("[EVN] Scraping fresh data...")
        try:
            readings = await self.scrape()
        except Exception as e:
            logger.exception("[EVN] Error scraping EVN data")
            return self._stale_response(e)

        entry = self.cache.set(readings)
        sync_result = await self.repo.save_batch(entry.readings)

        return ReservoirResponse(
            data=list(entry.readings),
            cached=False,
            count=len(entry.readings),
            source=self.settings.evn_url,
            scraped_at=entry.cached_at.isoformat(),
            sync_result=sync_result,
        )

    async def scrape(self) -> List[ReservoirReading]:
        """
        Scrape and normalize one batch.

        Raises:
            ScrapeError: page could not be loaded or held no reservoir rows
        """
        rows = await self.fetcher.fetch_raw_rows()
        readings = normalize_rows(rows, datetime.now(timezone.utc).isoformat())
        if not readings:
            raise ScrapeError("No reservoir rows parsed from EVN page")
        logger.info("[EVN] Scraped %d reservoirs", len(readings))
        return [enrich(r) for r in readings]

    async def _from_db_cache(self) -> Optional[ReservoirResponse]:
        try:
            batch = await self.repo.get_today_data()
        except UpstreamError as e:
            logger.warning("[EVN] Backend not available, will scrape from EVN: %s", e)
            return None

        if batch is None:
            return None

        readings = [enrich(r) for r in batch.readings]
        self.cache.set(readings)
        logger.info("[EVN] Using DB cache - %d reservoirs", len(readings))
        return ReservoirResponse(
            data=readings,
            cached=True,
            from_db=True,
            count=len(readings),
            source=SOURCE_DB,
            cached_at=batch.fetched_at,
        )

    def _cached_response(self, entry: CacheEntry, source: str, error: Optional[str] = None) -> ReservoirResponse:
        return ReservoirResponse(
            data=list(entry.readings),
            cached=True,
            count=len(entry.readings),
            source=source,
            cached_at=entry.cached_at.isoformat(),
            error=error,
        )

    def _stale_response(self, cause: Exception) -> ReservoirResponse:
        entry = self.cache.get()
        if entry is None or not entry.readings:
            raise ReservoirDataUnavailable(str(cause) or type(cause).__name__) from cause

        logger.warning(
            "[EVN] Serving stale cache (%d reservoirs, %.0fs old)",
            len(entry.readings),
            entry.age_seconds(),
        )
        return self._cached_response(entry, SOURCE_STALE, error=STALE_ERROR)

    # =====================================================
    # Views over the current batch
    # =====================================================

    async def get_by_basin(self, basin: str) -> List[ReservoirReading]:
        """Get reservoirs for a specific basin"""
        response = await self.get_reservoir_data()
        return [r for r in response.data if (r.basin or "").upper() == basin.upper()]

    async def get_by_name(self, name: str) -> Optional[ReservoirReading]:
        response = await self.get_reservoir_data()
        return next((r for r in response.data if r.name == name), None)

    async def get_summary(self) -> ReservoirSummary:
        """Get summary statistics"""
        response = await self.get_reservoir_data()
        readings = response.data

        by_basin = {}
        for r in readings:
            basin = r.basin or UNKNOWN_BASIN
            by_basin[basin] = by_basin.get(basin, 0) + 1

        return ReservoirSummary(
            total=len(readings),
            by_basin=by_basin,
            high_water_count=sum(1 for r in readings if (r.water_percent or 0) >= HIGH_WATER_PERCENT),
            spillway_open_count=sum(1 for r in readings if r.has_spillway_open),
            last_updated=response.scraped_at or response.cached_at,
        )
