from datetime import datetime, timedelta, timezone

import httpx
import pytest

from repositories.evn_reservoir_repository import EVNReservoirRepository, TodayBatch
from services.errors import ReservoirDataUnavailable, ScrapeError, UpstreamError
from services.evn_reservoir_service import (
    SOURCE_DB,
    SOURCE_MEMORY,
    SOURCE_STALE,
    EVNReservoirService,
    enrich,
    water_percent,
)
from tests.fakes import (
    EVN_TEST_URL,
    TOTAL_ROW,
    FakeFetcher,
    FakeRepository,
    make_reading,
    make_settings,
)


def _stale(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


async def test_db_cache_hit_skips_scrape(cache, fetcher, settings) -> None:
    repo = FakeRepository(
        today=TodayBatch(readings=[make_reading("Sơn La")], fetched_at="2026-10-18T07:00:00")
    )
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)

    response = await service.get_reservoir_data()

    assert response.source == SOURCE_DB
    assert response.cached is True
    assert response.from_db is True
    assert response.cached_at == "2026-10-18T07:00:00"
    assert response.count == 1
    assert fetcher.calls == 0
    assert [r.name for r in cache.get().readings] == ["Sơn La"]


async def test_fresh_memory_cache_skips_scrape(service, cache, fetcher) -> None:
    cache.set([make_reading("Lai Châu")], cached_at=_stale(10))

    response = await service.get_reservoir_data()

    assert response.source == SOURCE_MEMORY
    assert response.cached is True
    assert response.from_db is None
    assert [r.name for r in response.data] == ["Lai Châu"]
    assert fetcher.calls == 0


async def test_both_miss_scrapes_once(service, cache, fetcher, repo) -> None:
    response = await service.get_reservoir_data()

    assert fetcher.calls == 1
    assert response.cached is False
    assert response.source == EVN_TEST_URL
    assert response.scraped_at is not None
    assert [r.name for r in response.data] == ["Hòa Bình", "Sơn La"]
    assert cache.get().readings == tuple(response.data)
    assert len(repo.saved) == 1
    assert response.sync_result.success is True
    assert response.sync_result.saved_count == 2


async def test_expired_memory_cache_triggers_scrape(service, cache, fetcher) -> None:
    cache.set([make_reading("Lai Châu")], cached_at=_stale(31))

    response = await service.get_reservoir_data()

    assert fetcher.calls == 1
    assert response.cached is False


async def test_upstream_unreachable_is_a_miss(cache, fetcher, settings) -> None:
    repo = FakeRepository(today_error=UpstreamError("connection refused"))
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)

    response = await service.get_reservoir_data()

    assert response.cached is False
    assert fetcher.calls == 1


async def test_scrape_failure_serves_stale_cache(cache, repo, settings) -> None:
    fetcher = FakeFetcher(error=ScrapeError("Timeout 30000ms exceeded"))
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)
    cache.set([make_reading("Lai Châu")], cached_at=_stale(600))

    response = await service.get_reservoir_data()

    assert response.source == SOURCE_STALE
    assert response.cached is True
    assert response.error
    assert [r.name for r in response.data] == ["Lai Châu"]
    assert repo.saved == []


async def test_unexpected_scrape_error_also_falls_back(cache, repo, settings) -> None:
    fetcher = FakeFetcher(error=RuntimeError("browser crashed"))
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)
    cache.set([make_reading()], cached_at=_stale(45))

    response = await service.get_reservoir_data()

    assert response.source == SOURCE_STALE


async def test_scrape_failure_without_cache_raises(cache, repo, settings) -> None:
    fetcher = FakeFetcher(error=ScrapeError("No <table> found on EVN page"))
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)

    with pytest.raises(ReservoirDataUnavailable, match="No <table>"):
        await service.get_reservoir_data()


async def test_empty_scrape_is_a_failure(cache, repo, settings) -> None:
    fetcher = FakeFetcher(rows=[TOTAL_ROW])
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)
    cache.set([make_reading("Lai Châu")], cached_at=_stale(60))

    response = await service.get_reservoir_data()

    assert response.source == SOURCE_STALE
    assert [r.name for r in cache.get().readings] == ["Lai Châu"]


async def test_force_refresh_clears_fresh_memory_cache(service, cache, fetcher, repo) -> None:
    cache.set([make_reading("Lai Châu")], cached_at=_stale(1))

    response = await service.get_reservoir_data(force_refresh=True)

    assert fetcher.calls == 1
    assert repo.today_calls == 1
    assert response.cached is False
    assert "Lai Châu" not in [r.name for r in response.data]


async def test_force_refresh_still_honours_db_cache(cache, fetcher, settings) -> None:
    repo = FakeRepository(today=TodayBatch(readings=[make_reading("Sơn La")], fetched_at=None))
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)

    response = await service.get_reservoir_data(force_refresh=True)

    assert response.source == SOURCE_DB
    assert fetcher.calls == 0


async def test_force_refresh_can_bypass_db_cache(cache, fetcher) -> None:
    repo = FakeRepository(today=TodayBatch(readings=[make_reading("Sơn La")], fetched_at=None))
    settings = make_settings(force_refresh_bypass_db=True)
    service = EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)

    response = await service.get_reservoir_data(force_refresh=True)

    assert repo.today_calls == 0
    assert fetcher.calls == 1
    assert response.cached is False


async def test_bypass_db_argument_overrides_setting(service, fetcher, repo) -> None:
    repo.today = TodayBatch(readings=[make_reading("Sơn La")], fetched_at=None)

    await service.get_reservoir_data(force_refresh=True, bypass_db=True)

    assert repo.today_calls == 0
    assert fetcher.calls == 1


async def test_bypass_db_is_ignored_without_force_refresh(service, repo) -> None:
    repo.today = TodayBatch(readings=[make_reading("Sơn La")], fetched_at=None)

    response = await service.get_reservoir_data(bypass_db=True)

    assert response.source == SOURCE_DB


def test_water_percent() -> None:
    assert water_percent(make_reading(current_level=117.5, normal_level=120.0)) == 97.9
    assert water_percent(make_reading(current_level=117.5)) is None
    assert water_percent(make_reading(current_level=117.5, normal_level=0.0)) is None


def test_enrich_fills_basin_and_percent() -> None:
    reading = enrich(make_reading("Hòa Bình", current_level=60.0, normal_level=120.0))

    assert reading.basin == "HONG"
    assert reading.water_percent == 50.0
    assert enrich(make_reading("Hồ Mới")).basin == "UNKNOWN"


def test_enrich_keeps_backend_values() -> None:
    reading = enrich(make_reading("Hòa Bình", basin="CENTRAL", water_percent=12.0, current_level=60.0, normal_level=120.0))

    assert reading.basin == "CENTRAL"
    assert reading.water_percent == 12.0


async def test_summary_counts(service, cache) -> None:
    cache.set(
        [
            make_reading("Hòa Bình", basin="HONG", water_percent=97.9, deep_gates_open=2.0),
            make_reading("Sơn La", basin="HONG", water_percent=50.0),
            make_reading("Trị An", basin="DONGNAI", water_percent=91.0, surface_gates_open=0.0),
        ]
    )

    summary = await service.get_summary()

    assert summary.total == 3
    assert summary.by_basin == {"HONG": 2, "DONGNAI": 1}
    assert summary.high_water_count == 2
    assert summary.spillway_open_count == 1
    assert summary.last_updated is not None


async def test_lookup_by_name_and_basin(service, cache) -> None:
    cache.set([make_reading("Hòa Bình", basin="HONG"), make_reading("Trị An", basin="DONGNAI")])

    assert (await service.get_by_name("Trị An")).basin == "DONGNAI"
    assert await service.get_by_name("Không có") is None
    assert [r.name for r in await service.get_by_basin("hong")] == ["Hòa Bình"]


async def test_scrape_survives_malformed_sync_response(cache, fetcher, settings, respx_mock) -> None:
    backend = make_settings().backend_url
    respx_mock.get(backend + "/api/evn-reservoirs/today").mock(
        return_value=httpx.Response(200, json={"cached": False, "count": 0, "data": []})
    )
    respx_mock.post(backend + "/api/evn-reservoirs/sync").mock(
        return_value=httpx.Response(200, json={"success": True, "saved_count": "all"})
    )
    service = EVNReservoirService(
        cache=cache, fetcher=fetcher, repo=EVNReservoirRepository(settings), settings=settings
    )

    response = await service.get_reservoir_data()

    assert response.cached is False
    assert response.count == 2
    assert response.sync_result.success is True
    assert response.sync_result.saved_count is None
    assert fetcher.calls == 1
