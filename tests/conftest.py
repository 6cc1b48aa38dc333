import pytest

from config import Settings
from services.evn_reservoir_service import EVNReservoirService
from services.reservoir_cache import ReservoirCache
from tests.fakes import FakeFetcher, FakeRepository, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def cache() -> ReservoirCache:
    return ReservoirCache()


@pytest.fixture
def service(cache, fetcher, repo, settings) -> EVNReservoirService:
    return EVNReservoirService(cache=cache, fetcher=fetcher, repo=repo, settings=settings)
