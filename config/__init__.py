#!/usr/bin/env python3
"""
Configuration module
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

EVN_URL = "https://hochuathuydien.evn.com.vn/PageHoChuaThuyDienEmbedEVN.aspx"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:3001",
    "http://localhost:3002",
)

FETCHER_CHOICES = ("playwright", "http")


@dataclass(frozen=True)
class Settings:
    backend_url: str
    backend_timeout: float
    evn_url: str
    fetcher: str
    cache_ttl_seconds: int
    navigation_timeout_ms: int
    table_timeout_ms: int
    settle_delay_ms: int
    force_refresh_bypass_db: bool
    log_level: str
    cors_origins: Tuple[str, ...]


def _read_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip() or default


def _read_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _read_origins() -> Tuple[str, ...]:
    value = os.getenv("CORS_ORIGINS")
    if not value:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(o.strip() for o in value.split(",") if o.strip())
    return origins or DEFAULT_CORS_ORIGINS


def _read_fetcher() -> str:
    fetcher = _read_str("EVN_FETCHER", "playwright").lower()
    return fetcher if fetcher in FETCHER_CHOICES else "playwright"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        backend_url=_read_str("BACKEND_URL", "http://localhost:8000").rstrip("/"),
        backend_timeout=_read_float("BACKEND_TIMEOUT_SECONDS", 10.0),
        evn_url=_read_str("EVN_URL", EVN_URL),
        fetcher=_read_fetcher(),
        cache_ttl_seconds=_read_int("CACHE_TTL_SECONDS", 1800),  # 30 minutes
        navigation_timeout_ms=_read_int("NAVIGATION_TIMEOUT_MS", 30000),
        table_timeout_ms=_read_int("TABLE_TIMEOUT_MS", 15000),
        settle_delay_ms=_read_int("SETTLE_DELAY_MS", 3000),
        force_refresh_bypass_db=_read_bool("FORCE_REFRESH_BYPASS_DB", False),
        log_level=_read_str("LOG_LEVEL", "INFO").upper(),
        cors_origins=_read_origins(),
    )
