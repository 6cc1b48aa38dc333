#!/usr/bin/env python3
"""
Page Fetcher - load the EVN reservoir page and extract raw table rows

Two strategies share one interface:
- PlaywrightPageFetcher: headless Chromium, needed because EVN fills the
  table with JavaScript after the initial load
- HttpPageFetcher: plain httpx GET + BeautifulSoup, for when the page
  serves the table in its static HTML
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from config import Settings, USER_AGENT, get_settings
from services.errors import ScrapeError

logger = logging.getLogger(__name__)

RawRow = List[str]

HEADER_ROWS = 2
MIN_CELLS = 10
SETTLE_POLL_MS = 500

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


def extract_table_rows(html: str) -> List[RawRow]:
    """
    Pull cell texts out of every data row of every table.

    The first two rows of each table are headers; rows with fewer than
    10 cells are layout or footer rows.

    Raises:
        ScrapeError: the document contains no table at all
    """
    soup = BeautifulSoup(html, "html.parser")
    tables = soup.find_all("table")
    if not tables:
        raise ScrapeError("No <table> found on EVN page")

    rows: List[RawRow] = []
    for table in tables:
        for row in table.find_all("tr")[HEADER_ROWS:]:
            cells = row.find_all("td")
            if len(cells) < MIN_CELLS:
                continue
            rows.append([cell.get_text(" ", strip=True) for cell in cells])

    logger.info("[EVN] Found %d tables, %d candidate rows", len(tables), len(rows))
    return rows


class PageFetcher(ABC):
    """Source of raw EVN table rows"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def url(self) -> str:
        return self.settings.evn_url

    @abstractmethod
    async def fetch_raw_rows(self) -> List[RawRow]:
        """Return raw rows or raise ScrapeError"""


class PlaywrightPageFetcher(PageFetcher):
    """Scrape the EVN page with headless Chromium via Playwright"""

    async def fetch_raw_rows(self) -> List[RawRow]:
        logger.info("[EVN Playwright] Loading %s...", self.url)
        try:
            html = await self._load_page()
        except ScrapeError:
            raise
        except Exception as e:
            raise ScrapeError(f"Playwright scrape failed: {e}") from e

        return extract_table_rows(html)

    async def _load_page(self) -> str:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
            try:
                context = await browser.new_context(user_agent=USER_AGENT)
                page = await context.new_page()
                await page.goto(
                    self.url,
                    wait_until="networkidle",
                    timeout=self.settings.navigation_timeout_ms,
                )
                await page.wait_for_selector("table", timeout=self.settings.table_timeout_ms)
                await self._wait_for_rows_to_settle(page)
                return await page.content()
            finally:
                await browser.close()

    async def _wait_for_rows_to_settle(self, page) -> None:
        """
        Give the follow-up AJAX call time to fill the table.

        Polls the row count and stops once two polls agree, never waiting
        longer than the configured settle delay.
        """
        previous = -1
        waited = 0
        while waited < self.settings.settle_delay_ms:
            await page.wait_for_timeout(SETTLE_POLL_MS)
            waited += SETTLE_POLL_MS
            count = await page.locator("tr").count()
            if count > 0 and count == previous:
                logger.debug("[EVN Playwright] Row count settled at %d after %dms", count, waited)
                return
            previous = count


class HttpPageFetcher(PageFetcher):
    """Fetch the EVN page with httpx and parse the static HTML"""

    async def fetch_raw_rows(self) -> List[RawRow]:
        logger.info("[EVN HTTP] Loading %s...", self.url)
        timeout = self.settings.navigation_timeout_ms / 1000
        try:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                response = await client.get(self.url, headers={"User-Agent": USER_AGENT})
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ScrapeError(f"HTTP fetch of EVN page failed: {e}") from e

        return extract_table_rows(response.text)


def build_page_fetcher(settings: Optional[Settings] = None) -> PageFetcher:
    settings = settings or get_settings()
    if settings.fetcher == "http":
        return HttpPageFetcher(settings)
    return PlaywrightPageFetcher(settings)
