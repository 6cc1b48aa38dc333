#!/usr/bin/env python3
"""
Reservoir service exceptions
"""


class ReservoirError(Exception):
    """Base class for reservoir data errors"""


class UpstreamError(ReservoirError):
    """Backend store unreachable or returned an unusable response"""


class ScrapeError(ReservoirError):
    """Loading or parsing the EVN page failed"""


class ReservoirDataUnavailable(ReservoirError):
    """Scrape failed and no cached data of any age exists"""
