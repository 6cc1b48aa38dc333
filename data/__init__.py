#!/usr/bin/env python3
"""
Data constants module - Vietnam reservoir reference data
"""
from .constants import (
    RESERVOIR_BASINS,
    UNKNOWN_BASIN,
    HIGH_WATER_PERCENT,
)

__all__ = [
    "RESERVOIR_BASINS",
    "UNKNOWN_BASIN",
    "HIGH_WATER_PERCENT",
]
