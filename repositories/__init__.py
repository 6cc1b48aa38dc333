#!/usr/bin/env python3
"""
Repository layer - backend store access
"""
from .evn_reservoir_repository import EVNReservoirRepository, TodayBatch

__all__ = [
    "EVNReservoirRepository",
    "TodayBatch",
]
