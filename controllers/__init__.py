#!/usr/bin/env python3
"""
Controller layer - API route handlers
"""
from .evn_reservoir_controller import router as evn_reservoir_router

__all__ = [
    "evn_reservoir_router",
]
