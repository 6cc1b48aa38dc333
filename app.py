#!/usr/bin/env python3
"""
EVN Reservoir API - Main Application

Cấu trúc:
- controllers/  : API route handlers
- services/     : Business logic (cache tiers, scraping, normalization)
- repositories/ : Backend store access
- models/       : Data models/schemas
- config/       : Configuration
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from config import get_settings
from controllers import evn_reservoir_router
from logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log effective configuration on startup"""
    settings = get_settings()
    logger.info(
        "Starting EVN reservoir API (backend=%s, fetcher=%s, cache_ttl=%ss)",
        settings.backend_url,
        settings.fetcher,
        settings.cache_ttl_seconds,
    )
    yield
    logger.info("Shutting down EVN reservoir API")


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="EVN Reservoir API",
        description="""
        Dữ liệu hồ chứa thủy điện EVN cho hệ thống dự báo lũ lụt Việt Nam.

        ## Nguồn dữ liệu:
        - **DB cache**: dữ liệu trong ngày từ backend (1 ngày)
        - **Memory cache**: kết quả scrape gần nhất (30 phút)
        - **EVN**: scrape trực tiếp hochuathuydien.evn.com.vn bằng headless browser
        """,
        version="2.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(evn_reservoir_router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information"""
        return {
            "name": "EVN Reservoir API",
            "version": "2.0.0",
            "backend": settings.backend_url,
            "endpoints": {
                "docs": "/docs",
                "reservoirs": "/api/reservoir",
                "summary": "/api/reservoir/summary",
                "basin": "/api/reservoir/basin/{basin}",
            },
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


# Entry point
if __name__ == "__main__":
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=8001,
        reload=True
    )
