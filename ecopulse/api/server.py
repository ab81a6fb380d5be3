"""
FastAPI Backend Server for EcoPulse

Serves the news desk to a dashboard: news cards, market tickers and deep
insight reports. One NewsDesk (and so one rate limiter) per server process.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from .. import __version__
from ..config import config
from ..news import (
    GeminiNewsClient,
    IndexRefresher,
    MarketIndex,
    NewsCategory,
    NewsDesk,
    NewsFeed,
    Region,
)

logger = logging.getLogger("ecopulse.api")


# ============================================================================
# LOGGING
# ============================================================================

def configure_logging(log_dir: Optional[str] = None):
    """
    Configure structured logging to file and console

    Everything under the "ecopulse" logger (and uvicorn) goes to
    <log_dir>/backend.log and the console.
    """
    root_logger = logging.getLogger("ecopulse")
    if root_logger.handlers:
        return

    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    root_logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "backend.log"),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.INFO)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # Route uvicorn logs to the same file/console
    for name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvlog = logging.getLogger(name)
        if not uvlog.handlers:
            uvlog.addHandler(file_handler)
            uvlog.addHandler(console_handler)


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class InsightRequest(BaseModel):
    topic: str

    model_config = ConfigDict(json_schema_extra={
        "examples": [{"topic": "Semiconductor exports"}]
    })


class InsightResponse(BaseModel):
    topic: str
    insight: str


# ============================================================================
# APP FACTORY
# ============================================================================

def create_app(desk: Optional[NewsDesk] = None, refresh_indices: bool = True,
               log_dir: Optional[str] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        desk: Pre-built NewsDesk (tests); built from config when None
        refresh_indices: Run the periodic IndexRefresher during the app lifespan
        log_dir: Directory for backend.log; logging is left untouched when a desk
            is injected and no log_dir is given
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if desk is None or log_dir:
            configure_logging(log_dir)

        logger.info("=" * 80)
        logger.info("ECOPULSE BACKEND - STARTING UP")
        logger.info("=" * 80)

        app.state.desk = desk or NewsDesk(GeminiNewsClient())
        if app.state.desk.client.configured:
            logger.info(f"-> Gemini client ready (news: {app.state.desk.client.news_model}, "
                        f"insight: {app.state.desk.client.insight_model})")
        else:
            logger.error("GEMINI_API_KEY not set. News requests will fail until it is configured.")

        refresher = None
        if refresh_indices and app.state.desk.client.configured:
            refresher = IndexRefresher(app.state.desk)
            refresher.start()
            logger.info(f"-> Index refresh every {refresher.interval:.0f}s")
        app.state.refresher = refresher

        logger.info("BACKEND READY - Listening for requests...")
        try:
            yield
        finally:
            logger.info("SHUTTING DOWN BACKEND...")
            if refresher:
                await refresher.stop()

    app = FastAPI(
        title="EcoPulse API",
        description="Economic news, market indices and AI insight reports",
        version=__version__,
        lifespan=lifespan
    )

    # CORS middleware (allow dashboard to call backend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = datetime.now()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (datetime.now() - start).total_seconds() * 1000
            logger.info(f"{request.method} {request.url.path} -> {status_code} [{duration_ms:.1f}ms]")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error at {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(exc), "path": str(request.url.path)},
        )

    # ========================================================================
    # API ENDPOINTS
    # ========================================================================

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "EcoPulse Backend",
            "version": __version__,
            "endpoints": {
                "news": "/api/news",
                "indices": "/api/indices",
                "insight": "/api/insight",
                "health": "/health"
            }
        }

    @app.get("/health")
    async def health_check(request: Request) -> Dict[str, Any]:
        """Detailed health check"""
        news_desk: NewsDesk = request.app.state.desk
        refresher: Optional[IndexRefresher] = request.app.state.refresher

        health_status = {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "components": {
                "gemini_client": {"status": "healthy" if news_desk.client.configured else "not_configured"},
                "rate_limiter": news_desk.rate_limiter.get_stats(),
                "retry_policy": news_desk.client.retry_policy.get_stats(),
                "index_refresher": {"running": bool(refresher and refresher.running),
                                    "cached_indices": len(news_desk.indices)}
            }
        }
        if not news_desk.client.configured:
            health_status["status"] = "degraded"
        return health_status

    @app.get("/api/news", response_model=NewsFeed, response_model_by_alias=True)
    async def get_news(request: Request, region: Region = Region.DOMESTIC,
                       category: NewsCategory = NewsCategory.ALL,
                       query: Optional[str] = None):
        """News cards for a region/sector, optionally narrowed by a search query"""
        news_desk: NewsDesk = request.app.state.desk
        result = await news_desk.load_news(region, category, query)

        if result.configuration_error:
            raise HTTPException(status_code=503, detail=result.error)
        if result.rate_limited:
            raise HTTPException(
                status_code=429,
                detail=result.error,
                headers={"Retry-After": str(result.retry_after)}
            )
        if not result.ok:
            raise HTTPException(status_code=502, detail=result.error)
        return result.feed

    @app.get("/api/indices", response_model=List[MarketIndex], response_model_by_alias=True)
    async def get_indices(request: Request, refresh: bool = False):
        """Market tickers (cached; refresh=true forces a fetch)"""
        news_desk: NewsDesk = request.app.state.desk
        if refresh or not news_desk.indices:
            if not news_desk.client.configured:
                raise HTTPException(status_code=503, detail="Gemini API key is not configured")
            return await news_desk.load_market_data()
        return news_desk.indices

    @app.post("/api/insight", response_model=InsightResponse)
    async def post_insight(request: Request, body: InsightRequest):
        """Deep insight report for a topic"""
        news_desk: NewsDesk = request.app.state.desk
        if not news_desk.client.configured:
            raise HTTPException(status_code=503, detail="Gemini API key is not configured")
        insight = await news_desk.show_insight(body.topic)
        return InsightResponse(topic=body.topic, insight=insight)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ecopulse.api.server:app",
        host=config.HOST,
        port=config.PORT,
        log_level="info"
    )
