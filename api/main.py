"""AniCrunch backend: sessions, watchlists and a cached anime search proxy."""
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.app_state import AppState, init_app_state
from api.auth.router import router as auth_router
from api.config import (
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    MAX_SEARCH_QUERY_LENGTH,
    MIN_SEARCH_QUERY_LENGTH,
    SEARCH_RATE_LIMIT,
)
from api.database import engine
from api.limiter import limiter
from api.search_proxy import SearchProxy, UpstreamUnavailable
from api.settings import settings
from api.watchlist.router import router as watchlist_router

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT
)
logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api")


class SearchResponse(BaseModel):
    """Upstream anime items matching a query."""
    data: list[dict]


def get_app_state(request: Request) -> AppState:
    """Dependency injection for application state."""
    return request.app.state.app_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the search proxy at startup and close it on shutdown."""
    app_state = init_app_state()
    app.state.app_state = app_state

    logger.info(f"Initializing search proxy for {settings.upstream_base_url}...")
    app_state.search_proxy = SearchProxy(
        settings.upstream_base_url,
        ttl_seconds=settings.search_cache_ttl_seconds,
        timeout=settings.upstream_timeout_seconds,
    )
    app_state.database_dialect = engine.dialect.name

    app_state.is_initialized = True
    logger.info("Startup complete")

    yield

    logger.info("Shutting down")
    await app_state.close()


app = FastAPI(
    title="AniCrunch API",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render errors as {"message": ...}, the shape the frontend reads."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log request method, path, status, and duration."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    if request.url.path not in ["/health", "/"]:
        logger.info(f"{request.method} {request.url.path} | Status: {response.status_code} | Duration: {duration:.3f}s")

    return response


@app.get("/")
async def root(app_state: AppState = Depends(get_app_state)):
    """Root endpoint returns the health check."""
    return await health(app_state)


@app.get("/health")
async def health(app_state: AppState = Depends(get_app_state)):
    """Health check endpoint for monitoring."""
    return app_state.get_health_status()


@api_router.get("/search", response_model=SearchResponse, tags=["Search"])
@limiter.limit(SEARCH_RATE_LIMIT)
async def search(
    request: Request,
    q: str = "",
    app_state: AppState = Depends(get_app_state)
):
    """Search anime through the cached upstream proxy."""
    query = (q or "").strip()

    if len(query) < MIN_SEARCH_QUERY_LENGTH:
        return SearchResponse(data=[])

    if len(query) > MAX_SEARCH_QUERY_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query too long (max 100 chars)")

    if not app_state.search_ready:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Search not available")

    try:
        results = await app_state.search_proxy.search(query)
    except UpstreamUnavailable:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Upstream search unavailable")

    return SearchResponse(data=results)


api_router.include_router(auth_router)
api_router.include_router(watchlist_router)
app.include_router(api_router)


if __name__ == "__main__":
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
