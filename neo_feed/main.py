import logging
import time
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from sqlalchemy.orm import Session

from . import favorites, schemas
from .aggregate import aggregate_feed, merge_groups
from .cache import TTLCache
from .config import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS, LOG_LEVEL, MAX_RANGE_DAYS
from .database import get_db, init_db
from .dates import parse_date, parse_flag, parse_range, parse_sort, next_range
from .errors import NotFoundError, SchemaError, UpstreamError, ValidationError
from .services import fetch_detail, fetch_feed

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="NEO Feed")
app.add_middleware(CORSMiddleware, allow_origins=["*"])

CACHE_CONTROL = "s-maxage=300, stale-while-revalidate=60"

feed_cache = TTLCache(CACHE_TTL_SECONDS, max_entries=CACHE_MAX_ENTRIES)
detail_cache = TTLCache(CACHE_TTL_SECONDS, max_entries=CACHE_MAX_ENTRIES)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "http_status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    method = request.method
    endpoint = request.url.path
    start_time = time.monotonic()
    response = await call_next(request)
    duration = time.monotonic() - start_time
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, http_status=response.status_code).inc()
    REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": "Not Found"})


@app.exception_handler(SchemaError)
async def schema_error_handler(request: Request, exc: SchemaError):
    return JSONResponse(
        status_code=502,
        content={"detail": "Invalid response format from NASA API", "location": exc.location},
    )


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    if exc.status == 401:
        return JSONResponse(status_code=401, content={"detail": "NASA API key is invalid or missing"})
    if exc.status == 429:
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded", "retry_after": exc.retry_after},
            headers={"Retry-After": exc.retry_after or "60"},
        )
    return JSONResponse(status_code=502, content={"detail": exc.message})


def current_user(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_user_id or None


def require_user(user_id: Optional[str] = Depends(current_user)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Sign in required")
    return user_id


@app.get("/neos", response_model=List[schemas.DateGroup])
async def get_neos(
    response: Response,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    hazardous: Optional[str] = None,
    sort: Optional[str] = None,
):
    start, end = parse_range(start_date, end_date)
    hazardous_only = parse_flag(hazardous, "hazardous")
    order = parse_sort(sort)
    response.headers["Cache-Control"] = CACHE_CONTROL

    key = (start.isoformat(), end.isoformat(), hazardous_only, order.value)
    cached = feed_cache.get(key)
    if cached is not None:
        logger.debug("Feed cache hit for %s", key)
        return cached

    feed = await fetch_feed(start, end)
    groups = aggregate_feed(feed, hazardous_only=hazardous_only, order=order)
    feed_cache.set(key, groups)
    return groups


@app.post("/neos/merge", response_model=List[schemas.DateGroup])
async def merge_neos(body: schemas.MergeRequest):
    return merge_groups(body.held, body.incoming, body.sort)


@app.get("/neos/next-range", response_model=schemas.DateRange)
async def get_next_range(end_date: str, days: int = MAX_RANGE_DAYS):
    start, end = next_range(parse_date(end_date, "end_date"), days)
    return schemas.DateRange(start_date=start.isoformat(), end_date=end.isoformat())


@app.get("/neos/{neo_id}", response_model=schemas.NearEarthObject)
async def get_neo(response: Response, neo_id: str, orbital: Optional[str] = None):
    with_orbit = parse_flag(orbital, "orbital")
    response.headers["Cache-Control"] = CACHE_CONTROL

    key = (neo_id, with_orbit)
    cached = detail_cache.get(key)
    if cached is not None:
        logger.debug("Detail cache hit for %s", key)
        return cached

    neo = await fetch_detail(neo_id, with_orbit=with_orbit)
    detail_cache.set(key, neo)
    return neo


@app.get("/favorites", response_model=List[schemas.FavoriteRead])
async def get_favorites(
    user_id: Optional[str] = Depends(current_user), db: Session = Depends(get_db)
):
    if not user_id:
        return []
    return favorites.list_favorites(db, user_id)


@app.post("/favorites", status_code=201, response_model=schemas.FavoriteRead)
async def add_favorite(
    neo: schemas.NearEarthObject,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return favorites.add_favorite(db, user_id, neo)


@app.get("/favorites/{neo_id}", response_model=schemas.FavoriteStatus)
async def get_favorite_status(
    neo_id: str,
    user_id: Optional[str] = Depends(current_user),
    db: Session = Depends(get_db),
):
    found = bool(user_id) and favorites.is_favorite(db, user_id, neo_id)
    return schemas.FavoriteStatus(neo_id=neo_id, favorite=found)


@app.delete("/favorites/{neo_id}", status_code=204)
async def delete_favorite(
    neo_id: str,
    user_id: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if not favorites.remove_favorite(db, user_id, neo_id):
        raise HTTPException(status_code=404, detail="Not Found")
    return Response(status_code=204)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
