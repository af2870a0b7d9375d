import logging
from datetime import date
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import NASA_API_BASE, NASA_API_KEY, UPSTREAM_TIMEOUT
from .errors import NotFoundError, UpstreamError
from .normalize import normalize_detail
from .schemas import NearEarthObject
from .validation import validate_detail, validate_feed

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = "60"


def _retry_hint(resp: httpx.Response) -> str:
    return (
        resp.headers.get("Retry-After")
        or resp.headers.get("X-RateLimit-Reset")
        or DEFAULT_RETRY_AFTER
    )


async def _get_json(path: str, params: Dict[str, Any], neo_id: Optional[str] = None) -> Any:
    params = {**params, "api_key": NASA_API_KEY}
    url = f"{NASA_API_BASE}{path}"
    logger.debug("GET %s %s", url, {k: v for k, v in params.items() if k != "api_key"})
    try:
        async with httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT) as client:
            resp = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        logger.warning("NASA request to %s failed: %s", path, exc)
        raise UpstreamError(f"NASA API unreachable: {exc}") from exc

    if resp.status_code == 404 and neo_id is not None:
        raise NotFoundError(neo_id)
    if resp.status_code == 429:
        logger.warning("NASA API rate limit hit on %s", path)
        raise UpstreamError(
            "Rate limit exceeded", status=429, retry_after=_retry_hint(resp)
        )
    if resp.is_error:
        logger.warning("NASA API returned %s on %s", resp.status_code, path)
        raise UpstreamError(
            f"NASA API error: {resp.reason_phrase}", status=resp.status_code
        )
    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamError("NASA API returned a non-JSON body", status=resp.status_code) from exc


async def fetch_feed(start: date, end: date) -> Dict[str, List[dict]]:
    """Fetch the feed for ``start``..``end`` and return its validated date mapping."""

    data = await _get_json(
        "/feed",
        {"start_date": start.isoformat(), "end_date": end.isoformat()},
    )
    return validate_feed(data)


async def fetch_detail(neo_id: str, with_orbit: bool = False) -> NearEarthObject:
    """Fetch one object with all of its approaches.

    Orbital parameters are attached only when ``with_orbit`` is set and the
    provider sent them.
    """

    data = await _get_json(f"/neo/{quote(neo_id, safe='')}", {}, neo_id=neo_id)
    raw = validate_detail(data)
    return normalize_detail(raw, with_orbit=with_orbit)
