from datetime import date

import httpx
import pytest

from neo_feed import services
from neo_feed.errors import NotFoundError, SchemaError, UpstreamError

REAL_CLIENT = httpx.AsyncClient


def record(neo_id="42", name="Apophis", **extra):
    rec = {
        "id": neo_id,
        "name": name,
        "nasa_jpl_url": "https://ssd.jpl.nasa.gov/42",
        "is_potentially_hazardous_asteroid": True,
        "estimated_diameter": {
            "kilometers": {"estimated_diameter_min": 0.3, "estimated_diameter_max": 0.5}
        },
        "close_approach_data": [
            {
                "close_approach_date": "2025-08-15",
                "close_approach_date_full": "2025-Aug-15 12:34",
                "epoch_date_close_approach": 1755261240000,
                "relative_velocity": {"kilometers_per_second": "7.4"},
                "miss_distance": {"kilometers": "38000"},
                "orbiting_body": "Earth",
            },
            {
                "close_approach_date": "2029-04-13",
                "epoch_date_close_approach": 1870000000000,
                "orbiting_body": "Earth",
            },
        ],
    }
    rec.update(extra)
    return rec


def use_transport(monkeypatch, handler):
    def factory(**kwargs):
        return REAL_CLIENT(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(services.httpx, "AsyncClient", factory)


@pytest.mark.asyncio
async def test_fetch_feed(monkeypatch):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={"element_count": 1, "near_earth_objects": {"2025-08-15": [record()]}},
        )

    use_transport(monkeypatch, handler)
    feed = await services.fetch_feed(date(2025, 8, 15), date(2025, 8, 16))
    assert seen["path"].endswith("/feed")
    assert seen["params"]["start_date"] == "2025-08-15"
    assert seen["params"]["end_date"] == "2025-08-16"
    assert "api_key" in seen["params"]
    assert list(feed) == ["2025-08-15"]
    assert feed["2025-08-15"][0]["id"] == "42"


@pytest.mark.asyncio
async def test_fetch_feed_rejects_bad_shape(monkeypatch):
    use_transport(monkeypatch, lambda request: httpx.Response(200, json={"links": {}}))
    with pytest.raises(SchemaError):
        await services.fetch_feed(date(2025, 8, 15), date(2025, 8, 16))


@pytest.mark.asyncio
async def test_rate_limit_carries_retry_hint(monkeypatch):
    use_transport(
        monkeypatch,
        lambda request: httpx.Response(429, headers={"X-RateLimit-Reset": "120"}),
    )
    with pytest.raises(UpstreamError) as excinfo:
        await services.fetch_feed(date(2025, 8, 15), date(2025, 8, 16))
    assert excinfo.value.status == 429
    assert excinfo.value.retry_after == "120"


@pytest.mark.asyncio
async def test_rate_limit_default_hint(monkeypatch):
    use_transport(monkeypatch, lambda request: httpx.Response(429))
    with pytest.raises(UpstreamError) as excinfo:
        await services.fetch_detail("42")
    assert excinfo.value.retry_after == "60"


@pytest.mark.asyncio
async def test_server_error(monkeypatch):
    use_transport(monkeypatch, lambda request: httpx.Response(503))
    with pytest.raises(UpstreamError) as excinfo:
        await services.fetch_feed(date(2025, 8, 15), date(2025, 8, 16))
    assert excinfo.value.status == 503
    assert excinfo.value.retry_after is None


@pytest.mark.asyncio
async def test_transport_failure(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("getaddrinfo failed", request=request)

    use_transport(monkeypatch, handler)
    with pytest.raises(UpstreamError) as excinfo:
        await services.fetch_feed(date(2025, 8, 15), date(2025, 8, 16))
    assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_fetch_detail_with_orbit(monkeypatch):
    def handler(request):
        assert request.url.path.endswith("/neo/42")
        return httpx.Response(200, json=record(orbital_data={"eccentricity": "0.19"}))

    use_transport(monkeypatch, handler)
    neo = await services.fetch_detail("42", with_orbit=True)
    assert neo.id == "42"
    assert len(neo.approaches) == 2
    assert neo.approaches_count == 2
    assert neo.nearest_approach.epoch_millis == 1755261240000
    assert neo.orbital_parameters == {"eccentricity": "0.19"}


@pytest.mark.asyncio
async def test_fetch_detail_without_orbit(monkeypatch):
    use_transport(
        monkeypatch,
        lambda request: httpx.Response(200, json=record(orbital_data={"eccentricity": "0.19"})),
    )
    neo = await services.fetch_detail("42")
    assert neo.orbital_parameters is None
    assert len(neo.approaches) == 2


@pytest.mark.asyncio
async def test_fetch_detail_not_found(monkeypatch):
    use_transport(monkeypatch, lambda request: httpx.Response(404))
    with pytest.raises(NotFoundError) as excinfo:
        await services.fetch_detail("nope")
    assert excinfo.value.neo_id == "nope"


@pytest.mark.asyncio
async def test_fetch_detail_bad_shape(monkeypatch):
    use_transport(monkeypatch, lambda request: httpx.Response(200, json={"id": "42"}))
    with pytest.raises(SchemaError):
        await services.fetch_detail("42")


@pytest.mark.asyncio
async def test_fetch_detail_escapes_id(monkeypatch):
    seen = {}

    def handler(request):
        seen["path"] = request.url.raw_path.split(b"?")[0].decode()
        return httpx.Response(404)

    use_transport(monkeypatch, handler)
    with pytest.raises(NotFoundError) as excinfo:
        await services.fetch_detail("../feed")
    assert excinfo.value.neo_id == "../feed"
    assert seen["path"].endswith("/neo/..%2Ffeed")
