import pytest
from prometheus_client.parser import text_string_to_metric_families

import neo_feed.main as main_mod
from neo_feed.errors import NotFoundError


async def scrape(client):
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    return {family.name: family for family in text_string_to_metric_families(resp.text)}


def request_count(families, endpoint, status):
    family = families.get("http_requests")
    if family is None:
        return 0.0
    for sample in family.samples:
        labels = sample.labels
        if (
            sample.name == "http_requests_total"
            and labels["endpoint"] == endpoint
            and labels["http_status"] == status
        ):
            return sample.value
    return 0.0


@pytest.mark.asyncio
async def test_rejected_request_counted_with_its_status(client):
    before = request_count(await scrape(client), "/neos", "400")

    resp = await client.get("/neos", params={"start_date": "2025-08-16", "end_date": "2025-08-15"})
    assert resp.status_code == 400

    after = request_count(await scrape(client), "/neos", "400")
    assert after == before + 1


@pytest.mark.asyncio
async def test_detail_latency_labelled_by_path(client, monkeypatch):
    async def missing(neo_id, with_orbit=False):
        raise NotFoundError(neo_id)

    monkeypatch.setattr(main_mod, "fetch_detail", missing)
    resp = await client.get("/neos/3542519")
    assert resp.status_code == 404

    families = await scrape(client)
    assert request_count(families, "/neos/3542519", "404") >= 1
    latency = [
        s
        for s in families["http_request_latency_seconds"].samples
        if s.name.endswith("_count") and s.labels["endpoint"] == "/neos/3542519"
    ]
    assert latency and latency[0].value >= 1
