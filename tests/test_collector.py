import asyncio

import httpx
import pytest

from navtracker.core.exceptions import (
    CollectionError,
    HttpStatusFailure,
    InvalidPayloadFailure,
)
from navtracker.services.collector import (
    SampleCollector,
    compose_url,
    extract_number,
    normalize_base_url,
)
from navtracker.services.fetcher import EndpointFetcher


def test_base_url_normalization_is_idempotent():
    assert compose_url("https://host/", "/api/spy-nav") == "https://host/api/spy-nav"
    assert compose_url("https://host", "/api/spy-nav") == "https://host/api/spy-nav"
    assert compose_url("https://host///", "/api/spy-nav") == "https://host/api/spy-nav"
    assert normalize_base_url(normalize_base_url("https://host/")) == "https://host"


@pytest.mark.asyncio
async def test_collects_sample_from_both_endpoints(collector, upstream):
    sample = await collector.collect("https://api.example/")

    assert sample.nav == 500.25
    assert sample.price == 499.75
    assert sample.difference == 0.5
    assert sorted(upstream.requests) == [
        "https://api.example/api/spy-nav",
        "https://api.example/api/spy-price",
    ]


@pytest.mark.asyncio
async def test_sequential_mode(fetcher, upstream):
    collector = SampleCollector(fetcher, concurrent=False)

    sample = await collector.collect("https://api.example")

    assert sample.difference == 0.5
    assert upstream.requests == [
        "https://api.example/api/spy-nav",
        "https://api.example/api/spy-price",
    ]


@pytest.mark.asyncio
async def test_failure_records_both_legs(collector, upstream):
    upstream.status_codes["/api/spy-price"] = 503

    with pytest.raises(CollectionError) as exc_info:
        await collector.collect("https://api.example")

    error = exc_info.value
    assert error.failed_legs == ["price"]
    assert error.nav_error is None
    assert isinstance(error.price_error, HttpStatusFailure)
    assert error.describe()["price"]["status_code"] == 503
    assert "unavailable" in error.user_message()


@pytest.mark.asyncio
async def test_both_legs_failing(collector, upstream):
    upstream.fail_all(404)

    with pytest.raises(CollectionError) as exc_info:
        await collector.collect("https://api.example")

    assert exc_info.value.failed_legs == ["nav", "price"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"price": 499.75},
        {"nav": "500.25"},
        {"nav": None},
        {"nav": True},
        [500.25],
        b"not json",
    ],
)
async def test_invalid_payload_is_distinct_from_network_failure(collector, upstream, payload):
    upstream.payloads["/api/spy-nav"] = payload

    with pytest.raises(CollectionError) as exc_info:
        await collector.collect("https://api.example")

    assert isinstance(exc_info.value.nav_error, InvalidPayloadFailure)
    assert exc_info.value.price_error is None
    assert exc_info.value.user_message() == "Invalid nav data structure"


@pytest.mark.asyncio
async def test_zero_is_accepted_by_default(collector, upstream):
    upstream.payloads["/api/spy-price"] = {"price": 0}

    sample = await collector.collect("https://api.example")

    assert sample.price == 0.0
    assert sample.difference == 500.25


@pytest.mark.asyncio
async def test_zero_rejected_in_strict_mode(fetcher, upstream):
    upstream.payloads["/api/spy-price"] = {"price": 0}
    collector = SampleCollector(fetcher, reject_falsy=True)

    with pytest.raises(CollectionError) as exc_info:
        await collector.collect("https://api.example")

    assert isinstance(exc_info.value.price_error, InvalidPayloadFailure)


def test_extract_number_rejects_non_finite():
    with pytest.raises(InvalidPayloadFailure):
        extract_number({"nav": float("nan")}, "nav", "https://host/api/spy-nav")
    assert extract_number({"nav": 3}, "nav", "https://host/api/spy-nav") == 3.0


@pytest.mark.asyncio
async def test_oversized_integer_is_invalid_payload_and_keeps_other_leg(collector, upstream):
    upstream.payloads["/api/spy-nav"] = {"nav": 10 ** 400}
    upstream.status_codes["/api/spy-price"] = 503

    with pytest.raises(CollectionError) as exc_info:
        await collector.collect("https://api.example")

    assert isinstance(exc_info.value.nav_error, InvalidPayloadFailure)
    assert isinstance(exc_info.value.price_error, HttpStatusFailure)
    assert exc_info.value.failed_legs == ["nav", "price"]


@pytest.mark.asyncio
async def test_unclassified_leg_error_waits_for_sibling_leg():
    finished = []

    async def handler(request):
        if request.url.path == "/api/spy-nav":
            raise ValueError("transport bug")
        await asyncio.sleep(0.01)
        finished.append(request.url.path)
        return httpx.Response(200, json={"price": 499.75})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        collector = SampleCollector(EndpointFetcher(client=client, max_attempts=1), concurrent=True)
        with pytest.raises(ValueError):
            await collector.collect("https://api.example")

    assert finished == ["/api/spy-price"]
