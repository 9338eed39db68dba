"""Tests for the HTTP delivery of activity batches."""

from __future__ import annotations

import json

import httpx
import pytest

from bakery.domain.entities import ActivityEvent
from bakery.infrastructure.activity import (
    ActivityDeliveryError,
    ActivityRejectedError,
    HttpActivityTransport,
    encode_batch,
)

COLLECTOR_URL = "https://collector.example.com/api/audit/client-activities"


def _events() -> list[ActivityEvent]:
    return [
        ActivityEvent(
            action="CREATE",
            resource="order",
            resource_id="17",
            details={"total": 12.5},
            timestamp="2026-10-19T08:30:00+00:00",
        ),
        ActivityEvent(
            action="VIEW",
            resource="page",
            timestamp="2026-10-19T08:30:01+00:00",
        ),
    ]


def test_encode_batch_uses_collector_field_names() -> None:
    body = json.loads(encode_batch(_events()))

    assert body == {
        "events": [
            {
                "action": "CREATE",
                "resource": "order",
                "resourceId": "17",
                "details": {"total": 12.5},
                "timestamp": "2026-10-19T08:30:00+00:00",
            },
            {
                "action": "VIEW",
                "resource": "page",
                "resourceId": None,
                "details": None,
                "timestamp": "2026-10-19T08:30:01+00:00",
            },
        ]
    }


def test_encode_batch_stringifies_unknown_values() -> None:
    event = ActivityEvent(
        action="UPDATE", resource="price", timestamp="t", details={"amount": object()}
    )

    body = json.loads(encode_batch([event]))

    assert isinstance(body["events"][0]["details"]["amount"], str)


@pytest.mark.asyncio
async def test_send_posts_json_batch() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, json={"accepted": 2})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        transport = HttpActivityTransport(COLLECTOR_URL, client=client)
        await transport.send(_events())

    (request,) = captured
    assert request.method == "POST"
    assert str(request.url) == COLLECTOR_URL
    assert request.headers["content-type"] == "application/json"
    assert [event["action"] for event in json.loads(request.content)["events"]] == [
        "CREATE",
        "VIEW",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [408, 429, 500, 503])
async def test_transient_error_status_is_a_retryable_failure(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text="slow down")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        transport = HttpActivityTransport(COLLECTOR_URL, client=client)
        with pytest.raises(ActivityDeliveryError, match=str(status_code)) as excinfo:
            await transport.send(_events())

    assert not isinstance(excinfo.value, ActivityRejectedError)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 413, 422])
async def test_client_error_status_is_a_permanent_rejection(status_code: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"detail": "invalid"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        transport = HttpActivityTransport(COLLECTOR_URL, client=client)
        with pytest.raises(ActivityRejectedError, match=str(status_code)):
            await transport.send(_events())


@pytest.mark.asyncio
async def test_unencodable_batch_is_rejected_without_a_request() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202)

    event = ActivityEvent(
        action="UPDATE", resource="recipe", timestamp="t", details={("flour", 1): "x"}
    )
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        transport = HttpActivityTransport(COLLECTOR_URL, client=client)
        with pytest.raises(ActivityRejectedError):
            await transport.send([event])

    assert captured == []


@pytest.mark.asyncio
async def test_connection_problem_is_a_delivery_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        transport = HttpActivityTransport(COLLECTOR_URL, client=client)
        with pytest.raises(ActivityDeliveryError):
            await transport.send(_events())


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    transport = HttpActivityTransport(COLLECTOR_URL, client=client)

    await transport.aclose()

    assert client.is_closed is False
    await client.aclose()


def test_beacon_posts_with_short_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []

    def fake_post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        return httpx.Response(204, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", fake_post)
    transport = HttpActivityTransport(COLLECTOR_URL, beacon_timeout=1.5)

    assert transport.send_beacon(_events()) is True
    (call,) = calls
    assert call["url"] == COLLECTOR_URL
    assert call["timeout"] == 1.5
    assert len(json.loads(call["content"])["events"]) == 2


@pytest.mark.parametrize(
    "outcome",
    [
        httpx.ConnectError("unreachable"),
        httpx.Response(503, request=httpx.Request("POST", COLLECTOR_URL)),
    ],
)
def test_beacon_failures_are_reported_not_raised(monkeypatch: pytest.MonkeyPatch, outcome) -> None:
    def fake_post(url, **kwargs):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(httpx, "post", fake_post)
    transport = HttpActivityTransport(COLLECTOR_URL)

    assert transport.send_beacon(_events()) is False


def test_beacon_drops_batch_the_collector_will_never_accept(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(url, **kwargs):
        return httpx.Response(422, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "post", fake_post)
    transport = HttpActivityTransport(COLLECTOR_URL)

    assert transport.send_beacon(_events()) is True


def test_beacon_does_not_raise_on_unencodable_batch(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: calls.append(url))
    event = ActivityEvent(
        action="UPDATE", resource="recipe", timestamp="t", details={("flour", 1): "x"}
    )

    assert HttpActivityTransport(COLLECTOR_URL).send_beacon([event]) is True
    assert calls == []
