"""Tests for automatic page view and error tracking."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from bakery.interfaces.api.middleware import is_navigation_request


@pytest.fixture()
def make_app(reset_database):
    from main import create_app

    def factory(**kwargs):
        return create_app(**kwargs)

    return factory


def test_each_navigation_records_exactly_one_page_view(make_app, recording_transport) -> None:
    app = make_app(activity_transport=recording_transport)

    with TestClient(app) as client:
        client.get(
            "/api/activity/recent",
            headers={"Sec-Fetch-Mode": "navigate", "Referer": "http://bakery.local/"},
        )
        client.get("/api/activity/recent", headers={"Sec-Fetch-Mode": "cors"})
        client.get("/api/activity/recent", headers={"Accept": "application/json"})
        client.post("/api/audit/client-activities", json={"events": []})

    views = [event for event in recording_transport.delivered if event.action == "VIEW"]
    assert len(views) == 1
    (view,) = views
    assert view.resource == "page"
    assert view.resource_id == "/api/activity/recent"
    assert view.details == {
        "url": "/api/activity/recent",
        "referrer": "http://bakery.local/",
        "userAgent": "testclient",
    }


def test_pending_page_views_are_delivered_on_shutdown(make_app, recording_transport) -> None:
    app = make_app(activity_transport=recording_transport)

    with TestClient(app) as client:
        client.get("/api/activity/recent", headers={"Accept": "text/html"})
        assert recording_transport.delivered == []

    assert len(recording_transport.beacons) == 1
    assert app.state.activity_batcher.pending == ()


def test_unhandled_errors_are_tracked(make_app, recording_transport) -> None:
    app = make_app(activity_transport=recording_transport)

    async def broken_endpoint():
        raise RuntimeError("proofing cabinet unreachable")

    app.add_api_route("/broken", broken_endpoint)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/broken", headers={"Accept": "application/json"})
        assert response.status_code == 500

    errors = [event for event in recording_transport.delivered if event.action == "ERROR"]
    assert len(errors) == 1
    assert errors[0].details["message"] == "proofing cabinet unreachable"
    assert errors[0].details["context"] == "Unhandled request error"
    assert errors[0].details["url"] == "/broken"


def test_disabled_tracking_records_nothing(make_app, recording_transport, settings_env) -> None:
    settings_env(ACTIVITY_TRACKING_ENABLED="false")
    app = make_app(activity_transport=recording_transport)

    with TestClient(app) as client:
        client.get("/api/activity/recent", headers={"Sec-Fetch-Mode": "navigate"})

    assert recording_transport.delivered == []


def test_without_collector_the_app_has_no_batcher(make_app) -> None:
    app = make_app()

    with TestClient(app) as client:
        response = client.get("/api/activity/recent", headers={"Sec-Fetch-Mode": "navigate"})

    assert response.status_code == 200
    assert app.state.activity_batcher is None


@pytest.mark.parametrize(
    ("method", "headers", "expected"),
    [
        ("GET", {"sec-fetch-mode": "navigate"}, True),
        ("GET", {"sec-fetch-mode": "no-cors", "accept": "text/html"}, False),
        ("GET", {"accept": "text/html,application/xhtml+xml"}, True),
        ("GET", {"accept": "application/json"}, False),
        ("POST", {"sec-fetch-mode": "navigate"}, False),
    ],
)
def test_is_navigation_request(method: str, headers: dict[str, str], expected: bool) -> None:
    from starlette.requests import Request

    request = Request(
        {
            "type": "http",
            "method": method,
            "path": "/",
            "query_string": b"",
            "headers": [(name.encode(), value.encode()) for name, value in headers.items()],
        }
    )

    assert is_navigation_request(request) is expected
