"""
Unit tests for AJAX capture: request filtering, response pairing, body handling, summaries.
"""

from __future__ import annotations

import json
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest

from scraper.tools.request_monitor import summarize_by_status, summarize_by_type
from scraper.tools.request_tracker import (
    RequestTracker,
    is_text_content_type,
    parse_query_params,
    try_parse_json,
)


def _clock():
    ticks = count(start=1000, step=1)
    return lambda: float(next(ticks))


def _request(url="https://api.example.com/items?page=2&q=", resource_type="xhr", method="GET", post_data=None):
    request = MagicMock()
    request.url = url
    request.resource_type = resource_type
    request.method = method
    request.headers = {"accept": "application/json"}
    request.post_data = post_data
    return request


def _response(url="https://api.example.com/items?page=2&q=", content_type="application/json", body="{}", status=200):
    response = MagicMock()
    response.url = url
    response.status = status
    response.status_text = "OK"
    response.headers = {"content-type": content_type}
    response.text = AsyncMock(return_value=body)
    return response


def test_parse_query_params():
    assert parse_query_params("https://x/a?page=2&q=&page=3") == {"page": "3", "q": ""}
    assert parse_query_params("https://x/a") is None


def test_try_parse_json():
    assert try_parse_json('{"a": 1}') == {"a": 1}
    assert try_parse_json("a=1&b=2") is None
    assert try_parse_json(None) is None


@pytest.mark.parametrize(
    "content_type,expected",
    [
        ("application/json; charset=utf-8", True),
        ("text/html", True),
        ("application/javascript", True),
        ("application/xml", True),
        ("image/png", False),
        ("", False),
    ],
)
def test_is_text_content_type(content_type, expected):
    assert is_text_content_type(content_type) is expected


def test_handle_request_tracks_only_xhr_and_fetch():
    tracker = RequestTracker(clock=_clock())
    assert tracker.handle_request(_request(resource_type="document")) is None
    assert tracker.handle_request(_request(resource_type="image")) is None

    entry = tracker.handle_request(_request(method="POST", post_data='{"sku": 1}'))
    fetch_entry = tracker.handle_request(_request(url="https://api.example.com/cart", resource_type="fetch"))

    assert [e["id"] for e in tracker.requests] == [1, 2]
    assert entry["method"] == "POST"
    assert entry["parsedPostData"] == {"sku": 1}
    assert entry["queryParams"] == {"page": "2", "q": ""}
    assert entry["timeSinceStart"] > 0
    assert fetch_entry["queryParams"] is None


@pytest.mark.asyncio
async def test_handle_response_parses_json_and_attaches_to_request():
    tracker = RequestTracker(clock=_clock())
    request_entry = tracker.handle_request(_request())

    entry = await tracker.handle_response(_response(body='{"items": [1, 2]}'))

    assert entry["parsedBody"] == {"items": [1, 2]}
    assert entry["status"] == 200
    assert request_entry["response"] is entry
    assert tracker.responses == [entry]


@pytest.mark.asyncio
async def test_handle_response_binary_body_not_read():
    tracker = RequestTracker(clock=_clock())
    tracker.handle_request(_request())
    response = _response(content_type="image/webp")

    entry = await tracker.handle_response(response)

    assert entry["body"] == "[binary data - image/webp]"
    response.text.assert_not_awaited()


@pytest.mark.asyncio
async def test_handle_response_body_failure_is_recorded():
    tracker = RequestTracker(clock=_clock())
    tracker.handle_request(_request())
    response = _response()
    response.text = AsyncMock(side_effect=Exception("Response body is unavailable for redirect responses"))

    entry = await tracker.handle_response(response)

    assert entry["body"].startswith("[body unavailable:")
    assert entry["parsedBody"] is None


@pytest.mark.asyncio
async def test_handle_response_for_untracked_url_ignored():
    tracker = RequestTracker(clock=_clock())
    assert await tracker.handle_response(_response(url="https://cdn.example.com/app.js")) is None
    assert tracker.responses == []


def test_attach_subscribes_to_context_events():
    tracker = RequestTracker()
    context = MagicMock()
    tracker.attach(context)
    context.on.assert_any_call("request", tracker.handle_request)
    context.on.assert_any_call("response", tracker.handle_response)


@pytest.mark.asyncio
async def test_save_to_file_and_clear(tmp_path):
    tracker = RequestTracker(clock=_clock())
    tracker.handle_request(_request())
    await tracker.handle_response(_response())

    path = tracker.save_to_file("https://shop.example.com/collections/all", tmp_path)

    assert path.parent == tmp_path
    assert path.name.startswith("shop.example.com_")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["targetUrl"] == "https://shop.example.com/collections/all"
    assert data["totalRequests"] == 1
    assert data["totalResponses"] == 1

    tracker.clear()
    assert tracker.get_all_data()["totalRequests"] == 0


def test_summaries_by_type_and_status():
    data = {
        "totalRequests": 4,
        "totalResponses": 3,
        "requests": [
            {"resourceType": "xhr", "response": {"status": 200}},
            {"resourceType": "xhr", "response": {"status": 404}},
            {"resourceType": "fetch", "response": {"status": 200}},
            {"resourceType": "fetch"},
        ],
    }
    assert summarize_by_type(data) == [("xhr", 2, 50.0), ("fetch", 2, 50.0)]
    assert summarize_by_status(data) == [(200, 2, 66.67), (404, 1, 33.33)]


def test_summaries_empty():
    assert summarize_by_type({}) == []
    assert summarize_by_status({"totalResponses": 0, "requests": []}) == []
