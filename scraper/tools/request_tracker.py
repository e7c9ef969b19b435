"""
AJAX request tracker: records xhr/fetch requests and their responses on a browser context.

Only xhr and fetch resource types are tracked. Responses are paired with
requests by URL (latest request wins). Response bodies are read for textual
content types only; JSON bodies and JSON post data are parsed when possible.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, urlparse

from playwright.async_api import BrowserContext, Request, Response

from scraper.storage import build_output_path, write_json
from shared.logging import get_logger

logger = get_logger(__name__)

AJAX_RESOURCE_TYPES = ("xhr", "fetch")
TEXT_CONTENT_MARKERS = ("json", "text", "javascript", "xml")


def parse_query_params(url: str) -> Optional[dict[str, str]]:
    """Query string as a dict (last value wins); None when the URL has no '?'."""
    if "?" not in url:
        return None
    try:
        query = urlparse(url).query
    except ValueError:
        return None
    return dict(parse_qsl(query, keep_blank_values=True))


def try_parse_json(text: Optional[str]) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def is_text_content_type(content_type: str) -> bool:
    lowered = content_type.lower()
    return any(marker in lowered for marker in TEXT_CONTENT_MARKERS)


def _iso(epoch_ms: float) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


class RequestTracker:
    """Collects AJAX requests/responses emitted by a Playwright BrowserContext."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.requests: list[dict] = []
        self.responses: list[dict] = []
        self._by_url: dict[str, dict] = {}
        self.start_time_ms = self._now_ms()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def attach(self, context: BrowserContext) -> None:
        """Subscribe to the context's request and response events."""
        context.on("request", self.handle_request)
        context.on("response", self.handle_response)
        logger.info("request_tracker_attached", resource_types=list(AJAX_RESOURCE_TYPES))

    def handle_request(self, request: Request) -> Optional[dict]:
        resource_type = request.resource_type
        if resource_type not in AJAX_RESOURCE_TYPES:
            return None

        now = self._now_ms()
        post_data = request.post_data
        entry = {
            "id": len(self.requests) + 1,
            "url": request.url,
            "method": request.method,
            "headers": request.headers,
            "resourceType": resource_type,
            "timestamp": int(now),
            "timeSinceStart": int(now - self.start_time_ms),
            "postData": post_data,
            "parsedPostData": try_parse_json(post_data),
            "queryParams": parse_query_params(request.url),
        }
        self.requests.append(entry)
        self._by_url[request.url] = entry
        logger.debug("ajax_request", method=entry["method"], url=entry["url"], resource_type=resource_type)
        return entry

    async def handle_response(self, response: Response) -> Optional[dict]:
        request_entry = self._by_url.get(response.url)
        if request_entry is None:
            return None

        headers = response.headers
        content_type = headers.get("content-type", "")
        body: Optional[str]
        parsed_body = None
        if is_text_content_type(content_type):
            try:
                body = await response.text()
                if "json" in content_type.lower():
                    parsed_body = try_parse_json(body)
            except Exception as e:
                logger.warning(
                    "response_body_unavailable",
                    url=response.url,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                body = f"[body unavailable: {e}]"
        else:
            body = f"[binary data - {content_type}]"

        now = self._now_ms()
        entry = {
            "url": response.url,
            "status": response.status,
            "statusText": response.status_text,
            "headers": headers,
            "timestamp": int(now),
            "timeSinceStart": int(now - self.start_time_ms),
            "body": body,
            "parsedBody": parsed_body,
            "contentType": content_type,
        }
        self.responses.append(entry)
        request_entry["response"] = entry
        logger.debug("ajax_response", status=entry["status"], url=entry["url"])
        return entry

    def get_all_data(self) -> dict:
        now = self._now_ms()
        return {
            "totalRequests": len(self.requests),
            "totalResponses": len(self.responses),
            "startTime": _iso(self.start_time_ms),
            "endTime": _iso(now),
            "duration": int(now - self.start_time_ms),
            "requests": self.requests,
        }

    def save_to_file(self, url: str, output_dir: str | Path) -> Path:
        """Write get_all_data() plus targetUrl to {domain}_{timestamp}.json."""
        path = build_output_path(output_dir, url, ext="json")
        data = self.get_all_data()
        data["targetUrl"] = url
        size, _checksum = write_json(path, data)
        logger.info("request_data_saved", path=str(path), size_bytes=size, requests=len(self.requests))
        return path

    def clear(self) -> None:
        self.requests = []
        self.responses = []
        self._by_url.clear()
        self.start_time_ms = self._now_ms()
        logger.info("request_tracker_cleared")
