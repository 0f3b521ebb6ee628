"""Shared builders for the scraper and fetcher tests."""

from __future__ import annotations

from typing import Callable

import httpx

from app.services.fetcher import PageFetcher

Handler = Callable[[httpx.Request], httpx.Response]


def build_fetcher(handler: Handler, **kwargs: object) -> tuple[PageFetcher, httpx.AsyncClient]:
    """Return a fetcher backed by a mock transport and its HTTP client."""

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    options: dict[str, object] = {"user_agent": "TestBot/1.0"}
    options.update(kwargs)
    return PageFetcher(http_client, **options), http_client  # type: ignore[arg-type]


def html_with_json_ld(*blocks: str, body: str = "") -> str:
    """Wrap raw JSON-LD strings in a minimal HTML page."""

    scripts = "".join(
        f'<script type="application/ld+json">{block}</script>' for block in blocks
    )
    return f"<html><head>{scripts}</head><body>{body}</body></html>"
