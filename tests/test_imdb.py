"""Tests for the IMDb scraper."""

from __future__ import annotations

import json

import httpx
import pytest

from app.services.imdb import IMDbScraper, reviews_url
from helpers import build_fetcher, html_with_json_ld

TITLE_BLOCK = json.dumps(
    {
        "@type": "Movie",
        "name": "Example",
        "image": "https://img.example.com/tt1.jpg",
        "aggregateRating": {
            "ratingValue": "8.2",
            "bestRating": "10",
            "ratingCount": "500",
        },
    }
)

REVIEWS_PAGE = (
    "<html><body>"
    '<div class="ipc-html-content-inner-div" role="presentation">Loved it.<br>Twice.</div>'
    '<div class="ipc-html-content-inner-div">   </div>'
    '<div class="ipc-html-content-inner-div">Solid &quot;sci-fi&quot;</div>'
    '<div class="ipc-html-content-inner-div">Third review</div>'
    "</body></html>"
)


def test_reviews_url_handles_trailing_slash() -> None:
    assert reviews_url("https://www.imdb.com/title/tt1") == (
        "https://www.imdb.com/title/tt1/reviews?ref_=tt_ov_rt"
    )
    assert reviews_url("https://www.imdb.com/title/tt1/") == (
        "https://www.imdb.com/title/tt1/reviews?ref_=tt_ov_rt"
    )


def test_parse_skips_blocks_without_aggregate_rating() -> None:
    html = html_with_json_ld(
        "{not json",
        json.dumps({"@type": "BreadcrumbList"}),
        json.dumps([{"@type": "Organization"}, json.loads(TITLE_BLOCK)]),
    )

    metadata = IMDbScraper.parse(html)

    assert metadata.rating == 8.2
    assert metadata.votes == 500
    assert metadata.cover_image == "https://img.example.com/tt1.jpg"


def test_parse_without_structured_data_returns_empty_fields() -> None:
    metadata = IMDbScraper.parse("<html></html>")

    assert metadata.error is None
    assert metadata.rating is None
    assert metadata.scale == 10
    assert metadata.votes is None
    assert metadata.cover_image is None


def test_parse_reads_image_objects_and_custom_scale() -> None:
    html = html_with_json_ld(
        json.dumps(
            {
                "image": {"url": "https://img.example.com/obj.jpg"},
                "aggregateRating": {"ratingValue": 4.5, "bestRating": 5},
            }
        )
    )

    metadata = IMDbScraper.parse(html)

    assert metadata.rating == 4.5
    assert metadata.scale == 5
    assert metadata.votes is None
    assert metadata.cover_image == "https://img.example.com/obj.jpg"


def test_parse_reviews_caps_snippets_and_skips_blank_ones() -> None:
    snippets = IMDbScraper.parse_reviews(REVIEWS_PAGE)

    assert [snippet.content for snippet in snippets] == ["Loved it. Twice.", 'Solid "sci-fi"']
    assert all(snippet.author is None for snippet in snippets)


@pytest.mark.anyio("asyncio")
async def test_scrape_combines_title_and_review_pages() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.path.endswith("/reviews"):
            return httpx.Response(200, text=REVIEWS_PAGE)
        return httpx.Response(200, text=html_with_json_ld(TITLE_BLOCK))

    fetcher, http_client = build_fetcher(handler)
    async with http_client:
        metadata = await IMDbScraper(fetcher).scrape("https://www.imdb.com/title/tt1/")

    payload = metadata.to_payload()
    assert payload["rating"] == 8.2
    assert payload["scale"] == 10
    assert payload["votes"] == 500
    assert "error" not in payload
    assert payload["hotComments"] == [
        {"content": "Loved it. Twice."},
        {"content": 'Solid "sci-fi"'},
    ]
    assert requested[1] == "https://www.imdb.com/title/tt1/reviews?ref_=tt_ov_rt"


@pytest.mark.anyio("asyncio")
async def test_review_page_failure_does_not_fail_title() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/reviews"):
            return httpx.Response(500, text="oops")
        return httpx.Response(200, text=html_with_json_ld(TITLE_BLOCK))

    fetcher, http_client = build_fetcher(handler)
    async with http_client:
        metadata = await IMDbScraper(fetcher).scrape("https://www.imdb.com/title/tt1")

    assert metadata.error is None
    assert metadata.rating == 8.2
    assert metadata.hot_comments == []


@pytest.mark.anyio("asyncio")
async def test_title_page_failure_returns_error_record() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("connect timed out", request=request)

    fetcher, http_client = build_fetcher(handler)
    async with http_client:
        metadata = await IMDbScraper(fetcher).scrape("https://www.imdb.com/title/tt1")

    assert metadata.source == "imdb"
    assert metadata.error == "Timed out fetching https://www.imdb.com/title/tt1"
    assert metadata.to_payload() == {"source": "imdb", "error": metadata.error}


@pytest.mark.anyio("asyncio")
async def test_malformed_review_redirect_keeps_title_rating() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/reviews"):
            return httpx.Response(302, headers={"Location": "http://[bad/x"})
        return httpx.Response(200, text=html_with_json_ld(TITLE_BLOCK))

    fetcher, http_client = build_fetcher(handler)
    async with http_client:
        metadata = await IMDbScraper(fetcher).scrape("https://www.imdb.com/title/tt1/")

    assert metadata.error is None
    assert metadata.rating == 8.2
    assert metadata.votes == 500
    assert metadata.hot_comments == []
