"""Rating extraction for IMDb title pages."""

from __future__ import annotations

import logging
import re
from typing import Any

from ..models import HotComment, RemoteMetadata
from ..utils import clean_text, find_json_ld, image_url, parse_float, parse_int
from .fetcher import FetchError
from .scraper import PlatformScraper

logger = logging.getLogger(__name__)

MAX_REVIEW_SNIPPETS = 2

REVIEW_RE = re.compile(
    r'<div class="ipc-html-content-inner-div"[^>]*>(.*?)</div>', re.DOTALL
)


def reviews_url(title_url: str) -> str:
    """Return the user reviews page for a title page URL."""

    base = title_url if title_url.endswith("/") else f"{title_url}/"
    return f"{base}reviews?ref_=tt_ov_rt"


def _has_aggregate_rating(block: dict[str, Any]) -> bool:
    return bool(block.get("aggregateRating"))


class IMDbScraper(PlatformScraper):
    """Reads the title's JSON-LD block and a couple of user reviews."""

    platform = "imdb"

    async def _scrape(self, url: str) -> RemoteMetadata:
        html = await self._fetcher.fetch(url)
        metadata = self.parse(html)
        snippets = await self._fetch_review_snippets(url)
        return metadata.model_copy(update={"hot_comments": snippets})

    @staticmethod
    def parse(html: str) -> RemoteMetadata:
        block = find_json_ld(html, _has_aggregate_rating)
        rating: float | None = None
        scale: float = 10
        votes: int | None = None
        cover: str | None = None

        if block is not None:
            aggregate = block.get("aggregateRating")
            if isinstance(aggregate, dict):
                rating = parse_float(aggregate.get("ratingValue"))
                scale = parse_float(aggregate.get("bestRating")) or 10
                votes = parse_int(aggregate.get("ratingCount")) or None
            cover = image_url(block.get("image"))

        return RemoteMetadata(
            source="imdb",
            rating=rating,
            scale=scale,
            votes=votes,
            cover_image=cover,
        )

    @staticmethod
    def parse_reviews(html: str) -> list[HotComment]:
        snippets: list[HotComment] = []
        for match in REVIEW_RE.finditer(html):
            if len(snippets) >= MAX_REVIEW_SNIPPETS:
                break
            content = clean_text(match.group(1))
            if content:
                snippets.append(HotComment(content=content))
        return snippets

    async def _fetch_review_snippets(self, url: str) -> list[HotComment]:
        """Best effort: any failure just means no snippets."""

        target = reviews_url(url)
        try:
            html = await self._fetcher.fetch(target)
        except FetchError as exc:
            logger.debug("Skipping IMDb reviews for %s: %s", target, exc)
            return []
        return self.parse_reviews(html)
