"""Review score extraction for IGN articles."""

from __future__ import annotations

from typing import Any

from ..models import RemoteMetadata
from ..utils import clean_text, find_json_ld, image_url, parse_float
from .scraper import PlatformScraper

SUMMARY_LENGTH = 160


def _is_review_block(block: dict[str, Any]) -> bool:
    kind = block.get("@type")
    return kind == "Review" or bool(block.get("reviewRating")) or kind == "Game"


class IGNScraper(PlatformScraper):
    """Reads the review score and blurb from IGN's structured data."""

    platform = "ign"

    async def _scrape(self, url: str) -> RemoteMetadata:
        html = await self._fetcher.fetch(url)
        return self.parse(html)

    @staticmethod
    def parse(html: str) -> RemoteMetadata:
        block = find_json_ld(html, _is_review_block)
        if block is None:
            return RemoteMetadata(source="ign")

        rating: float | None = None
        scale: float = 10
        review_rating = block.get("reviewRating")
        if isinstance(review_rating, dict):
            rating = parse_float(review_rating.get("ratingValue"))
            scale = parse_float(review_rating.get("bestRating")) or 10

        summary: str | None = None
        if block.get("description"):
            summary = clean_text(str(block["description"]))
        elif block.get("reviewBody"):
            summary = clean_text(str(block["reviewBody"]))[:SUMMARY_LENGTH]

        cover = image_url(block.get("image"))
        if cover is None and not block.get("image"):
            reviewed = block.get("itemReviewed")
            if isinstance(reviewed, dict):
                cover = image_url(reviewed.get("image"))

        return RemoteMetadata(
            source="ign",
            rating=rating,
            scale=scale,
            summary=summary,
            cover_image=cover,
        )
