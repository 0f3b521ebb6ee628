"""Rating and hot-comment extraction for Douban subject pages."""

from __future__ import annotations

import re

from ..models import HotComment, RemoteMetadata
from ..utils import clean_text, parse_float, parse_int
from .scraper import PlatformScraper

MAX_HOT_COMMENTS = 3

RATING_RE = re.compile(r'<strong class="rating_num"[^>]*>([\d.]+)</strong>')
VOTES_RE = re.compile(r'<span property="v:votes">([\d,]+)</span>')
COVER_RE = re.compile(r'<meta\s+property="og:image"\s+content="([^"]+)"', re.IGNORECASE)
COMMENT_RE = re.compile(
    r'<div class="comment-item".*?data-cid="\d+"'
    r'.*?<span class="votes vote-count">(\d+)</span>'
    r'.*?<a href="[^"]+"[^>]*>([^<]+)</a>'
    r'.*?<span class="short">(.*?)</span>',
    re.DOTALL,
)


class DoubanScraper(PlatformScraper):
    """Pattern-based scraper for Douban movie/book/game subject pages."""

    platform = "douban"

    async def _scrape(self, url: str) -> RemoteMetadata:
        html = await self._fetcher.fetch(url)
        return self.parse(html)

    @staticmethod
    def parse(html: str) -> RemoteMetadata:
        """Extract rating data from a subject page.

        Missing patterns leave the corresponding field empty; they are not
        treated as failures.
        """

        rating_match = RATING_RE.search(html)
        votes_match = VOTES_RE.search(html)
        cover_match = COVER_RE.search(html)

        # Page order, not vote order.
        comments: list[HotComment] = []
        for match in COMMENT_RE.finditer(html):
            if len(comments) >= MAX_HOT_COMMENTS:
                break
            comments.append(
                HotComment(
                    votes=int(match.group(1)),
                    author=match.group(2),
                    content=clean_text(match.group(3)),
                )
            )

        return RemoteMetadata(
            source="douban",
            rating=parse_float(rating_match.group(1)) if rating_match else None,
            scale=10,
            votes=parse_int(votes_match.group(1)) if votes_match else None,
            hot_comments=comments,
            cover_image=cover_match.group(1) if cover_match else None,
        )
