"""Merge third-party ratings into catalog entries."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Sequence

from ..models import (
    COVER_PRIORITY,
    PLATFORM_ORDER,
    CatalogEntry,
    EnrichedEntry,
    RemoteMetadata,
)
from .cache import ResponseCache
from .douban import DoubanScraper
from .fetcher import PageFetcher
from .ign import IGNScraper
from .imdb import IMDbScraper
from .scraper import PlatformScraper

logger = logging.getLogger(__name__)


def resolve_cover_image(
    own_cover: str | None, remote: Mapping[str, RemoteMetadata]
) -> str | None:
    """Prefer the entry's own cover, then the first platform that has one."""

    if own_cover:
        return own_cover
    for platform in COVER_PRIORITY:
        metadata = remote.get(platform)
        if metadata is not None and metadata.cover_image:
            return metadata.cover_image
    return None


def build_scrapers(fetcher: PageFetcher) -> dict[str, PlatformScraper]:
    """Return one scraper per supported platform."""

    scrapers: list[PlatformScraper] = [
        DoubanScraper(fetcher),
        IMDbScraper(fetcher),
        IGNScraper(fetcher),
    ]
    return {scraper.platform: scraper for scraper in scrapers}


class EnrichmentService:
    """Coordinates platform scrapers and the shared response cache."""

    def __init__(
        self,
        scrapers: Mapping[str, PlatformScraper],
        cache: ResponseCache[RemoteMetadata],
    ) -> None:
        self._scrapers = dict(scrapers)
        self._cache = cache

    @property
    def cache(self) -> ResponseCache[RemoteMetadata]:
        return self._cache

    async def enrich(self, entry: CatalogEntry) -> EnrichedEntry:
        """Attach remote metadata for every platform the entry links to."""

        platforms = [
            platform
            for platform in PLATFORM_ORDER
            if entry.links.get(platform) and platform in self._scrapers
        ]
        results = await asyncio.gather(
            *(self._lookup(platform, entry.links[platform]) for platform in platforms),
            return_exceptions=True,
        )

        remote: dict[str, RemoteMetadata] = {}
        for platform, result in zip(platforms, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Enrichment failed for %s on %s: %s", entry.id, platform, result
                )
                result = RemoteMetadata.failure(platform, str(result))
            remote[platform] = result

        return EnrichedEntry.from_entry(
            entry, remote, resolve_cover_image(entry.cover_image, remote)
        )

    async def enrich_all(
        self, categories: Mapping[str, Sequence[CatalogEntry]]
    ) -> dict[str, list[EnrichedEntry]]:
        """Enrich every entry of every category concurrently.

        Category keys and entry order match the input.
        """

        names = list(categories.keys())
        enriched = await asyncio.gather(
            *(self._enrich_category(categories[name]) for name in names)
        )
        return dict(zip(names, enriched))

    async def _enrich_category(
        self, entries: Sequence[CatalogEntry]
    ) -> list[EnrichedEntry]:
        return list(await asyncio.gather(*(self.enrich(entry) for entry in entries)))

    async def _lookup(self, platform: str, url: str) -> RemoteMetadata:
        scraper = self._scrapers[platform]
        return await self._cache.get_or_compute(
            f"{platform}:{url}", lambda: scraper.scrape(url)
        )
