"""Common behaviour for platform rating scrapers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..models import Platform, RemoteMetadata
from .fetcher import FetchError, PageFetcher

logger = logging.getLogger(__name__)


class PlatformScraper(ABC):
    """Turns a platform page URL into normalized :class:`RemoteMetadata`.

    ``scrape`` never raises: transport and parsing failures are reported as an
    error-shaped record so one broken site cannot fail a whole catalog entry.
    """

    platform: Platform

    def __init__(self, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher

    async def scrape(self, url: str) -> RemoteMetadata:
        try:
            return await self._scrape(url)
        except FetchError as exc:
            logger.warning("[%s] fetch failed for %s: %s", self.platform, url, exc)
            return RemoteMetadata.failure(self.platform, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "[%s] scrape failed for %s: %s",
                self.platform,
                url,
                exc,
                exc_info=True,
            )
            return RemoteMetadata.failure(self.platform, str(exc) or type(exc).__name__)

    @abstractmethod
    async def _scrape(self, url: str) -> RemoteMetadata:
        """Fetch ``url`` and extract the platform's metadata."""
