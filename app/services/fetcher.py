"""HTTP page fetching for third-party rating sites."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import urljoin

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
REDIRECT_STATUSES = range(300, 400)


class FetchError(Exception):
    """Raised when a page cannot be retrieved."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.timeout = timeout


class PageFetcher:
    """Fetch pages as text, following redirects by hand."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        user_agent: str,
        accept_language: str = "en-US,en;q=0.9",
        max_redirects: int = 10,
        timeout: float = 10.0,
        max_concurrency: int = 8,
    ) -> None:
        self._client = http_client
        self._headers = {
            "User-Agent": user_agent,
            "Accept": ACCEPT_HEADER,
            "Accept-Language": accept_language,
            "Accept-Encoding": "gzip, deflate",
        }
        self._max_redirects = max_redirects
        self._timeout = httpx.Timeout(timeout)
        self._semaphore = asyncio.Semaphore(max_concurrency)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> "PageFetcher":
        return cls(
            http_client,
            user_agent=settings.user_agent,
            accept_language=settings.accept_language,
            max_redirects=settings.max_redirects,
            timeout=settings.fetch_timeout_seconds,
            max_concurrency=settings.max_concurrent_fetches,
        )

    async def fetch(self, url: str) -> str:
        """Return the body of ``url`` decoded as UTF-8 text."""

        current = url
        for _ in range(self._max_redirects + 1):
            response = await self._get(current)
            location = response.headers.get("location")
            if response.status_code in REDIRECT_STATUSES and location:
                try:
                    target = urljoin(current, location)
                except ValueError as exc:
                    raise FetchError(
                        f"Invalid redirect from {current}: {exc}", url=current
                    ) from exc
                logger.debug("Following redirect %s -> %s", current, target)
                current = target
                continue
            if not response.is_success:
                raise FetchError(
                    f"HTTP {response.status_code} for {current}",
                    url=current,
                    status_code=response.status_code,
                )
            # httpx has already undone gzip/deflate; unknown encodings stay raw.
            return response.content.decode("utf-8", errors="replace")

        raise FetchError(
            f"Too many redirects (>{self._max_redirects}) starting from {url}",
            url=url,
        )

    async def _get(self, url: str) -> httpx.Response:
        try:
            async with self._semaphore:
                return await self._client.get(
                    url,
                    headers=self._headers,
                    timeout=self._timeout,
                    follow_redirects=False,
                )
        except httpx.TimeoutException as exc:
            raise FetchError(f"Timed out fetching {url}", url=url, timeout=True) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Request to {url} failed: {exc}", url=url) from exc
        except (httpx.InvalidURL, ValueError) as exc:
            raise FetchError(f"Invalid URL {url}: {exc}", url=url) from exc
