"""Entry point for the FastAPI-powered media service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .services.cache import ResponseCache
from .services.enrichment import EnrichmentService, build_scrapers
from .services.fetcher import PageFetcher
from .store import CatalogStore, CatalogStoreError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            follow_redirects=False,
            timeout=httpx.Timeout(settings.fetch_timeout_seconds),
        )
    )
    fetcher = PageFetcher.from_settings(settings, http_client)
    cache: ResponseCache[Any] = ResponseCache(settings.cache_ttl_seconds)
    service = EnrichmentService(build_scrapers(fetcher), cache)
    store = CatalogStore(settings.media_path)
    store.add_listener(cache.clear)

    fastapi_app.state.enrichment_service = service
    fastapi_app.state.catalog_store = store

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Personal media catalog enriched with third-party ratings",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_enrichment_service(app: FastAPI) -> EnrichmentService:
    service = getattr(app.state, "enrichment_service", None)
    if not isinstance(service, EnrichmentService):
        raise RuntimeError("Enrichment service not initialised")
    return service


def get_catalog_store(app: FastAPI) -> CatalogStore:
    store = getattr(app.state, "catalog_store", None)
    if not isinstance(store, CatalogStore):
        raise RuntimeError("Catalog store not initialised")
    return store


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/media")
    async def media() -> JSONResponse:
        store = get_catalog_store(fastapi_app)
        service = get_enrichment_service(fastapi_app)
        try:
            categories = store.load()
        except CatalogStoreError as exc:
            logger.error("Failed to load media catalog: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        enriched = await service.enrich_all(categories)
        payload = {
            category: [entry.to_payload() for entry in entries]
            for category, entries in enriched.items()
        }
        return JSONResponse(payload, headers={"Cache-Control": "no-store"})


app = create_app()
