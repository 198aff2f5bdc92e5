"""
FastAPI transport for catalog listing, keyword search and semantic search.
"""

from contextlib import asynccontextmanager
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .schemas import (
    HealthResponse,
    ProductModel,
    RebuildResponse,
    SearchResponseModel,
)
from ..core.config import VERSION, load_settings
from ..core.db import health_check
from ..core.service import SearchService, build_search_service
from ..util.logging import logger


def _default_service_factory() -> SearchService:
    return build_search_service(load_settings())


def create_app(service: Optional[SearchService] = None,
               service_factory: Callable[[], SearchService] = _default_service_factory) -> FastAPI:
    """
    Create the API application.

    The service is built (unless given) and warmed up in the lifespan handler, so a
    ConfigurationError stops startup before any request is accepted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        search_service = service or service_factory()
        search_service.startup()
        app.state.search_service = search_service
        logger.log_operation("api.startup", "success", {
            "profile": search_service.settings.profile,
            "threshold": search_service.settings.score_threshold,
            "indexed": search_service.indexer.vector_store.count(),
        })
        yield

    app = FastAPI(
        title="Product Search API",
        version=VERSION,
        description="Semantic search over the outdoor product catalog",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_service(request: Request) -> SearchService:
        search_service = getattr(request.app.state, "search_service", None)
        if search_service is None:
            raise HTTPException(status_code=503, detail="Search service is not ready")
        return search_service

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(request: Request):
        """Check system health."""
        search_service = get_service(request)
        db_health = health_check(search_service.settings.db_path)
        store = search_service.indexer.vector_store
        last_rebuild = search_service.last_rebuild

        return HealthResponse(
            status="healthy" if db_health and store.collection_exists() else "unhealthy",
            version=VERSION,
            profile=search_service.settings.profile,
            db_health=db_health,
            catalog_count=search_service.catalog.count_items() if db_health else 0,
            indexed_count=store.count() if store.collection_exists() else 0,
            collection=store.collection_name,
            last_rebuild=RebuildResponse.from_report(last_rebuild) if last_rebuild else None,
        )

    @app.get("/api/product", response_model=List[ProductModel])
    def list_products(request: Request):
        search_service = get_service(request)
        return [ProductModel.from_item(item) for item in search_service.catalog.list_all_items()]

    @app.get("/api/product/search/{term}", response_model=SearchResponseModel)
    def keyword_search(term: str, request: Request):
        """Plain name search against the catalog, no model involved."""
        search_service = get_service(request)
        items = search_service.catalog.search_by_name(term)
        return SearchResponseModel(
            response=f"{len(items)} Products found for [{term}]",
            items=[ProductModel.from_item(item) for item in items],
        )

    @app.get("/api/aisearch/{search}", response_model=SearchResponseModel)
    def semantic_search(search: str, request: Request):
        """Semantic search. Port failures come back as a degraded response, not an error status."""
        search_service = get_service(request)
        return SearchResponseModel.from_response(search_service.resolver.resolve(search))

    @app.post("/api/index/rebuild", response_model=RebuildResponse)
    def rebuild_index(request: Request):
        search_service = get_service(request)
        return RebuildResponse.from_report(search_service.rebuild())

    return app


app = create_app()
