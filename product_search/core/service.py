"""
Explicit wiring of catalog, ports, indexer and resolver from settings.
"""

from dataclasses import dataclass
from typing import Optional

from .catalog import SqliteCatalog
from .config import (
    ResolverSettings,
    get_embedding_provider,
    get_generation_provider,
    get_vector_store,
    require_valid_settings,
    verify_embedding_dimension,
)
from .indexer import CatalogIndexer
from .resolver import QueryResolver
from .schema import RebuildReport
from .seed import seed_catalog
from ..util.logging import logger


@dataclass
class SearchService:
    settings: ResolverSettings
    catalog: SqliteCatalog
    indexer: CatalogIndexer
    resolver: QueryResolver
    last_rebuild: Optional[RebuildReport] = None

    def startup(self) -> Optional[RebuildReport]:
        """
        Prepare for query traffic: seed, check the embedding dimension, create the
        collection and run the warm-up rebuild. ConfigurationError propagates.
        """
        if self.settings.seed_catalog:
            inserted = seed_catalog(self.catalog)
            if inserted:
                logger.log_operation("catalog.seed", "success", {"inserted": inserted})

        verify_embedding_dimension(self.indexer.embedding_provider, self.settings)
        self.indexer.ensure_collection()

        if self.settings.rebuild_on_startup:
            self.last_rebuild = self.indexer.rebuild()
        return self.last_rebuild

    def rebuild(self) -> RebuildReport:
        self.last_rebuild = self.indexer.rebuild()
        return self.last_rebuild


def build_search_service(settings: ResolverSettings, embedding_provider=None, vector_store=None,
                         generation_provider=None, catalog: Optional[SqliteCatalog] = None) -> SearchService:
    """
    Build the service graph. Ports not passed in are created from settings.

    Raises:
        ConfigurationError: when the settings are invalid
    """
    require_valid_settings(settings)

    embedding_provider = embedding_provider or get_embedding_provider(settings)
    vector_store = vector_store or get_vector_store(settings)
    generation_provider = generation_provider or get_generation_provider(settings)
    catalog = catalog or SqliteCatalog(settings.db_path)

    indexer = CatalogIndexer(catalog, embedding_provider, vector_store)
    resolver = QueryResolver(embedding_provider, vector_store, generation_provider, settings)
    return SearchService(settings=settings, catalog=catalog, indexer=indexer, resolver=resolver)
