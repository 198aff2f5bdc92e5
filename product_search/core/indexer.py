"""
Builds the vector collection from the catalog.

The collection is a projection of the catalog: one vector per item id, overwritten on
every rebuild. A rebuild is meant to run once at warm-up, before query traffic.
"""

import threading
import time

import numpy as np

from .catalog import CatalogSource
from .errors import EmbeddingError, VectorIndexError
from .prompts import describe_item
from .results import Err, attempt
from .schema import CatalogItem, IndexFailure, RebuildReport
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from ..vector.types import VectorRecord


class CatalogIndexer:
    """Embeds every catalog item and upserts it into the vector collection."""

    def __init__(self, catalog: CatalogSource, embedding_provider: IEmbeddingProvider, vector_store: IVectorStore):
        self.catalog = catalog
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self._rebuild_lock = threading.Lock()

    def ensure_collection(self) -> None:
        """Create the collection if absent. Raises VectorIndexError if that fails."""
        created = self.vector_store.create_collection_if_not_exists()
        if created:
            logger.log_operation("index.collection", "created", {"collection": self.vector_store.collection_name})

    def rebuild(self) -> RebuildReport:
        """
        Embed and upsert every catalog item.

        Per-item embedding or upsert failures are logged, recorded in the report and
        skipped; the rest of the batch still runs. Overlapping calls are serialized.

        Returns:
            RebuildReport with the number of items indexed and the per-item failures
        """
        with self._rebuild_lock:
            start_time = time.time()
            self.ensure_collection()

            items = self.catalog.list_all_items()
            logger.log_operation("index.rebuild", "started", {
                "collection": self.vector_store.collection_name,
                "items": len(items)
            })

            report = RebuildReport()
            for item in items:
                failure = self._index_item(item)
                if failure is None:
                    report.indexed += 1
                else:
                    report.failures.append(failure)

            duration_ms = (time.time() - start_time) * 1000
            logger.log_rebuild(report.indexed, report.failed, duration_ms, self.vector_store.collection_name)
            return report

    def _index_item(self, item: CatalogItem):
        """Index one item. Returns an IndexFailure, or None on success."""
        embedded = attempt(self.embedding_provider.embed_text, EmbeddingError, describe_item(item))
        if isinstance(embedded, Err):
            return self._record_failure(item, embedded)

        record = VectorRecord(
            id=item.id,
            vector=np.asarray(embedded.value, dtype=np.float32),
            metadata=item.to_metadata()
        )
        upserted = attempt(self.vector_store.upsert, VectorIndexError, record)
        if isinstance(upserted, Err):
            return self._record_failure(item, upserted)

        logger.log_index_item(item.id, item.name, details={"record_id": upserted.value})
        return None

    def _record_failure(self, item: CatalogItem, failure: Err) -> IndexFailure:
        # Dimension mismatch is fatal, not a per-item failure
        configuration_error = failure.configuration_error()
        if configuration_error is not None:
            raise configuration_error

        error = failure.error
        stage = "upsert" if isinstance(error, VectorIndexError) else error.stage
        logger.log_index_item(item.id, item.name, status="failed", details={
            "stage": stage,
            "error": error.message
        })
        return IndexFailure(item_id=item.id, name=item.name, stage=stage, message=error.message)
