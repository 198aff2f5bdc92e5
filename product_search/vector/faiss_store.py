"""
FAISS-backed vector collection.
"""

import threading
from typing import List, Optional
import numpy as np
import faiss

from .types import VectorRecord, QueryResult
from .index import IVectorStore
from ..core.deadline import Deadline, check_deadline
from ..core.errors import VectorIndexError


class FaissVectorStore(IVectorStore):
    """FAISS-backed implementation of IVectorStore.

    Vectors are L2-normalized and stored in an inner-product index, so scores are
    cosine similarities. The flat index is wrapped in an `IndexIDMap2`, which keys
    vectors by catalog item id and supports removal, so an upsert is a remove
    followed by an add.
    """

    def __init__(self, collection_name: str = "products", dimension: int = 384):
        """
        Initialize FAISS vector store.

        Args:
            collection_name: Name of the collection this store holds
            dimension: Dimension of the vectors
        """
        super().__init__(collection_name, dimension)
        self.index = None
        self.metadata = {}  # record id -> metadata
        self._lock = threading.RLock()

    def collection_exists(self) -> bool:
        return self.index is not None

    def create_collection_if_not_exists(self) -> bool:
        with self._lock:
            if self.index is not None:
                return False
            self.index = faiss.IndexIDMap2(faiss.IndexFlatIP(self.dimension))
            return True

    @staticmethod
    def _normalize(vector: np.ndarray) -> Optional[np.ndarray]:
        norm = np.linalg.norm(vector)
        if norm == 0:
            return None
        return (vector / norm).astype(np.float32)

    def upsert(self, record: VectorRecord) -> str:
        """Insert or overwrite the vector keyed by `record.id`."""
        self._require_collection()
        vector = self._as_vector(record.vector)

        normalized = self._normalize(vector)
        if normalized is None:
            raise VectorIndexError(f"Cannot index zero vector for record {record.id}")

        ids = np.array([record.id], dtype=np.int64)
        with self._lock:
            self.index.remove_ids(ids)
            self.index.add_with_ids(normalized.reshape(1, -1), ids)
            self.metadata[record.id] = dict(record.metadata)
        return str(record.id)

    def search(self, query_vector, top_k: int = 1, deadline: Optional[Deadline] = None) -> List[QueryResult]:
        """Search for similar vectors and return ranked results."""
        check_deadline(deadline, VectorIndexError, "vector search")
        self._require_collection()
        query = self._as_vector(query_vector)

        if not self.index.ntotal or top_k < 1:
            return []

        normalized_query = self._normalize(query)
        if normalized_query is None:
            return []

        with self._lock:
            scores, indices = self.index.search(
                normalized_query.reshape(1, -1), min(top_k, self.index.ntotal)
            )
            metadata = dict(self.metadata)

        query_results = []
        for score, record_id in zip(scores[0], indices[0]):
            # FAISS pads missing neighbours with -1
            if record_id < 0 or int(record_id) not in metadata:
                continue
            query_results.append(QueryResult(
                id=int(record_id),
                score=float(score),
                metadata=dict(metadata[int(record_id)])
            ))

        return query_results

    def get(self, record_id: int) -> Optional[VectorRecord]:
        with self._lock:
            if self.index is None or record_id not in self.metadata:
                return None
            vector = self.index.reconstruct(int(record_id))
            return VectorRecord(id=record_id, vector=vector, metadata=dict(self.metadata[record_id]))

    def ids(self) -> List[int]:
        with self._lock:
            return list(self.metadata.keys())

    def delete(self, record_id: int) -> None:
        with self._lock:
            if self.index is not None:
                self.index.remove_ids(np.array([record_id], dtype=np.int64))
            self.metadata.pop(record_id, None)

    def clear(self) -> None:
        """Clear all records from the FAISS store, keeping the collection."""
        with self._lock:
            if self.index is not None:
                self.index.reset()
            self.metadata.clear()
