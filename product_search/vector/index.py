"""
Vector collection interface and the in-memory implementation.

The collection is a projection of the catalog keyed by item id. It can always be
rebuilt from the catalog, so it is never treated as a source of truth.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from .types import VectorRecord, QueryResult
from ..core.deadline import Deadline, check_deadline
from ..core.errors import ConfigurationError, VectorIndexError


class IVectorStore(ABC):
    """Abstract interface for a keyed vector collection."""

    def __init__(self, collection_name: str, dimension: int):
        self.collection_name = collection_name
        self.dimension = dimension

    @abstractmethod
    def collection_exists(self) -> bool:
        """Check whether the collection has been created."""
        pass

    @abstractmethod
    def create_collection_if_not_exists(self) -> bool:
        """Create the collection if absent. Never drops data. Returns True if created."""
        pass

    @abstractmethod
    def upsert(self, record: VectorRecord) -> str:
        """Insert or overwrite the record with the same id. Returns the record id."""
        pass

    @abstractmethod
    def search(self, query_vector, top_k: int = 1, deadline: Optional[Deadline] = None) -> List[QueryResult]:
        """Return up to `top_k` nearest records, highest score first."""
        pass

    @abstractmethod
    def get(self, record_id: int) -> Optional[VectorRecord]:
        """Fetch a stored record by id."""
        pass

    @abstractmethod
    def ids(self) -> List[int]:
        """Ids of every stored record."""
        pass

    def count(self) -> int:
        return len(self.ids())

    @abstractmethod
    def delete(self, record_id: int) -> None:
        """Delete a vector record by ID."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    def _require_collection(self) -> None:
        if not self.collection_exists():
            raise VectorIndexError(f"Collection '{self.collection_name}' does not exist")

    def _as_vector(self, values) -> np.ndarray:
        """Convert to a float32 array and check it against the collection dimension."""
        vector = np.asarray(values, dtype=np.float32).reshape(-1)
        if vector.shape[0] != self.dimension:
            raise ConfigurationError(
                f"Vector dimension {vector.shape[0]} does not match collection "
                f"'{self.collection_name}' dimension {self.dimension}"
            )
        return vector


class SimpleInMemoryVectorStore(IVectorStore):
    """In-memory collection using cosine similarity."""

    def __init__(self, collection_name: str = "products", dimension: int = 384):
        super().__init__(collection_name, dimension)
        self._created = False
        self._vectors = {}  # record_id -> VectorRecord
        self._index = {}    # record_id -> normalized_vector
        self._lock = threading.RLock()

    def collection_exists(self) -> bool:
        return self._created

    def create_collection_if_not_exists(self) -> bool:
        with self._lock:
            if self._created:
                return False
            self._created = True
            return True

    def upsert(self, record: VectorRecord) -> str:
        self._require_collection()
        vector = self._as_vector(record.vector)

        norm = np.linalg.norm(vector)
        if norm == 0:
            raise VectorIndexError(f"Cannot index zero vector for record {record.id}")
        normalized = vector / norm

        with self._lock:
            self._vectors[record.id] = VectorRecord(id=record.id, vector=vector, metadata=dict(record.metadata))
            self._index[record.id] = normalized
        return str(record.id)

    def search(self, query_vector, top_k: int = 1, deadline: Optional[Deadline] = None) -> List[QueryResult]:
        check_deadline(deadline, VectorIndexError, "vector search")
        self._require_collection()
        query = self._as_vector(query_vector)

        with self._lock:
            index = dict(self._index)
            records = dict(self._vectors)

        if not index or top_k < 1:
            return []

        norm = np.linalg.norm(query)
        if norm == 0:
            # Zero query vector has no direction to compare
            return []
        normalized_query = query / norm

        similarities = {
            record_id: float(np.dot(normalized_query, stored_vector))
            for record_id, stored_vector in index.items()
        }

        # Sort by similarity (descending) and return top_k results
        sorted_results = sorted(similarities.items(), key=lambda x: x[1], reverse=True)

        return [
            QueryResult(id=record_id, score=score, metadata=dict(records[record_id].metadata))
            for record_id, score in sorted_results[:top_k]
        ]

    def get(self, record_id: int) -> Optional[VectorRecord]:
        with self._lock:
            return self._vectors.get(record_id)

    def ids(self) -> List[int]:
        with self._lock:
            return list(self._vectors.keys())

    def delete(self, record_id: int) -> None:
        with self._lock:
            self._vectors.pop(record_id, None)
            self._index.pop(record_id, None)

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()
            self._index.clear()
