"""
Vector overlay over the catalog: embedding providers and keyed vector collections.
"""

from .index import IVectorStore, SimpleInMemoryVectorStore
from .types import VectorRecord, QueryResult
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding

__all__ = [
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'VectorRecord',
    'QueryResult',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
]
