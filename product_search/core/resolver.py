"""
Request-time orchestration of a semantic catalog query.

embed query -> nearest item -> threshold gate -> grounding prompt -> generated reply.
Each stage's output feeds the next, so the stages run strictly in order. A failure in
any port call ends the query in the Failed state, which is serialized to an apologetic
response; `resolve` never raises.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np

from .config import ResolverSettings
from .deadline import Deadline
from .errors import EmbeddingError, GenerationError, VectorIndexError
from .prompts import build_messages
from .results import Err, attempt
from .schema import (
    CatalogItem,
    Failed,
    Match,
    MatchResult,
    Matched,
    NoMatch,
    QueryOutcome,
    SearchResponse,
    Unmatched,
    to_search_response,
)
from ..generation.base import IGenerationProvider
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from ..vector.types import QueryResult


def apply_threshold(result: Optional[QueryResult], threshold: float) -> MatchResult:
    """
    Accept the nearest hit only when its score is strictly greater than the threshold.

    A missing hit (empty collection or zero query vector) is NoMatch with no score.
    """
    if result is None:
        return NoMatch()
    if result.score > threshold:
        return Match(item=CatalogItem.from_metadata(result.metadata), score=float(result.score))
    return NoMatch(best_score=float(result.score))


class QueryResolver:
    """Answers natural-language catalog queries grounded in at most one matched item."""

    def __init__(self, embedding_provider: IEmbeddingProvider, vector_store: IVectorStore,
                 generation_provider: IGenerationProvider, settings: ResolverSettings):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.generation_provider = generation_provider
        self.settings = settings

    @property
    def threshold(self) -> float:
        return self.settings.score_threshold

    def resolve(self, query_text: str) -> SearchResponse:
        """Resolve a query to the flat response shape. Never raises."""
        return to_search_response(self.resolve_outcome(query_text))

    def resolve_outcome(self, query_text: str, deadline: Optional[Deadline] = None) -> QueryOutcome:
        """
        Run the query pipeline and return Matched, Unmatched or Failed.

        Args:
            query_text: The user's free-text query
            deadline: Overrides the deadline built from QUERY_TIMEOUT_SEC

        Returns:
            The internal query outcome
        """
        if deadline is None:
            deadline = Deadline(self.settings.query_timeout_sec)

        # Embedding
        embedded = attempt(self._embed, EmbeddingError, query_text, deadline)
        if isinstance(embedded, Err):
            return self._fail("embedding", query_text, embedded.error)
        logger.log_query_stage("embedding", query_text, details={"dimension": embedded.value.shape[0]})

        # Searching
        searched = attempt(self._nearest_match, VectorIndexError, embedded.value, deadline)
        if isinstance(searched, Err):
            return self._fail("search", query_text, searched.error)
        nearest, match = searched.value
        logger.log_query_stage("search", query_text, status="matched" if isinstance(match, Match) else "unmatched", details={
            "score": round(nearest.score, 4) if nearest else None,
            "threshold": self.threshold,
            "item_id": match.item.id if isinstance(match, Match) else None,
        })

        # Generating
        messages = build_messages(self.settings.system_prompt, query_text, match)
        generated = attempt(self._generate, GenerationError, messages, deadline)
        if isinstance(generated, Err):
            return self._fail("generation", query_text, generated.error)
        logger.log_query_stage("generation", query_text, details={"response_length": len(generated.value)})

        if isinstance(match, Match):
            return Matched(item=match.item, score=match.score, text=generated.value)
        return Unmatched(best_score=match.best_score, text=generated.value)

    def _embed(self, query_text: str, deadline: Deadline) -> np.ndarray:
        vector = np.asarray(self.embedding_provider.embed_text(query_text, deadline=deadline), dtype=np.float32)
        if vector.ndim != 1 or vector.shape[0] == 0:
            raise EmbeddingError(f"Embedding provider returned no usable vector (shape {vector.shape})")
        return vector

    def _nearest_match(self, query_vector: np.ndarray, deadline: Deadline) -> Tuple[Optional[QueryResult], MatchResult]:
        """Top-1 search plus threshold gate; a malformed hit fails the search stage."""
        results = self.vector_store.search(query_vector, top_k=1, deadline=deadline)
        nearest = results[0] if results else None
        return nearest, apply_threshold(nearest, self.threshold)

    def _generate(self, messages: List[Dict[str, str]], deadline: Deadline) -> str:
        text = self.generation_provider.generate(messages, deadline=deadline)
        if not isinstance(text, str):
            raise GenerationError(f"Generation provider returned {type(text).__name__}, expected text")
        return text

    def _fail(self, stage: str, query_text: str, error) -> Failed:
        logger.log_query_stage(stage, query_text, status="failed", details={"error": error.message})
        return Failed(stage=stage, error=error)
