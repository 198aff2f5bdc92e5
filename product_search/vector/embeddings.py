"""
Embedding providers: map free text to a fixed-dimension vector.

Every provider raises EmbeddingError on failure and honours an optional Deadline.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import Optional

import ollama
import openai
from sentence_transformers import SentenceTransformer

from ..core.deadline import Deadline, check_deadline, timeout_for
from ..core.errors import EmbeddingError

# Text embedded once to discover the dimension of remote models
DIMENSION_PROBE = "dimension probe"


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str, deadline: Optional[Deadline] = None) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    This implementation uses a consistent hashing approach to generate
    reproducible embeddings from text, which is useful for testing
    without requiring external model dependencies.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str, deadline: Optional[Deadline] = None) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        check_deadline(deadline, EmbeddingError, "embedding")

        vector = []
        counter = 0
        # Chain sha256 blocks until every dimension is filled
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).hexdigest()
            for i in range(0, len(digest), 8):
                if len(vector) >= self.dimension:
                    break
                value = int(digest[i:i + 8], 16)
                # Map to [-1, 1] for cosine similarity
                vector.append((value / (2 ** 32)) * 2 - 1)
            counter += 1

        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using a local pre-trained model."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str, deadline: Optional[Deadline] = None) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        check_deadline(deadline, EmbeddingError, "embedding")
        try:
            embedding = self.model.encode(text, convert_to_tensor=False)
        except Exception as e:
            raise EmbeddingError(f"sentence-transformers model {self.model_name} failed: {e}", cause=e)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension


class OllamaEmbedding(IEmbeddingProvider):
    """Embeddings from a locally hosted Ollama runtime."""

    def __init__(self, model_name: str = "all-minilm", host: str = "http://localhost:11434", timeout: float = 30.0):
        self.model_name = model_name
        self.host = host
        self.timeout = timeout
        self._dimension = None

    def _client(self, deadline: Optional[Deadline]) -> ollama.Client:
        return ollama.Client(host=self.host, timeout=timeout_for(deadline, self.timeout))

    def embed_text(self, text: str, deadline: Optional[Deadline] = None) -> list[float]:
        check_deadline(deadline, EmbeddingError, "embedding")
        try:
            response = self._client(deadline).embed(model=self.model_name, input=text)
        except ollama.ResponseError as e:
            raise EmbeddingError(f"Ollama model error: {e}", cause=e)
        except Exception as e:
            raise EmbeddingError(f"Ollama embedding request failed: {e}", cause=e)

        embeddings = response["embeddings"]
        if not embeddings:
            raise EmbeddingError(f"Ollama returned no embedding for model {self.model_name}")
        return list(embeddings[0])

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = len(self.embed_text(DIMENSION_PROBE))
        return self._dimension


class OpenAIEmbedding(IEmbeddingProvider):
    """Embeddings from a hosted OpenAI-compatible endpoint."""

    def __init__(self, model_name: str = "text-embedding-ada-002", api_key: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: float = 30.0):
        self.model_name = model_name
        self.timeout = timeout
        self.client = openai.OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self._dimension = None

    def embed_text(self, text: str, deadline: Optional[Deadline] = None) -> list[float]:
        check_deadline(deadline, EmbeddingError, "embedding")
        try:
            response = self.client.with_options(timeout=timeout_for(deadline, self.timeout)).embeddings.create(
                model=self.model_name,
                input=text,
            )
        except openai.OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}", cause=e)

        if not response.data:
            raise EmbeddingError(f"OpenAI returned no embedding for model {self.model_name}")
        return list(response.data[0].embedding)

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = len(self.embed_text(DIMENSION_PROBE))
        return self._dimension
