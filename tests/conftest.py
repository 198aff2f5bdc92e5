"""
Shared fakes for catalog search tests.
"""

import math
import os
import tempfile
from decimal import Decimal

import pytest

from product_search.core.catalog import StaticCatalog
from product_search.core.config import ResolverSettings
from product_search.core.errors import EmbeddingError
from product_search.core.prompts import describe_item
from product_search.core.schema import CatalogItem
from product_search.vector.embeddings import IEmbeddingProvider


def unit_at(score: float) -> list:
    """2-D unit vector whose cosine similarity with [1, 0] is `score`."""
    return [score, math.sqrt(max(0.0, 1.0 - score * score))]


class KeyedEmbedding(IEmbeddingProvider):
    """Embedding fake returning fixed vectors per text."""

    def __init__(self, vectors, dimension=2, fail_on=(), default=None):
        self.vectors = dict(vectors)
        self.dimension = dimension
        self.fail_on = set(fail_on)
        self.default = default if default is not None else [0.0, 1.0]
        self.calls = []

    def embed_text(self, text, deadline=None):
        self.calls.append(text)
        if text in self.fail_on:
            raise EmbeddingError(f"model unavailable for {text!r}")
        return list(self.vectors.get(text, self.default))

    def get_dimension(self):
        return self.dimension


TRAIL_TENT = CatalogItem(
    id=1,
    name="Trail Tent",
    description="2-person lightweight tent",
    price=Decimal("129.99"),
    image_url="product10.png",
)


@pytest.fixture
def trail_tent():
    return TRAIL_TENT


@pytest.fixture
def tent_catalog():
    return StaticCatalog([TRAIL_TENT])


@pytest.fixture
def tent_embedding():
    """Tent description at [1, 0]; queries placed at chosen similarities."""
    return KeyedEmbedding({
        describe_item(TRAIL_TENT): [1.0, 0.0],
        "tent for two people": unit_at(0.91),
        "kitchen blender": unit_at(0.22),
        "almost a tent": unit_at(0.81),
        "not quite a tent": unit_at(0.79),
    })


@pytest.fixture
def settings():
    return ResolverSettings(
        profile="production",
        score_threshold=0.8,
        embed_provider="hash",
        embedding_dimension=2,
        vector_provider="memory",
        generation_provider="mock",
        query_timeout_sec=5.0,
        seed_catalog=False,
    )


@pytest.fixture
def temp_db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.remove(path)
