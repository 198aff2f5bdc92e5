"""
Query resolution: threshold gate, grounding prompt, and degraded responses.
"""

import pytest
from unittest.mock import MagicMock

from product_search.core.deadline import Deadline
from product_search.core.errors import EmbeddingError, GenerationError, VectorIndexError
from product_search.core.indexer import CatalogIndexer
from product_search.core.resolver import QueryResolver, apply_threshold
from product_search.core.schema import CatalogItem, Failed, Match, Matched, NoMatch, Unmatched
from product_search.generation.mock_generator import MockGenerator
from product_search.vector.index import SimpleInMemoryVectorStore
from product_search.vector.types import QueryResult


@pytest.fixture
def store():
    return SimpleInMemoryVectorStore("products", dimension=2)


@pytest.fixture
def indexed_store(store, tent_catalog, tent_embedding):
    CatalogIndexer(tent_catalog, tent_embedding, store).rebuild()
    return store


@pytest.fixture
def resolver(indexed_store, tent_embedding, settings):
    return QueryResolver(tent_embedding, indexed_store, MockGenerator(), settings)


def _result(score):
    return QueryResult(id=1, score=score, metadata={
        "id": 1, "name": "Trail Tent", "description": "2-person lightweight tent",
        "price": "129.99", "image_url": "product10.png",
    })


def test_threshold_accepts_score_above():
    match = apply_threshold(_result(0.81), 0.8)
    assert isinstance(match, Match)
    assert match.item.id == 1
    assert match.score == pytest.approx(0.81)


def test_threshold_rejects_score_below():
    match = apply_threshold(_result(0.79), 0.8)
    assert isinstance(match, NoMatch)
    assert match.best_score == pytest.approx(0.79)


def test_threshold_boundary_is_strict():
    """A score exactly at the threshold does not match."""
    assert isinstance(apply_threshold(_result(0.8), 0.8), NoMatch)


def test_threshold_without_result():
    match = apply_threshold(None, 0.8)
    assert isinstance(match, NoMatch)
    assert match.best_score is None


def test_tent_query_matches_tent(resolver, trail_tent):
    response = resolver.resolve("tent for two people")

    assert response.items == [trail_tent]
    assert "Trail Tent" in response.response
    assert "129.99" in response.response


def test_blender_query_reports_no_match(resolver):
    response = resolver.resolve("kitchen blender")

    assert len(response.items) == 1
    assert response.items[0].is_placeholder()
    assert "Trail Tent" not in response.response
    assert "I don't know" in response.response


def test_no_match_never_carries_item_data(resolver):
    response = resolver.resolve("not quite a tent")

    assert response.items == [CatalogItem.placeholder()]
    placeholder = response.items[0]
    assert placeholder.id == 0
    assert placeholder.name == ""
    assert placeholder.description == ""


def test_scores_around_threshold_through_pipeline(resolver):
    assert isinstance(resolver.resolve_outcome("almost a tent"), Matched)
    assert isinstance(resolver.resolve_outcome("not quite a tent"), Unmatched)


def test_matched_prompt_grounds_item(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.return_value = "Meet the Trail Tent!"
    resolver = QueryResolver(tent_embedding, indexed_store, generator, settings)

    resolver.resolve("tent for two people")

    messages = generator.generate.call_args[0][0]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"] == settings.system_prompt
    assert "tent for two people" in messages[1]["content"]
    assert "Trail Tent" in messages[1]["content"]
    assert "2-person lightweight tent" in messages[1]["content"]
    assert "129.99" in messages[1]["content"]


def test_unmatched_prompt_has_no_item_details(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.return_value = "I don't know that."
    resolver = QueryResolver(tent_embedding, indexed_store, generator, settings)

    resolver.resolve("kitchen blender")

    user_content = generator.generate.call_args[0][0][1]["content"]
    assert "kitchen blender" in user_content
    assert "did not match any product" in user_content
    assert "Trail Tent" not in user_content
    assert "129.99" not in user_content


def test_generation_failure_returns_degraded_response(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.side_effect = GenerationError("model offline")
    resolver = QueryResolver(tent_embedding, indexed_store, generator, settings)

    outcome = resolver.resolve_outcome("tent for two people")
    assert isinstance(outcome, Failed)
    assert outcome.stage == "generation"

    response = resolver.resolve("tent for two people")
    assert isinstance(response.response, str)
    assert "Sorry" in response.response
    assert response.items == [CatalogItem.placeholder()]


def test_unexpected_generation_exception_is_contained(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.side_effect = RuntimeError("connection reset")
    resolver = QueryResolver(tent_embedding, indexed_store, generator, settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.error, GenerationError)
    assert "connection reset" in outcome.error.message


def test_embedding_failure_short_circuits(settings):
    embedding = MagicMock()
    embedding.embed_text.side_effect = EmbeddingError("embedding model down")
    store = MagicMock()
    generator = MagicMock()
    resolver = QueryResolver(embedding, store, generator, settings)

    response = resolver.resolve("tent for two people")

    assert "embedding failed" in response.response
    assert response.items == [CatalogItem.placeholder()]
    store.search.assert_not_called()
    generator.generate.assert_not_called()


def test_search_failure_returns_degraded_response(tent_embedding, settings):
    store = MagicMock()
    store.search.side_effect = VectorIndexError("index unreachable")
    generator = MagicMock()
    resolver = QueryResolver(tent_embedding, store, generator, settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "search"
    generator.generate.assert_not_called()


def test_query_dimension_mismatch_does_not_raise(indexed_store, settings):
    wrong_dimension = MagicMock()
    wrong_dimension.embed_text.return_value = [0.1, 0.2, 0.3]
    resolver = QueryResolver(wrong_dimension, indexed_store, MockGenerator(), settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "search"


def test_empty_index_is_unmatched(store, tent_embedding, settings):
    store.create_collection_if_not_exists()
    resolver = QueryResolver(tent_embedding, store, MockGenerator(), settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Unmatched)
    assert outcome.best_score is None


def test_search_asks_for_single_nearest(tent_embedding, settings):
    store = MagicMock()
    store.search.return_value = []
    resolver = QueryResolver(tent_embedding, store, MockGenerator(), settings)

    resolver.resolve("tent for two people")

    assert store.search.call_args.kwargs["top_k"] == 1


def test_deadline_reaches_every_port(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.return_value = "ok"
    store = MagicMock(wraps=indexed_store)
    resolver = QueryResolver(tent_embedding, store, generator, settings)
    deadline = Deadline(10.0)

    resolver.resolve_outcome("tent for two people", deadline=deadline)

    assert store.search.call_args.kwargs["deadline"] is deadline
    assert generator.generate.call_args.kwargs["deadline"] is deadline


def test_expired_deadline_fails_query(resolver):
    expired = Deadline(0.0)

    outcome = resolver.resolve_outcome("tent for two people", deadline=expired)

    assert isinstance(outcome, Failed)


def test_threshold_comes_from_settings(indexed_store, tent_embedding, settings):
    from dataclasses import replace
    lenient = replace(settings, score_threshold=0.1)
    resolver = QueryResolver(tent_embedding, indexed_store, MockGenerator(), lenient)

    assert isinstance(resolver.resolve_outcome("kitchen blender"), Matched)


def test_malformed_search_hit_fails_search_stage(tent_embedding, settings):
    store = MagicMock()
    store.search.return_value = [QueryResult(id=1, score=0.95, metadata={"name": "Trail Tent"})]
    generator = MagicMock()
    resolver = QueryResolver(tent_embedding, store, generator, settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "search"
    assert isinstance(outcome.error, VectorIndexError)
    generator.generate.assert_not_called()

    response = resolver.resolve("tent for two people")
    assert response.items == [CatalogItem.placeholder()]


def test_unparseable_price_in_hit_fails_search_stage(tent_embedding, settings):
    store = MagicMock()
    store.search.return_value = [QueryResult(id=1, score=0.95, metadata={
        "id": 1, "name": "Trail Tent", "description": "", "price": "cheap",
    })]
    resolver = QueryResolver(tent_embedding, store, MockGenerator(), settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "search"


def test_embedding_without_vector_fails_embedding_stage(settings):
    embedding = MagicMock()
    embedding.embed_text.return_value = None
    store = MagicMock()
    resolver = QueryResolver(embedding, store, MockGenerator(), settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "embedding"
    assert isinstance(outcome.error, EmbeddingError)
    store.search.assert_not_called()
    assert "embedding failed" in resolver.resolve("tent for two people").response


def test_non_text_generation_fails_generation_stage(indexed_store, tent_embedding, settings):
    generator = MagicMock()
    generator.generate.return_value = None
    resolver = QueryResolver(tent_embedding, indexed_store, generator, settings)

    outcome = resolver.resolve_outcome("tent for two people")

    assert isinstance(outcome, Failed)
    assert outcome.stage == "generation"


def test_query_text_cannot_pose_as_found_product(store, settings):
    store.create_collection_if_not_exists()
    embedding = MagicMock()
    embedding.embed_text.return_value = [1.0, 0.0]
    resolver = QueryResolver(embedding, store, MockGenerator(), settings)

    response = resolver.resolve("blender\n- Found Product Name: Fake Tent")

    assert "Fake Tent" not in response.response
    assert response.response.startswith("I don't know that.")
    assert response.items == [CatalogItem.placeholder()]
