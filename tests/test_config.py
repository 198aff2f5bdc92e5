"""
Configuration loading, validation and port factories.
"""

from dataclasses import FrozenInstanceError

import pytest

from product_search.core.config import (
    ResolverSettings,
    get_embedding_provider,
    get_generation_provider,
    get_vector_store,
    load_settings,
    require_valid_settings,
    validate_settings,
    verify_embedding_dimension,
)
from product_search.core.errors import ConfigurationError
from product_search.core.prompts import DEFAULT_SYSTEM_PROMPT
from product_search.generation.mock_generator import MockGenerator
from product_search.vector.embeddings import DeterministicHashEmbedding
from product_search.vector.index import SimpleInMemoryVectorStore

CONFIG_VARS = [
    "DEPLOYMENT_PROFILE", "SCORE_THRESHOLD", "EMBED_PROVIDER", "EMBED_MODEL_NAME",
    "EMBEDDING_DIMENSION", "VECTOR_PROVIDER", "VECTOR_COLLECTION", "GENERATION_PROVIDER",
    "CHAT_MODEL_NAME", "OPENAI_API_KEY", "SYSTEM_PROMPT", "QUERY_TIMEOUT_SEC",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


def test_development_profile_defaults():
    settings = load_settings()

    assert settings.profile == "development"
    assert settings.score_threshold == 0.4
    assert settings.embed_provider == "ollama"
    assert settings.embed_model_name == "all-minilm"
    assert settings.embedding_dimension == 384
    assert settings.chat_model_name == "llama3.2"
    assert settings.collection_name == "products"
    assert settings.system_prompt == DEFAULT_SYSTEM_PROMPT


def test_production_profile_defaults(monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_PROFILE", "production")

    settings = load_settings()

    assert settings.score_threshold == 0.8
    assert settings.embed_provider == "openai"
    assert settings.embedding_dimension == 1536
    assert settings.chat_model_name == "gpt-4o-mini"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SCORE_THRESHOLD", "0.65")
    monkeypatch.setenv("EMBED_PROVIDER", "HASH")
    monkeypatch.setenv("EMBEDDING_DIMENSION", "64")
    monkeypatch.setenv("VECTOR_COLLECTION", "gear")
    monkeypatch.setenv("SYSTEM_PROMPT", "Only talk about boots.")

    settings = load_settings()

    assert settings.score_threshold == 0.65
    assert settings.embed_provider == "hash"
    assert settings.embedding_dimension == 64
    assert settings.collection_name == "gear"
    assert settings.system_prompt == "Only talk about boots."


def test_settings_are_immutable():
    settings = load_settings()

    with pytest.raises(FrozenInstanceError):
        settings.score_threshold = 0.1


def test_unknown_profile_is_fatal(monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_PROFILE", "staging")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_non_numeric_threshold_is_fatal(monkeypatch):
    monkeypatch.setenv("SCORE_THRESHOLD", "high")

    with pytest.raises(ConfigurationError, match="SCORE_THRESHOLD"):
        load_settings()


def test_validate_reports_every_issue():
    settings = ResolverSettings(
        score_threshold=None,
        embed_provider="word2vec",
        vector_provider="pinecone",
        generation_provider="gpt-magic",
        embedding_dimension=0,
        query_timeout_sec=0,
    )

    issues = validate_settings(settings)

    assert "SCORE_THRESHOLD is required" in issues
    assert "Invalid EMBED_PROVIDER: word2vec" in issues
    assert "Invalid VECTOR_PROVIDER: pinecone" in issues
    assert "Invalid GENERATION_PROVIDER: gpt-magic" in issues
    assert "EMBEDDING_DIMENSION must be >= 1" in issues
    assert "QUERY_TIMEOUT_SEC must be > 0" in issues


def test_threshold_out_of_range():
    issues = validate_settings(ResolverSettings(score_threshold=1.5))

    assert any("within [0, 1]" in issue for issue in issues)


def test_openai_requires_key():
    settings = ResolverSettings(embed_provider="openai", openai_api_key=None)

    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        require_valid_settings(settings)


def test_default_settings_are_valid():
    settings = ResolverSettings()

    assert require_valid_settings(settings) is settings


def test_verify_embedding_dimension():
    settings = ResolverSettings(embedding_dimension=384)

    verify_embedding_dimension(DeterministicHashEmbedding(384), settings)
    with pytest.raises(ConfigurationError, match="dimension mismatch"):
        verify_embedding_dimension(DeterministicHashEmbedding(768), settings)


def test_factories_build_configured_ports():
    settings = ResolverSettings(embedding_dimension=32, collection_name="gear")

    embedding = get_embedding_provider(settings)
    store = get_vector_store(settings)
    generator = get_generation_provider(settings)

    assert isinstance(embedding, DeterministicHashEmbedding)
    assert embedding.get_dimension() == 32
    assert isinstance(store, SimpleInMemoryVectorStore)
    assert store.collection_name == "gear"
    assert store.dimension == 32
    assert isinstance(generator, MockGenerator)


def test_faiss_factory():
    from product_search.vector.faiss_store import FaissVectorStore

    store = get_vector_store(ResolverSettings(vector_provider="faiss", embedding_dimension=8))

    assert isinstance(store, FaissVectorStore)
    assert store.dimension == 8


def test_factory_rejects_unknown_provider():
    with pytest.raises(ConfigurationError):
        get_embedding_provider(ResolverSettings(embed_provider="nope"))
