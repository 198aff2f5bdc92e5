"""
Environment-driven configuration for the catalog search service.

Settings are read once into an immutable `ResolverSettings` and passed explicitly to
the indexer, the resolver and the port factories.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import ConfigurationError
from .prompts import DEFAULT_SYSTEM_PROMPT

# Version string
VERSION = "1.0.0"

VALID_PROFILES = ("development", "production")
VALID_EMBED_PROVIDERS = ("hash", "sentence_transformers", "ollama", "openai")
VALID_VECTOR_PROVIDERS = ("memory", "faiss")
VALID_GENERATION_PROVIDERS = ("mock", "ollama", "openai")

# Per-profile defaults. Locally hosted small embedding models spread scores lower
# than hosted ones, so each profile carries its own threshold.
PROFILE_DEFAULTS = {
    "development": {
        "score_threshold": 0.4,
        "embed_provider": "ollama",
        "embed_model_name": "all-minilm",
        "embedding_dimension": 384,
        "generation_provider": "ollama",
        "chat_model_name": "llama3.2",
    },
    "production": {
        "score_threshold": 0.8,
        "embed_provider": "openai",
        "embed_model_name": "text-embedding-ada-002",
        "embedding_dimension": 1536,
        "generation_provider": "openai",
        "chat_model_name": "gpt-4o-mini",
    },
}


@dataclass(frozen=True)
class ResolverSettings:
    """Immutable runtime configuration."""
    profile: str = "development"
    score_threshold: Optional[float] = 0.4
    embed_provider: str = "hash"
    embed_model_name: str = "all-minilm"
    embedding_dimension: int = 384
    vector_provider: str = "memory"
    collection_name: str = "products"
    generation_provider: str = "mock"
    chat_model_name: str = "llama3.2"
    ollama_host: str = "http://localhost:11434"
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    query_timeout_sec: float = 30.0
    db_path: str = "./data/catalog.db"
    rebuild_on_startup: bool = True
    seed_catalog: bool = True
    debug: bool = False


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> ResolverSettings:
    """Read settings from the environment, applying the deployment profile defaults."""
    profile = os.getenv("DEPLOYMENT_PROFILE", "development").lower()
    if profile not in PROFILE_DEFAULTS:
        raise ConfigurationError(f"Invalid DEPLOYMENT_PROFILE: {profile}")
    defaults = PROFILE_DEFAULTS[profile]

    return ResolverSettings(
        profile=profile,
        score_threshold=_env_float("SCORE_THRESHOLD", defaults["score_threshold"]),
        embed_provider=os.getenv("EMBED_PROVIDER", defaults["embed_provider"]).lower(),
        embed_model_name=os.getenv("EMBED_MODEL_NAME", defaults["embed_model_name"]),
        embedding_dimension=_env_int("EMBEDDING_DIMENSION", defaults["embedding_dimension"]),
        vector_provider=os.getenv("VECTOR_PROVIDER", "memory").lower(),
        collection_name=os.getenv("VECTOR_COLLECTION", "products"),
        generation_provider=os.getenv("GENERATION_PROVIDER", defaults["generation_provider"]).lower(),
        chat_model_name=os.getenv("CHAT_MODEL_NAME", defaults["chat_model_name"]),
        ollama_host=os.getenv("OLLAMA_HOST", "http://localhost:11434"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        system_prompt=os.getenv("SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
        query_timeout_sec=_env_float("QUERY_TIMEOUT_SEC", 30.0),
        db_path=os.getenv("DB_PATH", "./data/catalog.db"),
        rebuild_on_startup=_env_bool("REBUILD_ON_STARTUP", "true"),
        seed_catalog=_env_bool("SEED_CATALOG", "true"),
        debug=_env_bool("DEBUG", "false"),
    )


def validate_settings(settings: ResolverSettings) -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    if settings.score_threshold is None:
        issues.append("SCORE_THRESHOLD is required")
    elif not 0.0 <= settings.score_threshold <= 1.0:
        issues.append(f"SCORE_THRESHOLD must be within [0, 1], got {settings.score_threshold}")

    if settings.embed_provider not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {settings.embed_provider}")

    if settings.vector_provider not in VALID_VECTOR_PROVIDERS:
        issues.append(f"Invalid VECTOR_PROVIDER: {settings.vector_provider}")

    if settings.generation_provider not in VALID_GENERATION_PROVIDERS:
        issues.append(f"Invalid GENERATION_PROVIDER: {settings.generation_provider}")

    if settings.embedding_dimension < 1:
        issues.append("EMBEDDING_DIMENSION must be >= 1")

    if not settings.collection_name.strip():
        issues.append("VECTOR_COLLECTION cannot be empty")

    if not settings.system_prompt.strip():
        issues.append("SYSTEM_PROMPT cannot be empty")

    if settings.query_timeout_sec is None or settings.query_timeout_sec <= 0:
        issues.append("QUERY_TIMEOUT_SEC must be > 0")

    uses_openai = "openai" in (settings.embed_provider, settings.generation_provider)
    if uses_openai and not settings.openai_api_key:
        issues.append("OPENAI_API_KEY is required when an openai provider is configured")

    return issues


def require_valid_settings(settings: ResolverSettings) -> ResolverSettings:
    """Raise ConfigurationError listing every issue, or return the settings unchanged."""
    issues = validate_settings(settings)
    if issues:
        raise ConfigurationError("; ".join(issues))
    return settings


def verify_embedding_dimension(embedding_provider, settings: ResolverSettings) -> None:
    """Fail fast when the embedding model disagrees with the configured index dimension."""
    actual = embedding_provider.get_dimension()
    if actual != settings.embedding_dimension:
        raise ConfigurationError(
            f"Embedding dimension mismatch: provider yields {actual}, "
            f"EMBEDDING_DIMENSION is {settings.embedding_dimension}"
        )


def get_embedding_provider(settings: ResolverSettings):
    """Build the configured embedding provider."""
    if settings.embed_provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=settings.embedding_dimension)
    elif settings.embed_provider == "sentence_transformers":
        from ..vector.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(settings.embed_model_name)
    elif settings.embed_provider == "ollama":
        from ..vector.embeddings import OllamaEmbedding
        return OllamaEmbedding(settings.embed_model_name, host=settings.ollama_host)
    elif settings.embed_provider == "openai":
        from ..vector.embeddings import OpenAIEmbedding
        return OpenAIEmbedding(
            settings.embed_model_name,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )
    raise ConfigurationError(f"Invalid EMBED_PROVIDER: {settings.embed_provider}")


def get_vector_store(settings: ResolverSettings):
    """Build the configured vector store for the settings' collection."""
    if settings.vector_provider == "memory":
        from ..vector.index import SimpleInMemoryVectorStore
        return SimpleInMemoryVectorStore(settings.collection_name, settings.embedding_dimension)
    elif settings.vector_provider == "faiss":
        from ..vector.faiss_store import FaissVectorStore
        return FaissVectorStore(settings.collection_name, settings.embedding_dimension)
    raise ConfigurationError(f"Invalid VECTOR_PROVIDER: {settings.vector_provider}")


def get_generation_provider(settings: ResolverSettings):
    """Build the configured chat generation provider."""
    if settings.generation_provider == "mock":
        from ..generation.mock_generator import MockGenerator
        return MockGenerator()
    elif settings.generation_provider == "ollama":
        from ..generation.ollama_generator import OllamaGenerator
        return OllamaGenerator(settings.chat_model_name, host=settings.ollama_host)
    elif settings.generation_provider == "openai":
        from ..generation.openai_generator import OpenAIGenerator
        return OpenAIGenerator(
            settings.chat_model_name,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )
    raise ConfigurationError(f"Invalid GENERATION_PROVIDER: {settings.generation_provider}")


def ensure_db_directory(db_path: str) -> None:
    """Ensure the database directory exists."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
