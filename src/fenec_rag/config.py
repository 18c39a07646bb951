"""Configuration helpers for Fenec RAG."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fenec_rag.exceptions import ConfigurationError
from fenec_rag.llm import SUPPORTED_COMPLETION_PROVIDERS, CompletionConfig
from fenec_rag.rag.embeddings import SUPPORTED_EMBEDDING_PROVIDERS, EmbeddingConfig
from fenec_rag.rag.ingestion import IngestionConfig
from fenec_rag.rag.query import QueryConfig
from fenec_rag.rag.vector_store import SUPPORTED_INDEX_PROVIDERS, VectorIndexConfig
from fenec_rag.storage.object_store import SUPPORTED_STORAGE_PROVIDERS, StorageConfig

DEFAULT_CONFIG_PATH = Path("configs/fenec_config.yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _section(raw: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        message = f"Config section '{name}' must be a mapping, got {type(value).__name__}"
        raise ConfigurationError(message, details={"section": name})
    return dict(value)


def _check_provider(section: str, provider: str, supported: tuple[str, ...]) -> None:
    if provider not in supported:
        message = f"Unsupported {section} provider '{provider}'. Supported: {', '.join(supported)}."
        raise ConfigurationError(message, details={"section": section, "provider": provider})


def _normalize_extensions(value: Any) -> tuple[str, ...]:
    """Accept a single extension or a list; return lower-case suffixes with a leading dot."""
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)) or not items:
        message = "ingestion.extensions must be a non-empty list of file extensions"
        raise ConfigurationError(message, details={"section": "ingestion"})
    extensions: list[str] = []
    for item in items:
        if not isinstance(item, str) or not item.strip(" .\t"):
            message = f"Invalid file extension in ingestion.extensions: {item!r}"
            raise ConfigurationError(message, details={"section": "ingestion"})
        suffix = item.strip().lower()
        extensions.append(suffix if suffix.startswith(".") else f".{suffix}")
    return tuple(extensions)


@dataclass(slots=True, frozen=True)
class FenecConfig:
    """Read-only view over the YAML configuration file.

    Secrets never live in the file; every provider section names the environment
    variable holding its key or connection string.
    """

    source: Path | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: Path) -> FenecConfig:
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except FileNotFoundError as exc:
            message = f"Config file not found: {path}"
            raise ConfigurationError(message, details={"path": str(path)}) from exc
        except yaml.YAMLError as exc:
            message = f"Config file {path} is not valid YAML"
            raise ConfigurationError(message, details={"path": str(path)}) from exc
        return cls.from_mapping(raw, source=path)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, source: Path | None = None) -> FenecConfig:
        if not isinstance(raw, Mapping):
            message = "Config root must be a mapping"
            raise ConfigurationError(message, details={"path": str(source) if source else None})
        instance = cls(source=source, raw=dict(raw))
        instance.validate()
        return instance

    def validate(self) -> None:
        """Resolve every section once so bad values fail at load time."""
        self.storage_config()
        self.embedding_config()
        self.completion_config()
        self.vector_index_config()
        self.ingestion_config()
        self.query_config()
        self.logging_level()

    def storage_config(self) -> StorageConfig:
        cfg = _section(self.raw, "storage")
        defaults = StorageConfig()
        provider = cfg.get("provider", defaults.provider)
        _check_provider("storage", provider, SUPPORTED_STORAGE_PROVIDERS)
        return StorageConfig(
            provider=provider,
            root=Path(cfg.get("root", defaults.root)),
            container=cfg.get("container", defaults.container),
            connection_string_env=cfg.get("connection_string_env", defaults.connection_string_env),
            create_container=bool(cfg.get("create_container", defaults.create_container)),
        )

    def embedding_config(self) -> EmbeddingConfig:
        cfg = _section(self.raw, "embedding")
        defaults = EmbeddingConfig()
        provider = cfg.get("provider", defaults.provider)
        _check_provider("embedding", provider, SUPPORTED_EMBEDDING_PROVIDERS)
        return EmbeddingConfig(
            provider=provider,
            model_name=cfg.get("model_name", defaults.model_name),
            deployment=cfg.get("deployment", defaults.deployment),
            endpoint=cfg.get("endpoint", defaults.endpoint),
            api_version=cfg.get("api_version", defaults.api_version),
            api_key_env=cfg.get("api_key_env", defaults.api_key_env),
            dimensions=cfg.get("dimensions", defaults.dimensions),
            timeout=cfg.get("timeout", defaults.timeout),
            fake_size=int(cfg.get("fake_size", defaults.fake_size)),
        )

    def completion_config(self) -> CompletionConfig:
        cfg = _section(self.raw, "completion")
        defaults = CompletionConfig()
        provider = cfg.get("provider", defaults.provider)
        _check_provider("completion", provider, SUPPORTED_COMPLETION_PROVIDERS)
        return CompletionConfig(
            provider=provider,
            model=cfg.get("model", defaults.model),
            deployment=cfg.get("deployment", defaults.deployment),
            endpoint=cfg.get("endpoint", defaults.endpoint),
            api_version=cfg.get("api_version", defaults.api_version),
            api_key_env=cfg.get("api_key_env", defaults.api_key_env),
            temperature=float(cfg.get("temperature", defaults.temperature)),
            max_tokens=cfg.get("max_tokens", defaults.max_tokens),
            timeout=cfg.get("timeout", defaults.timeout),
        )

    def vector_index_config(self) -> VectorIndexConfig:
        cfg = _section(self.raw, "vector_index")
        defaults = VectorIndexConfig()
        provider = cfg.get("provider", defaults.provider)
        _check_provider("vector_index", provider, SUPPORTED_INDEX_PROVIDERS)
        return VectorIndexConfig(
            provider=provider,
            collection_name=cfg.get("collection_name", defaults.collection_name),
            persist_directory=Path(cfg.get("persist_directory", defaults.persist_directory)),
            endpoint=cfg.get("endpoint", defaults.endpoint),
            index_name=cfg.get("index_name", defaults.index_name),
            api_key_env=cfg.get("api_key_env", defaults.api_key_env),
            vector_field=cfg.get("vector_field", defaults.vector_field),
            content_field=cfg.get("content_field", defaults.content_field),
        )

    def ingestion_config(self) -> IngestionConfig:
        cfg = _section(self.raw, "ingestion")
        defaults = IngestionConfig()
        max_chunk_size = int(cfg.get("max_chunk_size", defaults.max_chunk_size))
        if max_chunk_size <= 0:
            message = f"ingestion.max_chunk_size must be positive, got {max_chunk_size}"
            raise ConfigurationError(message, details={"section": "ingestion"})
        return IngestionConfig(
            max_chunk_size=max_chunk_size,
            extensions=_normalize_extensions(cfg.get("extensions", defaults.extensions)),
            category=cfg.get("category", defaults.category),
        )

    def query_config(self) -> QueryConfig:
        cfg = _section(self.raw, "query")
        defaults = QueryConfig()
        top_k = int(cfg.get("top_k", defaults.top_k))
        if top_k < 1:
            message = f"query.top_k must be at least 1, got {top_k}"
            raise ConfigurationError(message, details={"section": "query"})
        return QueryConfig(
            top_k=top_k,
            enriched_query_template=cfg.get("enriched_query_template", defaults.enriched_query_template),
            system_preamble=cfg.get("system_preamble", defaults.system_preamble),
            context_separator=cfg.get("context_separator", defaults.context_separator),
        )

    def logging_level(self) -> str:
        cfg = _section(self.raw, "logging")
        level = str(cfg.get("level", "INFO")).upper()
        if level not in LOG_LEVELS:
            message = f"Unsupported logging level '{level}'. Supported: {', '.join(LOG_LEVELS)}."
            raise ConfigurationError(message, details={"section": "logging"})
        return level
