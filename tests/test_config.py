from __future__ import annotations

from pathlib import Path

import pytest

from fenec_rag.config import FenecConfig
from fenec_rag.exceptions import ConfigurationError

EXAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "fenec_config.yaml"


def test_example_config_loads() -> None:
    config = FenecConfig.from_file(EXAMPLE_CONFIG)

    assert config.source == EXAMPLE_CONFIG
    assert config.storage_config().provider == "local"
    assert config.embedding_config().model_name == "text-embedding-3-large"
    assert config.completion_config().provider == "azure-openai"
    assert config.vector_index_config().vector_field == "contentVector"
    assert config.ingestion_config().max_chunk_size == 500
    assert tuple(config.ingestion_config().extensions) == (".txt",)
    assert config.query_config().top_k == 5
    assert config.logging_level() == "INFO"


def test_empty_mapping_uses_defaults() -> None:
    config = FenecConfig.from_mapping({})

    assert config.storage_config().root == Path("data/documents")
    assert config.embedding_config().provider == "azure-openai"
    assert config.vector_index_config().provider == "chroma"
    assert config.vector_index_config().persist_directory == Path("data/chroma")
    assert config.ingestion_config().category == "general"
    assert config.query_config().context_separator == "\n---\n"


def test_sections_override_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "storage:\n"
        "  provider: azure-blob\n"
        "  container: manuals\n"
        "embedding:\n"
        "  provider: fake\n"
        "  fake_size: 16\n"
        "vector_index:\n"
        "  provider: memory\n"
        "ingestion:\n"
        "  max_chunk_size: 800\n"
        "  extensions: ['.txt', '.md']\n"
        "query:\n"
        "  top_k: 3\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )

    config = FenecConfig.from_file(path)

    assert config.storage_config().container == "manuals"
    assert config.embedding_config().fake_size == 16
    assert config.vector_index_config().provider == "memory"
    assert config.ingestion_config().extensions == (".txt", ".md")
    assert config.query_config().top_k == 3
    assert config.logging_level() == "DEBUG"


@pytest.mark.parametrize(
    ("section", "provider"),
    [("storage", "s3"), ("embedding", "huggingface"), ("completion", "ollama"), ("vector_index", "pinecone")],
)
def test_unknown_provider_is_rejected(section: str, provider: str) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        FenecConfig.from_mapping({section: {"provider": provider}})

    assert provider in exc_info.value.message
    assert "Supported" in exc_info.value.message


@pytest.mark.parametrize(
    "raw",
    [
        {"ingestion": {"max_chunk_size": 0}},
        {"query": {"top_k": 0}},
        {"logging": {"level": "chatty"}},
        {"storage": ["not", "a", "mapping"]},
        {"ingestion": {"extensions": 5}},
        {"ingestion": {"extensions": [".txt", 3]}},
        {"ingestion": {"extensions": []}},
        {"ingestion": {"extensions": ["."]}},
    ],
)
def test_invalid_values_are_rejected(raw: dict) -> None:
    with pytest.raises(ConfigurationError):
        FenecConfig.from_mapping(raw)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (".txt", (".txt",)),
        ("txt", (".txt",)),
        (["TXT", " md "], (".txt", ".md")),
    ],
)
def test_extensions_are_normalized(value: object, expected: tuple[str, ...]) -> None:
    config = FenecConfig.from_mapping({"ingestion": {"extensions": value}})

    assert config.ingestion_config().extensions == expected


def test_missing_file_raises_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        FenecConfig.from_file(tmp_path / "missing.yaml")


def test_invalid_yaml_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("storage: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        FenecConfig.from_file(path)
