from __future__ import annotations

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from fenec_rag.exceptions import ConfigurationError, EmbeddingError
from fenec_rag.rag.chunking import Chunk
from fenec_rag.rag.embeddings import EmbeddingConfig, EmbeddingFactory, embed_chunks


class DummyEmbeddings(Embeddings):
    def __init__(self, vectors: list[list[float]]) -> None:
        self.vectors = vectors
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return self.vectors

    def embed_query(self, text: str) -> list[float]:
        return self.vectors[0]


def _chunks(*texts: str) -> list[Chunk]:
    return [Chunk(text=text, source="doc.txt") for text in texts]


def test_fake_provider_builds_deterministic_embeddings() -> None:
    factory = EmbeddingFactory(EmbeddingConfig(provider="fake", fake_size=8))

    embeddings = factory.build()

    assert isinstance(embeddings, DeterministicFakeEmbedding)
    assert factory.build() is embeddings
    assert len(embeddings.embed_query("hello")) == 8
    assert embeddings.embed_query("hello") == embeddings.embed_query("hello")


def test_unknown_provider_is_rejected() -> None:
    factory = EmbeddingFactory(EmbeddingConfig(provider="word2vec"))  # type: ignore[arg-type]

    with pytest.raises(ConfigurationError) as exc_info:
        factory.build()

    assert "azure-openai" in str(exc_info.value)


def test_azure_provider_requires_endpoint() -> None:
    factory = EmbeddingFactory(EmbeddingConfig(provider="azure-openai", endpoint=None))

    with pytest.raises(ConfigurationError):
        factory.build()


def test_azure_provider_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FENEC_TEST_KEY", raising=False)
    config = EmbeddingConfig(
        provider="azure-openai",
        endpoint="https://example.openai.azure.com/",
        api_key_env="FENEC_TEST_KEY",
    )

    with pytest.raises(ConfigurationError) as exc_info:
        EmbeddingFactory(config).build()

    assert "FENEC_TEST_KEY" in str(exc_info.value)


def test_embed_chunks_makes_one_batched_call_and_pairs_in_order() -> None:
    embeddings = DummyEmbeddings([[1.0, 0.0], [0.0, 1.0], [1, 1]])

    embedded = embed_chunks(embeddings, _chunks("first", "second", "third"))

    assert embeddings.calls == [["first", "second", "third"]]
    assert [item.text for item in embedded] == ["first", "second", "third"]
    assert [item.vector for item in embedded] == [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]
    assert all(isinstance(value, float) for value in embedded[2].vector)


def test_embed_chunks_skips_provider_for_empty_input() -> None:
    embeddings = DummyEmbeddings([])

    assert embed_chunks(embeddings, []) == []
    assert embeddings.calls == []


def test_embed_chunks_rejects_count_mismatch() -> None:
    embeddings = DummyEmbeddings([[1.0, 0.0]])

    with pytest.raises(EmbeddingError) as exc_info:
        embed_chunks(embeddings, _chunks("first", "second"))

    assert exc_info.value.document_name == "doc.txt"


def test_embed_chunks_rejects_mixed_dimensions() -> None:
    embeddings = DummyEmbeddings([[1.0, 0.0], [1.0]])

    with pytest.raises(EmbeddingError):
        embed_chunks(embeddings, _chunks("first", "second"))


def test_embed_chunks_rejects_empty_vectors() -> None:
    embeddings = DummyEmbeddings([[]])

    with pytest.raises(EmbeddingError):
        embed_chunks(embeddings, _chunks("first"))
