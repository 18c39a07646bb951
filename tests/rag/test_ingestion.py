from __future__ import annotations

from pathlib import Path

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from fenec_rag.exceptions import EmptyDocumentSetError, IngestionError, ValidationError
from fenec_rag.rag import DocumentIngestionPipeline, IngestionConfig, InMemoryVectorIndex
from fenec_rag.storage import LocalDirectoryObjectStore


def marker(text: str) -> list[float]:
    return [float(len(text)), float(ord(text[0])), float(ord(text[-1]))]


class MarkerEmbeddings(Embeddings):
    """Encodes each text into a vector that identifies it, failing on a poison word."""

    def __init__(self, poison: str | None = None) -> None:
        self.poison = poison
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.poison and any(self.poison in text for text in texts):
            raise RuntimeError("embedding quota exceeded")
        return [marker(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return marker(text)


def write_docs(root: Path, docs: dict[str, str]) -> LocalDirectoryObjectStore:
    for name, content in docs.items():
        (root / name).write_text(content, encoding="utf-8")
    return LocalDirectoryObjectStore(root)


def test_two_documents_produce_expected_chunk_counts(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"doc_a.txt": "a" * 400, "doc_b.txt": "b" * 1500})
    index = InMemoryVectorIndex()
    pipeline = DocumentIngestionPipeline(store, DeterministicFakeEmbedding(size=16), index)

    result = pipeline.ingest()

    assert [(doc.name, doc.chunk_count) for doc in result.documents] == [("doc_a.txt", 1), ("doc_b.txt", 3)]
    assert result.chunk_count == 4
    assert index.count() == 4
    assert sorted(len(entry.content) for entry in index.entries()) == [400, 500, 500, 500]


def test_each_entry_keeps_the_vector_of_its_own_text(tmp_path: Path) -> None:
    content = "\n\n".join(f"{chr(ord('a') + i)} paragraph number {i} " + "x" * (i * 7) + "!" for i in range(12))
    store = write_docs(tmp_path, {"manual.txt": content})
    index = InMemoryVectorIndex()
    embeddings = MarkerEmbeddings()
    pipeline = DocumentIngestionPipeline(store, embeddings, index, IngestionConfig(max_chunk_size=60))

    result = pipeline.ingest()

    assert len(embeddings.calls) == 1
    assert result.chunk_count == len(embeddings.calls[0]) > 1
    for entry in index.entries():
        assert entry.content_vector == marker(entry.content)
    assert [entry.id for entry in index.entries()] == result.documents[0].entry_ids


def test_only_supported_extensions_are_ingested(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"guide.txt": "Guide text.", "diagram.png": "binary", "notes.md": "# Notes"})
    embeddings = MarkerEmbeddings()
    pipeline = DocumentIngestionPipeline(store, embeddings, InMemoryVectorIndex())

    result = pipeline.ingest()

    assert [doc.name for doc in result.documents] == ["guide.txt"]
    assert embeddings.calls == [["Guide text."]]


def test_no_eligible_documents_is_rejected(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"notes.md": "# Notes"})
    pipeline = DocumentIngestionPipeline(store, MarkerEmbeddings(), InMemoryVectorIndex())

    with pytest.raises(EmptyDocumentSetError):
        pipeline.ingest()


def test_blank_document_is_skipped_without_collaborator_calls(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"blank.txt": " \n\n \r\n", "real.txt": "Real content."})
    embeddings = MarkerEmbeddings()
    index = InMemoryVectorIndex()
    pipeline = DocumentIngestionPipeline(store, embeddings, index)

    result = pipeline.ingest()

    assert [(doc.name, doc.chunk_count) for doc in result.documents] == [("blank.txt", 0), ("real.txt", 1)]
    assert embeddings.calls == [["Real content."]]
    assert index.count() == 1


def test_repeated_ingestion_accumulates_entries(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"doc.txt": "One.\n\nTwo."})
    index = InMemoryVectorIndex()
    pipeline = DocumentIngestionPipeline(store, MarkerEmbeddings(), index)

    first = pipeline.ingest()
    second = pipeline.ingest()

    assert index.count() == first.chunk_count + second.chunk_count == 2
    assert set(first.documents[0].entry_ids).isdisjoint(second.documents[0].entry_ids)


def test_failure_aborts_run_and_keeps_committed_documents(tmp_path: Path) -> None:
    store = write_docs(
        tmp_path,
        {"a.txt": "First document.", "b.txt": "This one is poison.", "c.txt": "Never reached."},
    )
    embeddings = MarkerEmbeddings(poison="poison")
    index = InMemoryVectorIndex()
    pipeline = DocumentIngestionPipeline(store, embeddings, index)

    with pytest.raises(IngestionError) as exc_info:
        pipeline.ingest()

    error = exc_info.value
    assert error.document_name == "b.txt"
    assert [doc.name for doc in error.committed] == ["a.txt"]
    assert "embedding quota exceeded" in error.message
    assert isinstance(error.__cause__, RuntimeError)
    assert index.count() == 1
    assert len(embeddings.calls) == 2


def test_ingest_document_targets_one_name(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"a.txt": "Alpha.", "b.txt": "Beta."})
    embeddings = MarkerEmbeddings()
    pipeline = DocumentIngestionPipeline(store, embeddings, InMemoryVectorIndex(), IngestionConfig(category="manuals"))

    ingestion = pipeline.ingest_document("b.txt")

    assert ingestion.name == "b.txt"
    assert ingestion.chunk_count == 1
    assert embeddings.calls == [["Beta."]]


def test_ingest_document_rejects_unsupported_extension(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"a.pdf": "binary"})
    pipeline = DocumentIngestionPipeline(store, MarkerEmbeddings(), InMemoryVectorIndex())

    with pytest.raises(ValidationError):
        pipeline.ingest_document("a.pdf")


def test_ingest_document_wraps_missing_document(tmp_path: Path) -> None:
    pipeline = DocumentIngestionPipeline(LocalDirectoryObjectStore(tmp_path), MarkerEmbeddings(), InMemoryVectorIndex())

    with pytest.raises(IngestionError) as exc_info:
        pipeline.ingest_document("missing.txt")

    assert exc_info.value.document_name == "missing.txt"


def test_entries_carry_configured_category(tmp_path: Path) -> None:
    store = write_docs(tmp_path, {"a.txt": "Alpha."})
    index = InMemoryVectorIndex()
    pipeline = DocumentIngestionPipeline(store, MarkerEmbeddings(), index, IngestionConfig(category="manuals"))

    pipeline.ingest()

    assert [entry.category for entry in index.entries()] == ["manuals"]
