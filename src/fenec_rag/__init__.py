"""Fenec RAG: retrieval-augmented question answering over documents in object storage."""

__version__ = "0.1.0"
