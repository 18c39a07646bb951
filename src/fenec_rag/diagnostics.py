"""Diagnostics utilities for Fenec RAG."""

from __future__ import annotations

import importlib
import platform
import sys
from dataclasses import dataclass

from fenec_rag.app.bootstrap import build_object_store, build_vector_index
from fenec_rag.config import FenecConfig
from fenec_rag.env import has_secret


@dataclass(slots=True)
class DiagnosticResult:
    status: str
    details: str

    def as_dict(self) -> dict[str, str]:
        return {"status": self.status, "details": self.details}


def _check_python_version() -> DiagnosticResult:
    if sys.version_info >= (3, 10):
        return DiagnosticResult("ok", f"Python {platform.python_version()} detected.")
    return DiagnosticResult("error", f"Python {platform.python_version()} detected; 3.10 or newer is required.")


def _check_optional_dependency(module_name: str, friendly_name: str) -> DiagnosticResult:
    try:
        importlib.import_module(module_name)
        return DiagnosticResult("ok", f"{friendly_name} available.")
    except ImportError as exc:
        return DiagnosticResult("warn", f"{friendly_name} missing: {exc}")


def _check_secret(env_var: str, purpose: str) -> DiagnosticResult:
    if has_secret(env_var):
        return DiagnosticResult("ok", f"{purpose} secret found in ${env_var}.")
    return DiagnosticResult("error", f"{purpose} secret missing; set ${env_var}.")


def _required_secrets(config: FenecConfig) -> dict[str, tuple[str, str]]:
    secrets: dict[str, tuple[str, str]] = {}
    storage = config.storage_config()
    if storage.provider == "azure-blob":
        secrets["secret:storage"] = (storage.connection_string_env, "Azure Blob Storage")
    embedding = config.embedding_config()
    if embedding.provider != "fake":
        secrets["secret:embedding"] = (embedding.api_key_env, "Embedding provider")
    completion = config.completion_config()
    secrets["secret:completion"] = (completion.api_key_env, "Completion provider")
    index = config.vector_index_config()
    if index.provider == "azure-search":
        secrets["secret:vector_index"] = (index.api_key_env, "Azure AI Search")
    return secrets


def _check_object_store(config: FenecConfig) -> DiagnosticResult:
    try:
        store = build_object_store(config.storage_config())
        names = store.list_names()
    except Exception as exc:
        return DiagnosticResult("error", f"Object store check failed: {exc}")
    return DiagnosticResult("ok", f"Object store reachable; {len(names)} document(s) listed.")


def _check_vector_index(config: FenecConfig) -> DiagnosticResult:
    index_config = config.vector_index_config()
    if index_config.provider == "memory":
        return DiagnosticResult("not_applicable", "In-memory vector index is created per process.")
    try:
        count = build_vector_index(index_config).count()
    except Exception as exc:
        return DiagnosticResult("error", f"Vector index check failed: {exc}")
    return DiagnosticResult("ok", f"Vector index '{index_config.provider}' reachable with {count} entries.")


def run_diagnostics(config: FenecConfig) -> dict[str, dict[str, str]]:
    """Run a suite of health checks and return structured results."""
    results: dict[str, dict[str, str]] = {}
    results["python"] = _check_python_version().as_dict()
    for key, (env_var, purpose) in _required_secrets(config).items():
        results[key] = _check_secret(env_var, purpose).as_dict()
    results["object_store"] = _check_object_store(config).as_dict()
    results["vector_index"] = _check_vector_index(config).as_dict()

    optional_dependencies = {
        "langchain_openai": "Azure OpenAI / OpenAI integration",
        "azure.storage.blob": "Azure Blob Storage SDK",
        "azure.search.documents": "Azure AI Search SDK",
        "chromadb": "Chroma local vector index",
    }
    for module_name, friendly in optional_dependencies.items():
        key = f"dep:{module_name}"
        results[key] = _check_optional_dependency(module_name, friendly).as_dict()

    return results


__all__ = ["DiagnosticResult", "run_diagnostics"]
