from __future__ import annotations

from pathlib import Path

import pytest

from fenec_rag.config import FenecConfig
from fenec_rag.diagnostics import DiagnosticResult, run_diagnostics


def make_config(tmp_path: Path, **sections: dict) -> FenecConfig:
    raw = {
        "storage": {"provider": "local", "root": str(tmp_path / "documents")},
        "embedding": {"provider": "fake"},
        "completion": {"provider": "openai", "api_key_env": "FENEC_DIAG_KEY"},
        "vector_index": {"provider": "memory"},
    }
    raw.update(sections)
    return FenecConfig.from_mapping(raw)


def test_diagnostic_result_as_dict() -> None:
    assert DiagnosticResult("ok", "fine").as_dict() == {"status": "ok", "details": "fine"}


def test_run_diagnostics_reports_core_checks(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FENEC_DIAG_KEY", "value")

    results = run_diagnostics(make_config(tmp_path))

    assert results["python"]["status"] == "ok"
    assert results["secret:completion"]["status"] == "ok"
    assert "secret:embedding" not in results
    assert results["object_store"]["status"] == "ok"
    assert results["vector_index"]["status"] == "not_applicable"
    assert "dep:chromadb" in results


def test_missing_secrets_are_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FENEC_DIAG_KEY", raising=False)
    monkeypatch.delenv("FENEC_DIAG_SEARCH_KEY", raising=False)
    config = make_config(
        tmp_path,
        vector_index={
            "provider": "azure-search",
            "endpoint": "https://example.search.windows.net",
            "api_key_env": "FENEC_DIAG_SEARCH_KEY",
        },
    )

    results = run_diagnostics(config)

    assert results["secret:completion"]["status"] == "error"
    assert results["secret:vector_index"]["status"] == "error"
    assert "FENEC_DIAG_SEARCH_KEY" in results["secret:vector_index"]["details"]
    assert results["vector_index"]["status"] == "error"


def test_chroma_index_is_counted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FENEC_DIAG_KEY", "value")
    config = make_config(
        tmp_path,
        vector_index={"provider": "chroma", "persist_directory": str(tmp_path / "chroma")},
    )

    results = run_diagnostics(config)

    assert results["vector_index"]["status"] == "ok"
    assert "0 entries" in results["vector_index"]["details"]
