"""Command-line interface for Fenec RAG."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fenec_rag.app.bootstrap import RuntimeComponents, build_object_store, build_runtime_components
from fenec_rag.config import DEFAULT_CONFIG_PATH, FenecConfig
from fenec_rag.diagnostics import run_diagnostics
from fenec_rag.exceptions import EmptyDocumentSetError, FenecRAGError, IngestionError
from fenec_rag.logging_config import configure_logging
from fenec_rag.rag.chunking import ChunkingConfig, ParagraphChunker
from fenec_rag.rag.ingestion import IngestionResult
from fenec_rag.rag.query import Answered, NoContext, QueryOutcome

console = Console()

_STATUS_STYLES = {"ok": "green", "warn": "yellow", "error": "red", "not_applicable": "dim"}

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the YAML configuration file.",
)


def _fail(exc: FenecRAGError, title: str = "Error") -> NoReturn:
    console.print(Panel(Text(str(exc)), title=f"[bold red]{title}[/bold red]", border_style="red"))
    raise SystemExit(1)


def _load_config(config_path: Path) -> FenecConfig:
    try:
        config = FenecConfig.from_file(config_path)
    except FenecRAGError as exc:
        _fail(exc, "Configuration Error")
    configure_logging(config.logging_level())
    return config


def _load_runtime(config_path: Path) -> RuntimeComponents:
    config = _load_config(config_path)
    try:
        return build_runtime_components(config)
    except FenecRAGError as exc:
        _fail(exc, "Configuration Error")


def render_ingestion_result(result: IngestionResult, *, title: str = "Ingestion complete") -> None:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Document", style="cyan")
    table.add_column("Chunks", justify="right")
    for document in result.documents:
        table.add_row(document.name, str(document.chunk_count))
    console.print(table)
    console.print(f"[bold]Total chunks indexed:[/bold] {result.chunk_count}")


def render_outcome(outcome: QueryOutcome) -> None:
    if isinstance(outcome, Answered):
        title, style = "Answer", "green"
    elif isinstance(outcome, NoContext):
        title, style = "No Context", "yellow"
    else:
        title, style = "Error", "red"
    console.print(Panel(Text(outcome.answer), title=f"[bold]{title}[/bold]", border_style=style))
    if isinstance(outcome, Answered) and outcome.sources:
        console.print("[bold]Sources:[/bold]")
        for idx, source in enumerate(outcome.sources, start=1):
            console.print(f"[{idx}] {source}", markup=False)
    elif not isinstance(outcome, (Answered, NoContext)):
        console.print(Text(outcome.sources[0], style="dim"))


@click.group()
def cli() -> None:
    """Fenec RAG: question answering over documents in object storage."""


@cli.command()
@config_option
def ingest(config_path: Path) -> None:
    """Chunk, embed and index every eligible document in the object store."""
    runtime = _load_runtime(config_path)
    try:
        result = runtime.ingestion.ingest()
    except EmptyDocumentSetError as exc:
        _fail(exc, "Nothing to Ingest")
    except IngestionError as exc:
        if exc.committed:
            render_ingestion_result(IngestionResult(documents=list(exc.committed)), title="Committed before failure")
        _fail(exc, "Ingestion Failed")
    render_ingestion_result(result)


@cli.command()
@config_option
@click.argument("question")
@click.option("--top-k", type=int, default=None, help="Number of context chunks to retrieve.")
def query(config_path: Path, question: str, top_k: int | None) -> None:
    """Answer QUESTION using the indexed documents."""
    runtime = _load_runtime(config_path)
    try:
        pipeline = runtime.query
    except FenecRAGError as exc:
        _fail(exc, "Configuration Error")
    try:
        outcome = pipeline.query(question, top_k=top_k)
    except FenecRAGError as exc:
        _fail(exc, "Invalid Query")
    render_outcome(outcome)


@cli.command()
@config_option
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", type=str, default=None, help="Document name in the store (defaults to the file name).")
@click.option("--overwrite/--no-overwrite", default=True, show_default=True)
def upload(config_path: Path, path: Path, name: str | None, overwrite: bool) -> None:
    """Upload a local file to the object store."""
    config = _load_config(config_path)
    try:
        store = build_object_store(config.storage_config())
        result = store.upload(name or path.name, path.read_bytes(), overwrite=overwrite)
    except FenecRAGError as exc:
        _fail(exc, "Upload Failed")
    console.print(f"[green]{result.message}[/green]")
    console.print(f"Name: [cyan]{result.name}[/cyan]")
    console.print(f"URI: [cyan]{result.uri}[/cyan]")


@cli.command()
@config_option
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-chunk-size", type=int, default=None, help="Override the configured chunk size.")
def chunk(config_path: Path, path: Path, max_chunk_size: int | None) -> None:
    """Preview how a local text file would be chunked."""
    if max_chunk_size is None:
        if config_path.exists():
            max_chunk_size = _load_config(config_path).ingestion_config().max_chunk_size
        else:
            max_chunk_size = ChunkingConfig().max_chunk_size
    try:
        chunker = ParagraphChunker(ChunkingConfig(max_chunk_size=max_chunk_size))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--max-chunk-size") from exc

    chunks = chunker.chunk(path.read_text(encoding="utf-8"), source=path.name)
    table = Table(title=f"{path.name} (max {max_chunk_size} chars)", box=box.SIMPLE, show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Text")
    for idx, item in enumerate(chunks, start=1):
        table.add_row(str(idx), str(len(item.text)), Text(item.text))
    console.print(table)
    console.print(f"[bold]{len(chunks)}[/bold] chunk(s)")


@cli.command()
@config_option
def doctor(config_path: Path) -> None:
    """Check the local environment and configured services."""
    config = _load_config(config_path)
    results = run_diagnostics(config)
    table = Table(title="Fenec RAG diagnostics", box=box.SIMPLE)
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for name, result in results.items():
        style = _STATUS_STYLES.get(result["status"], "white")
        table.add_row(name, f"[{style}]{result['status']}[/{style}]", Text(result["details"]))
    console.print(table)
    if any(result["status"] == "error" for result in results.values()):
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    cli()
