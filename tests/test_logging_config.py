from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from fenec_rag.logging_config import configure_logging


def test_configure_logging_installs_single_rich_handler() -> None:
    console = Console(record=True, width=120)

    configure_logging("debug", console=console)
    logger = configure_logging("WARNING", console=console)

    rich_handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
    assert len(rich_handlers) == 1
    assert logger.level == logging.WARNING

    logging.getLogger("fenec_rag.rag.ingestion").warning("Skipping ingestion for empty document %s", "blank.txt")
    assert "blank.txt" in console.export_text()

    logger.removeHandler(rich_handlers[0])
    logger.setLevel(logging.NOTSET)
