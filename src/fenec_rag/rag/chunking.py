"""Paragraph-aware text chunking.

Documents are split on blank lines and paragraphs are packed into chunks that stay
under a character budget. Paragraphs that are longer than the budget on their own
are hard-sliced into fixed-size pieces with no attempt to respect word boundaries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\r\n\r\n|\n\n")
_PARAGRAPH_JOINER = "\n\n"


@dataclass(slots=True, frozen=True)
class Chunk:
    """A bounded slice of a source document."""

    text: str
    source: str = "inline"


@dataclass(slots=True, frozen=True)
class ChunkingConfig:
    max_chunk_size: int = 500


def split_paragraphs(text: str) -> list[str]:
    """Split ``text`` on blank-line boundaries into trimmed, non-blank paragraphs."""
    paragraphs = (piece.strip() for piece in _PARAGRAPH_BREAK.split(text))
    return [paragraph for paragraph in paragraphs if paragraph]


def split_text_into_chunks(text: str, max_chunk_size: int = 800, *, source: str = "inline") -> list[Chunk]:
    """Pack the paragraphs of ``text`` into chunks of at most ``max_chunk_size`` characters.

    A paragraph joins the running buffer only while
    ``len(buffer) + len(paragraph) < max_chunk_size``, where the buffer length counts
    the blank-line separator written after every paragraph. Oversized paragraphs are
    cut into ``max_chunk_size`` slices and emitted on their own.
    """
    if max_chunk_size <= 0:
        message = f"max_chunk_size must be positive, got {max_chunk_size}"
        raise ValueError(message)

    chunks: list[Chunk] = []
    buffer: list[str] = []
    buffer_length = 0

    for paragraph in split_paragraphs(text):
        if buffer_length + len(paragraph) < max_chunk_size:
            buffer.append(paragraph)
            buffer_length += len(paragraph) + len(_PARAGRAPH_JOINER)
            continue

        if buffer:
            chunks.append(Chunk(text=_PARAGRAPH_JOINER.join(buffer), source=source))
            buffer = []
            buffer_length = 0

        if len(paragraph) > max_chunk_size:
            for start in range(0, len(paragraph), max_chunk_size):
                piece = paragraph[start : start + max_chunk_size]
                # a slice can be pure whitespace when the paragraph has long gaps
                if piece.strip():
                    chunks.append(Chunk(text=piece, source=source))
        else:
            buffer.append(paragraph)
            buffer_length = len(paragraph) + len(_PARAGRAPH_JOINER)

    if buffer:
        chunks.append(Chunk(text=_PARAGRAPH_JOINER.join(buffer), source=source))

    return chunks


class ParagraphChunker:
    """Applies :func:`split_text_into_chunks` with a fixed configuration."""

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self._config = config or ChunkingConfig()
        if self._config.max_chunk_size <= 0:
            message = f"max_chunk_size must be positive, got {self._config.max_chunk_size}"
            raise ValueError(message)

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    def chunk(self, text: str, *, source: str = "inline") -> list[Chunk]:
        chunks = split_text_into_chunks(text, self._config.max_chunk_size, source=source)
        LOGGER.debug(
            "Split %s (%d chars) into %d chunk(s) with max_chunk_size=%d",
            source,
            len(text),
            len(chunks),
            self._config.max_chunk_size,
        )
        return chunks
