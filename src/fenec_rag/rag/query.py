"""Grounded question answering over the vector index.

The query path is fail-soft: collaborator failures never escape :meth:`QueryPipeline.query`;
they come back as a :class:`Degraded` outcome whose single source carries the error
detail. Only caller mistakes (blank question, non-positive top-k) raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Union

from langchain_core.embeddings import Embeddings
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from fenec_rag.exceptions import FenecRAGError, QueryValidationError
from fenec_rag.llm import CompletionClient
from fenec_rag.rag.vector_store import VectorIndex

LOGGER = logging.getLogger(__name__)

ENRICHED_QUERY_TEMPLATE = "Question: {question}. Answer based on company documentation and internal manuals."
NO_CONTEXT_ANSWER = "No relevant information was found in the indexed documents."
ERROR_ANSWER = "An error occurred while processing the query."
CONTEXT_SEPARATOR = "\n---\n"
SYSTEM_PREAMBLE = (
    "You are an assistant for question answering based on company documentation.\n"
    "Use the following context to answer the question as accurately as possible.\n"
    "If the context partially matches, infer the most likely answer."
)


@dataclass(slots=True, frozen=True)
class QueryConfig:
    top_k: int = 5
    enriched_query_template: str = ENRICHED_QUERY_TEMPLATE
    system_preamble: str = SYSTEM_PREAMBLE
    context_separator: str = CONTEXT_SEPARATOR


@dataclass(slots=True, frozen=True)
class QueryResponse:
    """Answer plus the context chunks it was grounded on."""

    answer: str
    sources: list[str] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class Answered:
    status: ClassVar[str] = "answered"

    answer: str
    sources: list[str]

    def to_response(self) -> QueryResponse:
        return QueryResponse(answer=self.answer, sources=list(self.sources))


@dataclass(slots=True, frozen=True)
class NoContext:
    status: ClassVar[str] = "no_context"

    answer: str = NO_CONTEXT_ANSWER
    sources: list[str] = field(default_factory=list)

    def to_response(self) -> QueryResponse:
        return QueryResponse(answer=self.answer, sources=[])


@dataclass(slots=True, frozen=True)
class Degraded:
    status: ClassVar[str] = "degraded"

    reason: str
    answer: str = ERROR_ANSWER

    @property
    def sources(self) -> list[str]:
        return [self.reason]

    def to_response(self) -> QueryResponse:
        return QueryResponse(answer=self.answer, sources=self.sources)


QueryOutcome = Union[Answered, NoContext, Degraded]


def clean_text(text: str) -> str:
    """Drop every carriage return, keeping ``\\n`` as the only line break, and trim."""
    return text.replace("\r", "").strip()


class QueryPipeline:
    """Embeds a question, retrieves context and asks the completion provider for a grounded answer."""

    def __init__(
        self,
        embeddings: Embeddings,
        vector_index: VectorIndex,
        completion: CompletionClient,
        config: QueryConfig | None = None,
    ) -> None:
        self._embeddings = embeddings
        self._vector_index = vector_index
        self._completion = completion
        self._config = config or QueryConfig()

    @property
    def config(self) -> QueryConfig:
        return self._config

    def query(self, question: str, top_k: int | None = None) -> QueryOutcome:
        resolved_top_k = self._config.top_k if top_k is None else top_k
        self._validate(question, resolved_top_k)
        try:
            return self._answer(question, resolved_top_k)
        except Exception as exc:
            LOGGER.exception("Query failed; returning degraded response")
            reason = exc.message if isinstance(exc, FenecRAGError) else str(exc)
            return Degraded(reason=reason or exc.__class__.__name__)

    def build_messages(self, question: str, context: list[str]) -> list[BaseMessage]:
        block = self._config.context_separator.join(context)
        system_prompt = f"{self._config.system_preamble}\n\nContext:\n{block}"
        return [SystemMessage(content=system_prompt), HumanMessage(content=question)]

    def _answer(self, question: str, top_k: int) -> QueryOutcome:
        enriched = self._config.enriched_query_template.format(question=question)
        query_vector = self._embeddings.embed_query(enriched)
        matches = self._vector_index.search(query_vector, top_k=top_k)

        context = [match.content for match in matches if match.content and match.content.strip()]
        if not context:
            LOGGER.info("No indexed content matched the question (top_k=%d)", top_k)
            return NoContext()

        cleaned = [clean_text(text) for text in context]
        LOGGER.debug("Grounding answer on %d chunk(s)", len(cleaned))
        answer = self._completion.complete(self.build_messages(question, cleaned))
        return Answered(answer=clean_text(answer), sources=cleaned)

    @staticmethod
    def _validate(question: str, top_k: int) -> None:
        if not question or not question.strip():
            message = "Question cannot be empty."
            raise QueryValidationError(message, field="question")
        if top_k < 1:
            message = f"top_k must be at least 1, got {top_k}"
            raise QueryValidationError(message, field="top_k")
