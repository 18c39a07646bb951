"""Chat completion provider helpers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

from fenec_rag.env import read_secret
from fenec_rag.exceptions import ConfigurationError

LOGGER = logging.getLogger(__name__)

CompletionProviderLiteral = Literal["azure-openai", "openai"]
SUPPORTED_COMPLETION_PROVIDERS: tuple[str, ...] = ("azure-openai", "openai")


@dataclass(slots=True, frozen=True)
class CompletionConfig:
    provider: CompletionProviderLiteral = "azure-openai"
    model: str = "gpt-4.1"
    deployment: str | None = None
    endpoint: str | None = None
    api_version: str = "2024-06-01"
    api_key_env: str = "AZURE_OPENAI_API_KEY"
    temperature: float = 0.2
    max_tokens: int | None = None
    timeout: float | None = None


class CompletionClient(Protocol):
    """Produces a single, non-streamed completion for role-tagged messages."""

    def complete(self, messages: Sequence[BaseMessage]) -> str: ...


class LangChainChatAdapter:
    """Adapter that hydrates a LangChain chat model based on provider config."""

    def __init__(self, config: CompletionConfig, *, llm: BaseChatModel | None = None) -> None:
        self.config = config
        self.provider = config.provider
        self.llm = llm if llm is not None else self._initialize_llm()

    def _initialize_llm(self) -> BaseChatModel:  # pragma: no cover - depends on runtime environment
        options: dict[str, Any] = {"temperature": self.config.temperature}
        if self.config.max_tokens:
            options["max_tokens"] = self.config.max_tokens
        if self.config.timeout:
            options["timeout"] = self.config.timeout

        if self.provider == "azure-openai":
            from langchain_openai import AzureChatOpenAI

            if not self.config.endpoint:
                message = "Azure OpenAI chat completion requires an 'endpoint'"
                raise ConfigurationError(message, details={"provider": "azure-openai"})
            deployment = self.config.deployment or self.config.model
            LOGGER.info("Loading Azure OpenAI chat deployment '%s' at %s", deployment, self.config.endpoint)
            return AzureChatOpenAI(
                azure_deployment=deployment,
                azure_endpoint=self.config.endpoint,
                api_version=self.config.api_version,
                api_key=read_secret(self.config.api_key_env, purpose="Azure OpenAI chat completion"),
                **options,
            )
        if self.provider == "openai":
            from langchain_openai import ChatOpenAI

            LOGGER.info("Loading OpenAI chat model '%s'", self.config.model)
            return ChatOpenAI(
                model=self.config.model,
                base_url=self.config.endpoint,
                api_key=read_secret(self.config.api_key_env, purpose="OpenAI chat completion"),
                **options,
            )
        supported = ", ".join(SUPPORTED_COMPLETION_PROVIDERS)
        message = f"Unsupported completion provider: {self.provider}. Supported: {supported}"
        raise ConfigurationError(message)

    def complete(self, messages: Sequence[BaseMessage]) -> str:
        response = self.llm.invoke(list(messages))
        content = getattr(response, "content", response)
        if isinstance(content, str):
            return content
        # multi-part content arrives as a list of strings or typed blocks
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
