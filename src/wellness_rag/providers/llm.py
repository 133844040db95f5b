"""Generation client — single place to swap the chat-completion provider."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from wellness_rag.providers.base import call_provider

if TYPE_CHECKING:
    from wellness_rag.chat.models import ConversationMessage
    from wellness_rag.config import Settings

logger = logging.getLogger(__name__)

_MESSAGE_TYPES: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: list[ConversationMessage]) -> list[BaseMessage]:
    """Convert role/content messages into LangChain message objects."""
    return [_MESSAGE_TYPES[m.role](content=m.content or "") for m in messages]


class GenerationClient(ABC):
    """Produces the assistant's reply for a conversation."""

    @abstractmethod
    async def generate(self, messages: list[ConversationMessage]) -> str:
        """Return the generated content; raises ``ProviderError`` on failure."""
        ...


class OpenAIGenerationClient(GenerationClient):
    """Chat-completion client with sampling parameters fixed at construction.

    Temperature and output length are the same for every request so the
    shape of answers stays stable even though their content does not.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 30.0,
    ) -> None:
        self.model = model
        self._timeout = timeout
        self._llm = ChatOpenAI(
            model=model,
            api_key=api_key,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            max_retries=0,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIGenerationClient:
        return cls(
            settings.openai_api_key,
            model=settings.llm_model_name,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.provider_timeout_seconds,
        )

    async def generate(self, messages: list[ConversationMessage]) -> str:
        response = await call_provider(
            self._llm.ainvoke(to_langchain_messages(messages)),
            self._timeout,
        )
        content = response.content if isinstance(response.content, str) else str(response.content)
        logger.debug("Generated %d chars with %s", len(content), self.model)
        return content
