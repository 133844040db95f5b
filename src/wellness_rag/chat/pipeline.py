"""Query pipeline — the LangGraph workflow behind ``POST /chat``.

Graph topology::

      [ START ]
          ▼
    ┌─────────────┐
    │ embed_query  │   ← retry-wrapped embedding call (fatal on failure)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │  retrieve    │   ← top-k search; a store failure degrades to no context
    └──────┬──────┘
           ▼
    ┌──────────────────┐
    │ assemble_context  │
    └──────┬───────────┘
           ▼
    ┌─────────────┐
    │  generate    │   ← retry-wrapped chat completion (fatal on failure)
    └──────┬──────┘
           ▼
        [ END ]

Steps run strictly in sequence: every node needs the previous node's
output.  Nodes return *partial* state dicts with only the keys they set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from langgraph.graph import END, StateGraph

from wellness_rag.chat.models import ConversationMessage
from wellness_rag.chat.prompts import assemble_context, build_prompt_messages
from wellness_rag.chat.state import ChatState, create_initial_state
from wellness_rag.config import Settings
from wellness_rag.errors import BadRequest, StoreError
from wellness_rag.providers.embeddings import EmbeddingClient, OpenAIEmbeddingClient
from wellness_rag.providers.llm import GenerationClient, OpenAIGenerationClient
from wellness_rag.retrieval.base import VectorStoreBase
from wellness_rag.retry import RetryPolicy, with_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientBundle:
    """The process-wide remote clients, built once and injected."""

    embedder: EmbeddingClient
    generator: GenerationClient
    store: VectorStoreBase

    @classmethod
    def from_settings(cls, settings: Settings) -> ClientBundle:
        from wellness_rag.retrieval.chroma_store import ChromaVectorStore

        return cls(
            embedder=OpenAIEmbeddingClient.from_settings(settings),
            generator=OpenAIGenerationClient.from_settings(settings),
            store=ChromaVectorStore.from_settings(settings),
        )


def extract_query(messages: list[ConversationMessage] | None) -> str:
    """Return the last message's content, or raise :class:`BadRequest`.

    A missing list, an empty list, and a last message whose content is
    missing or blank all count as "no message".
    """
    if not messages:
        raise BadRequest("No message provided")
    query = messages[-1].content
    if not query or not query.strip():
        raise BadRequest("No message provided")
    return query


class ChatPipeline:
    """Embeds the latest message, retrieves context, and generates a reply.

    Parameters
    ----------
    clients:
        Embedding, generation and vector-store clients.
    top_k:
        Number of chunks retrieved per request.
    retry_policy:
        Applied independently to the embedding and the generation call.
    """

    def __init__(
        self,
        clients: ClientBundle,
        *,
        top_k: int = 5,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._clients = clients
        self.top_k = top_k
        self._retry_policy = retry_policy or RetryPolicy()
        self._graph = self.build_graph()

    @classmethod
    def from_settings(cls, settings: Settings, clients: ClientBundle | None = None) -> ChatPipeline:
        return cls(
            clients or ClientBundle.from_settings(settings),
            top_k=settings.retrieval_top_k,
            retry_policy=RetryPolicy(
                max_attempts=settings.retry_max_attempts,
                initial_delay=settings.retry_initial_delay,
                max_delay=settings.retry_max_delay,
            ),
        )

    def build_graph(self) -> Any:
        """Construct and compile the chat graph bound to this pipeline's clients."""
        workflow = StateGraph(ChatState)

        workflow.add_node("embed_query", self.embed_query)
        workflow.add_node("retrieve", self.retrieve)
        workflow.add_node("assemble_context", self.assemble)
        workflow.add_node("generate", self.generate)

        workflow.set_entry_point("embed_query")
        workflow.add_edge("embed_query", "retrieve")
        workflow.add_edge("retrieve", "assemble_context")
        workflow.add_edge("assemble_context", "generate")
        workflow.add_edge("generate", END)

        return workflow.compile()

    async def run(self, messages: list[ConversationMessage] | None) -> str:
        """Answer the conversation; the only payload is the generated text.

        Raises
        ------
        BadRequest
            Empty conversation or blank last message (no remote call made).
        ProviderError
            Embedding or generation failed after retries.
        """
        query = extract_query(messages)
        result = await self._graph.ainvoke(create_initial_state(messages or [], query))
        return result["answer"]

    # ── Nodes ──────────────────────────────────────────────────────────

    async def embed_query(self, state: ChatState) -> dict[str, Any]:
        query = state["query"]
        vector = await with_retry(
            lambda: self._clients.embedder.embed(query),
            self._retry_policy,
            operation_name="embed query",
        )
        return {"query_vector": vector}

    async def retrieve(self, state: ChatState) -> dict[str, Any]:
        try:
            hits = await self._clients.store.search(state["query_vector"], k=self.top_k)
        except StoreError as exc:
            logger.warning("Vector search failed, answering without context: %s", exc)
            return {"documents": [], "retrieval_degraded": True}
        logger.debug("Retrieved %d chunk(s)", len(hits))
        return {"documents": [hit.text for hit in hits], "retrieval_degraded": False}

    async def assemble(self, state: ChatState) -> dict[str, Any]:
        context = assemble_context(state["documents"])
        return {
            "context": context,
            "prompt_messages": build_prompt_messages(context, state["messages"]),
        }

    async def generate(self, state: ChatState) -> dict[str, Any]:
        prompt_messages = state["prompt_messages"]
        answer = await with_retry(
            lambda: self._clients.generator.generate(prompt_messages),
            self._retry_policy,
            operation_name="generate answer",
        )
        return {"answer": answer}
