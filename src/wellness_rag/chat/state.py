"""Chat state definition — shared across all graph nodes.

Each request gets a fresh state; nothing in it outlives the response.
"""

from __future__ import annotations

from typing import TypedDict

from wellness_rag.chat.models import ConversationMessage


class ChatState(TypedDict):
    """Typed state that flows through the chat graph.

    Attributes
    ----------
    messages:
        The caller's conversation, unchanged.
    query:
        Content of the last message; the text that gets embedded.
    query_vector:
        Embedding of ``query`` (set by ``embed_query``).
    documents:
        Chunk texts returned by the similarity search, most similar first.
    retrieval_degraded:
        ``True`` when the search failed and the answer is generated without
        retrieved context.
    context:
        ``documents`` joined by blank lines.
    prompt_messages:
        System message followed by ``messages``; what the model receives.
    answer:
        The generated reply (set by ``generate``).
    """

    messages: list[ConversationMessage]
    query: str
    query_vector: list[float]
    documents: list[str]
    retrieval_degraded: bool
    context: str
    prompt_messages: list[ConversationMessage]
    answer: str


def create_initial_state(messages: list[ConversationMessage], query: str) -> ChatState:
    """Build the state dict handed to ``graph.ainvoke()``."""
    return {
        "messages": list(messages),
        "query": query,
        "query_vector": [],
        "documents": [],
        "retrieval_degraded": False,
        "context": "",
        "prompt_messages": [],
        "answer": "",
    }
