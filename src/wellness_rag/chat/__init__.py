"""
Chat — the online query path.

Public API
----------
- :class:`ChatPipeline` — embed → retrieve → assemble → generate.
- :class:`ClientBundle` — the injected remote clients.
- :class:`ConversationMessage` — one turn of the caller's conversation.
"""

from wellness_rag.chat.models import ConversationMessage
from wellness_rag.chat.pipeline import ChatPipeline, ClientBundle

__all__ = [
    "ChatPipeline",
    "ClientBundle",
    "ConversationMessage",
]
