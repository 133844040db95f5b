"""Prompt templates for the chat pipeline.

Keeping the persona in one place makes it easy to audit and version.
"""

from __future__ import annotations

from wellness_rag.chat.models import ConversationMessage

CONTEXT_SEPARATOR = "\n\n"

SYSTEM_TEMPLATE = """\
You are a helpful, honest AI assistant who knows everything about women's health.
Your mission is to make the user's life as easy as possible.

Use the following context to augment your knowledge about women's health, biology, and lifestyle optimization.
This context contains insights from top experts in the field from their most recent blogs, podcasts, and research.

If the context doesn't contain information relevant to the question, use your existing knowledge and maintain a natural conversation
without mentioning the sources or context.

Format responses using markdown for better readability.
----------------
CONTEXT:
{context}
----------------"""


def assemble_context(documents: list[str]) -> str:
    """Join retrieved chunk texts, in rank order, with a blank line between them."""
    return CONTEXT_SEPARATOR.join(documents)


def build_system_message(context: str) -> ConversationMessage:
    """Synthesize the per-request system message around *context*."""
    return ConversationMessage(role="system", content=SYSTEM_TEMPLATE.format(context=context))


def build_prompt_messages(
    context: str,
    messages: list[ConversationMessage],
) -> list[ConversationMessage]:
    """Prepend the system message to the caller's conversation."""
    return [build_system_message(context), *messages]
