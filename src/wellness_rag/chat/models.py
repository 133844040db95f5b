"""Request / response schemas for the chat endpoint."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ConversationMessage(BaseModel):
    """One turn of the conversation, in the order it happened."""

    role: Literal["user", "assistant", "system"]
    content: str | None = None


class ChatRequest(BaseModel):
    """Body of ``POST /chat``."""

    messages: list[ConversationMessage] | None = None


class ChatResponse(BaseModel):
    """Successful answer."""

    content: str


class ErrorResponse(BaseModel):
    """User-safe error body; never carries internal details."""

    error: str
