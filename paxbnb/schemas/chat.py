"""Pydantic v2 request schemas for the chat endpoint."""

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """One prior turn of the conversation as held by the client."""

    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=10000)


class ChatRequest(BaseModel):
    """Full message history; the conversation itself is not stored server-side."""

    messages: list[ChatMessage] = Field(..., min_length=1, max_length=100)
