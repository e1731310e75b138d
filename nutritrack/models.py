"""
DATA MODELS MODULE
==================

This file defines the Pydantic models used for the request body, the typed
conversation sent to OpenAI, the cached reference dataset, and the response
bodies. The chat service builds these; FastAPI serializes the responses.

MODELS:
  Role            - Conversation role: system, user or assistant.
  IncomingMessage - One message as the client sent it. Both fields are untrusted.
  ChatPayload     - Parsed body of POST /api/chat (messages + optional inline dataset).
  ChatTurn        - One validated, role-tagged message in the assembled conversation.
  CachedDataset   - The single reference dataset held by the dataset cache.
  ChatResponse    - Success body: {"reply": "..."}.
  ErrorResponse   - Failure body: {"error": "..."}.
  FailureResult   - A normalized failure: HTTP status + message.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


# ==============================================================================
# CONVERSATION MODELS
# ==============================================================================

class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class IncomingMessage(BaseModel):
    """
    A message exactly as received from the client. sender and text may be
    missing or of any type; the context assembler decides what survives.
    """
    model_config = ConfigDict(extra="ignore")

    sender: Any = None
    text: Any = None


class ChatPayload(BaseModel):
    """
    Request body for POST /api/chat after JSON parsing.

    - messages: The client's transcript in chronological order (may be empty).
    - dataset: Optional text supplied for this request only, already capped.
    """
    messages: List[IncomingMessage] = []
    dataset: Optional[str] = None


class ChatTurn(BaseModel):
    """One role-tagged turn of the conversation sent to the completion service."""
    role: Role
    content: str


class CachedDataset(BaseModel):
    """
    The reference dataset currently held by the cache. Frozen: a new fetch
    replaces the whole entry instead of editing this one.
    """
    model_config = ConfigDict(frozen=True)

    source_id: str
    snippet: str


# ==============================================================================
# RESPONSE MODELS
# ==============================================================================

class ChatResponse(BaseModel):
    """Response body for a successful POST /api/chat."""
    reply: str


class ErrorResponse(BaseModel):
    """Response body for every failed POST /api/chat."""
    error: str


class FailureResult(BaseModel):
    status_code: int
    message: str
