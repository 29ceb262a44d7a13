from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


# ---------- Chat ----------
class ChatRequest(BaseModel):
    # both optional so a missing field surfaces as our own 400, not a 422
    sessionId: Optional[str] = None
    message: Optional[str] = None


class ChatReply(BaseModel):
    reply: str
    tokensUsed: int


# ---------- History ----------
class MessageOut(BaseModel):
    role: str  # "user" or "assistant"
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SessionOut(BaseModel):
    id: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------- Documents ----------
class Document(BaseModel):
    """A static knowledge-base entry."""

    title: str
    content: str

    model_config = ConfigDict(frozen=True)


# ---------- Errors ----------
class ErrorResponse(BaseModel):
    error: str
