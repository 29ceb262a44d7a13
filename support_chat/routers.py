import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from . import crud, schemas
from .errors import InternalError, ValidationError
from .llm_service import CompletionClient
from .rag import DocumentStore

logger = logging.getLogger(__name__)


# ---------- Dependencies ----------
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_documents(request: Request) -> DocumentStore:
    return request.app.state.documents


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def enforce_rate_limit(request: Request) -> None:
    client_address = request.client.host if request.client else "127.0.0.1"
    request.app.state.rate_limiter.check(client_address)


# every route shares the per-client window
router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


# ---------- Chat ----------
@router.post("/chat", response_model=schemas.ChatReply)
def chat(
    payload: schemas.ChatRequest,
    db: Session = Depends(get_db),
    documents: DocumentStore = Depends(get_documents),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """Store the user's message and answer it from the matching document."""
    if not payload.sessionId or not payload.message:
        raise ValidationError()

    try:
        result = crud.send_message(db, documents, completion_client, payload.sessionId, payload.message)
    except Exception:
        logger.exception("Chat processing failed for session %s", payload.sessionId)
        raise InternalError()

    return schemas.ChatReply(reply=result.reply, tokensUsed=result.tokens_used)


# ---------- History ----------
@router.get("/conversations/{session_id}", response_model=List[schemas.MessageOut])
def get_conversation(session_id: str, db: Session = Depends(get_db)):
    """All messages of a session, oldest first."""
    return crud.get_messages(db, session_id)


@router.get("/sessions", response_model=List[schemas.SessionOut])
def list_sessions(db: Session = Depends(get_db)):
    """All known sessions with their last-activity time."""
    return crud.list_sessions(db)
