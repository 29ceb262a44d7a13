import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, rag
from .errors import StorageError
from .llm_service import CompletionClient
from .rag import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatResult:
    reply: str
    tokens_used: int


@contextmanager
def _storage(db: Session, action: str):
    """Roll back and re-raise any database failure as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage failure while trying to %s: %s", action, e)
        raise StorageError() from e


# ---------- Sessions ----------
def ensure_session(db: Session, session_id: str) -> models.ChatSession:
    """Insert the session if absent; an existing row is left untouched."""
    with _storage(db, "ensure session"):
        session = db.get(models.ChatSession, session_id)
        if session:
            return session
        session = models.ChatSession(id=session_id)
        db.add(session)
        try:
            db.commit()
        except IntegrityError:
            # a concurrent request created it first
            db.rollback()
            return db.get(models.ChatSession, session_id)
        db.refresh(session)
        logger.info("Created session %s", session_id)
        return session


def list_sessions(db: Session) -> List[models.ChatSession]:
    with _storage(db, "list sessions"):
        return db.query(models.ChatSession).all()


# ---------- Messages ----------
def add_message(db: Session, session_id: str, role: models.Role, content: str) -> models.ChatMessage:
    """Append one message and bump the session's updated_at in the same commit."""
    with _storage(db, "add message"):
        msg = models.ChatMessage(session_id=session_id, role=models.Role(role).value, content=content)
        db.add(msg)
        db.query(models.ChatSession)\
            .filter(models.ChatSession.id == session_id)\
            .update({models.ChatSession.updated_at: models.utcnow()}, synchronize_session=False)
        db.commit()
        db.refresh(msg)
        return msg


def get_messages(db: Session, session_id: str) -> List[models.ChatMessage]:
    with _storage(db, "read conversation"):
        return db.query(models.ChatMessage)\
            .filter(models.ChatMessage.session_id == session_id)\
            .order_by(models.ChatMessage.created_at, models.ChatMessage.id)\
            .all()


def get_recent_messages(db: Session, session_id: str, limit: int = rag.HISTORY_LIMIT) -> List[models.ChatMessage]:
    """Last `limit` messages of a session, oldest first."""
    with _storage(db, "read recent messages"):
        rows = db.query(models.ChatMessage)\
            .filter(models.ChatMessage.session_id == session_id)\
            .order_by(models.ChatMessage.created_at.desc(), models.ChatMessage.id.desc())\
            .limit(limit)\
            .all()
    rows.reverse()
    return rows


# ---------- Chat ----------
def send_message(
    db: Session,
    documents: DocumentStore,
    completion_client: CompletionClient,
    session_id: str,
    user_text: str,
) -> ChatResult:
    """
    Stores the user message, matches it against the static documents and,
    on a hit, calls the completion service with the document plus recent
    history. The reply is stored as an assistant message.
    """
    ensure_session(db, session_id)

    # Saved before anything below can fail
    add_message(db, session_id, models.Role.USER, user_text)

    doc = documents.search(user_text)
    if doc is None:
        logger.info("No document matched for session %s; sending fallback", session_id)
        add_message(db, session_id, models.Role.ASSISTANT, rag.FALLBACK_REPLY)
        return ChatResult(reply=rag.FALLBACK_REPLY, tokens_used=0)

    logger.info("Session %s matched document %r", session_id, doc.title)
    history = get_recent_messages(db, session_id)
    prompt = rag.build_prompt(doc, history, user_text)

    completion = completion_client.complete(prompt)

    add_message(db, session_id, models.Role.ASSISTANT, completion.text)
    return ChatResult(reply=completion.text, tokens_used=completion.total_tokens)
