import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .schemas import Document

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I don’t have information about that."

# last 5 user/assistant pairs
HISTORY_LIMIT = 10

PROMPT_TEMPLATE = """
You are a support assistant.

Answer ONLY using this documentation:
{content}

If answer not in docs, say:
"{fallback}"

Chat History:
{history}

User: {message}
"""


def load_documents(path: Union[str, Path]) -> Tuple[Document, ...]:
    """
    Read the static document set: a JSON array of {"title", "content"} records.
    Raises ValueError if the file is unreadable or a record lacks a field.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Cannot load documents from {path}: {e}") from e
    if not isinstance(raw, list):
        raise ValueError(f"Documents file {path} must contain a JSON array")
    try:
        docs = tuple(Document.model_validate(item) for item in raw)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid document record in {path}: {e}") from e
    logger.info("Loaded %d documents from %s", len(docs), path)
    return docs


def _first_token(text: str) -> Optional[str]:
    tokens = text.lower().split()
    return tokens[0] if tokens else None


def search_docs(documents: Iterable[Document], question: str) -> Optional[Document]:
    """
    First document (in store order) whose title, or the first word of whose
    content, appears in the question. Case-insensitive substring match.
    """
    lower = question.lower()
    for doc in documents:
        if doc.title.lower() in lower:
            return doc
        token = _first_token(doc.content)
        if token is not None and token in lower:
            return doc
    return None


class DocumentStore:
    """Read-only, ordered collection of documents loaded once at startup."""

    def __init__(self, documents: Iterable[Document]):
        self._documents = tuple(documents)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DocumentStore":
        return cls(load_documents(path))

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def search(self, question: str) -> Optional[Document]:
        return search_docs(self._documents, question)


def format_history(history: Sequence) -> str:
    return "\n".join(f"{_role_name(h.role)}: {h.content}" for h in history)


def _role_name(role) -> str:
    return getattr(role, "value", role)


def build_prompt(document: Document, history: Sequence, message: str) -> str:
    """
    history: chronological rows with .role and .content (oldest first).
    Document content and history are passed through untruncated.
    """
    return PROMPT_TEMPLATE.format(
        content=document.content,
        fallback=FALLBACK_REPLY,
        history=format_history(history),
        message=message,
    )
