"""
Shared test fixtures.

Provides: in-memory SQLite sessions, a small document store, a fake
completion client and a TestClient bound to a fully wired app.
"""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from support_chat.config import Settings
from support_chat.db import create_db_engine, create_session_factory, init_db
from support_chat.llm_service import Completion
from support_chat.main import create_app
from support_chat.rag import DocumentStore
from support_chat.schemas import Document


class FakeCompletionClient:
    """Records every prompt; answers "answer 0", "answer 1", ... or raises `error`."""

    def __init__(self, total_tokens: int = 42, error: Optional[Exception] = None):
        self.total_tokens = total_tokens
        self.error = error
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> Completion:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return Completion(text=f"answer {len(self.prompts) - 1}", total_tokens=self.total_tokens)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite:///:memory:",
        openai_api_key="test-key",
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def documents() -> DocumentStore:
    return DocumentStore([
        Document(title="refunds", content="We process refunds within 5 days."),
        Document(title="shipping", content="Shipping takes 3-7 business days."),
    ])


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def app(settings, documents, completion_client):
    return create_app(settings, documents=documents, completion_client=completion_client)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db():
    """A database session on a fresh in-memory SQLite database."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
