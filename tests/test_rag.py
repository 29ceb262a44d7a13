import json
from types import SimpleNamespace

import pytest

from support_chat.rag import (
    FALLBACK_REPLY,
    DocumentStore,
    build_prompt,
    load_documents,
    search_docs,
)
from support_chat.schemas import Document

REFUNDS = Document(title="refunds", content="We process refunds within 5 days.")
SHIPPING = Document(title="shipping", content="Shipping takes 3-7 business days.")
DOCS = [REFUNDS, SHIPPING]


# ---------- Relevance matching ----------
def test_matches_on_title_substring():
    assert search_docs(DOCS, "How do refunds work?") is REFUNDS


def test_matching_is_case_insensitive():
    assert search_docs(DOCS, "SHIPPING to Canada?") is SHIPPING


def test_matches_on_first_content_token():
    # "we" is the first word of the refunds document
    assert search_docs(DOCS, "Do we get our money back?") is REFUNDS


def test_first_content_token_is_a_plain_substring():
    # "weather" contains "we"; no word-boundary check is made
    assert search_docs(DOCS, "What is the weather?") is REFUNDS


def test_first_document_in_store_order_wins():
    question = "refunds and shipping"
    assert search_docs(DOCS, question) is REFUNDS
    assert search_docs([SHIPPING, REFUNDS], question) is SHIPPING


def test_no_match_returns_none():
    assert search_docs(DOCS, "Can I pay by card?") is None
    assert search_docs([], "refunds") is None


def test_blank_content_matches_only_by_title():
    docs = [Document(title="billing", content="   ")]
    assert search_docs(docs, "Can I pay by card?") is None
    assert search_docs(docs, "billing address") is docs[0]


def test_document_store_keeps_order_and_searches():
    store = DocumentStore(DOCS)
    assert list(store) == DOCS
    assert len(store) == 2
    assert store.search("shipping cost") is SHIPPING


# ---------- Prompt assembly ----------
def _row(role, content):
    return SimpleNamespace(role=role, content=content)


def test_prompt_contains_document_and_fallback_verbatim():
    prompt = build_prompt(REFUNDS, [], "How do refunds work?")
    assert REFUNDS.content in prompt
    assert f'"{FALLBACK_REPLY}"' in prompt
    assert "Answer ONLY using this documentation:" in prompt


def test_prompt_parts_are_in_fixed_order():
    history = [_row("user", "hi"), _row("assistant", "hello")]
    prompt = build_prompt(REFUNDS, history, "How do refunds work?")

    positions = [
        prompt.index("Answer ONLY using this documentation:"),
        prompt.index(REFUNDS.content),
        prompt.index(FALLBACK_REPLY),
        prompt.index("Chat History:"),
        prompt.index("user: hi\nassistant: hello"),
        prompt.index("User: How do refunds work?"),
    ]
    assert positions == sorted(positions)


def test_prompt_passes_long_content_through_untruncated():
    long_doc = Document(title="manual", content="word " * 20000)
    long_message = "x" * 10000
    prompt = build_prompt(long_doc, [_row("user", long_message)], long_message)
    assert long_doc.content in prompt
    assert prompt.count(long_message) == 2


def test_prompt_keeps_braces_in_content():
    doc = Document(title="api", content="Send {\"id\": 1} to the endpoint.")
    assert doc.content in build_prompt(doc, [], "api?")


# ---------- Loading ----------
def test_load_documents_preserves_file_order(tmp_path):
    path = tmp_path / "docs.json"
    path.write_text(json.dumps([
        {"title": "b", "content": "second"},
        {"title": "a", "content": "first"},
    ]), encoding="utf-8")

    docs = load_documents(path)
    assert [d.title for d in docs] == ["b", "a"]


def test_load_documents_ignores_extra_fields(tmp_path):
    path = tmp_path / "docs.json"
    path.write_text(json.dumps([{"title": "a", "content": "b", "tags": ["x"]}]), encoding="utf-8")
    assert load_documents(path) == (Document(title="a", content="b"),)


@pytest.mark.parametrize("payload", [
    '[{"title": "no content"}]',
    '{"title": "a", "content": "b"}',
    "not json",
])
def test_load_documents_rejects_bad_files(tmp_path, payload):
    path = tmp_path / "docs.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(ValueError):
        load_documents(path)


def test_load_documents_missing_file(tmp_path):
    with pytest.raises(ValueError):
        load_documents(tmp_path / "missing.json")


def test_packaged_documents_load():
    from support_chat.config import DEFAULT_DOCS_PATH

    store = DocumentStore.from_file(DEFAULT_DOCS_PATH)
    assert len(store) > 0
    assert store.search("how long do refunds take?").title == "refunds"
