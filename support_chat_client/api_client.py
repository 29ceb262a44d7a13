# support_chat_client/api_client.py
import os
import uuid

import requests
from dotenv import load_dotenv

load_dotenv()
API_BASE = os.getenv("API_BASE", "http://localhost:5000/api")


def new_session_id() -> str:
    """Session ids are chosen by the client; any unique string works."""
    return str(uuid.uuid4())


def send_message(session_id: str, text: str):
    r = requests.post(f"{API_BASE}/chat", json={"sessionId": session_id, "message": text})
    r.raise_for_status()
    return r.json()


def get_conversation(session_id: str):
    r = requests.get(f"{API_BASE}/conversations/{session_id}")
    r.raise_for_status()
    return r.json()


def list_sessions():
    r = requests.get(f"{API_BASE}/sessions")
    r.raise_for_status()
    return r.json()
