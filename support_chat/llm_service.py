import logging
from dataclasses import dataclass
from typing import Protocol

from openai import OpenAI, OpenAIError

from .errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Completion:
    text: str
    total_tokens: int


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> Completion:
        ...


class OpenAICompletionClient:
    """Sends one prompt as a single user message to the chat completions API."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", client: OpenAI = None):
        self.model = model
        # failed calls are not retried
        self.client = client or OpenAI(api_key=api_key, max_retries=0)

    def complete(self, prompt: str) -> Completion:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.error("Completion request failed (model=%s): %s", self.model, e)
            raise CollaboratorError() from e

        if not resp.choices:
            raise CollaboratorError("Completion returned no choices")
        text = resp.choices[0].message.content or ""
        total_tokens = resp.usage.total_tokens if resp.usage else 0
        logger.info("Completion received: %d chars, %d tokens", len(text), total_tokens)
        return Completion(text=text, total_tokens=total_tokens)
