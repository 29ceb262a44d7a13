import logging

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from .errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window request limit per client key (e.g. "20/minute")."""

    def __init__(self, limit: str = "20/minute", enabled: bool = True):
        self.item = parse(limit)
        self.enabled = enabled
        self._limiter = FixedWindowRateLimiter(MemoryStorage())

    def check(self, key: str) -> None:
        if not self.enabled:
            return
        if not self._limiter.hit(self.item, "support_chat", key):
            logger.warning("Rate limit %s hit by %s", self.item, key)
            raise RateLimitError(f"Rate limit exceeded: {self.item}")
