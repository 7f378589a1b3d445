import logging

logger = logging.getLogger(__name__)


class Backoff:
    """Exponential backoff schedule for retried remote operations."""

    def __init__(self, base_delay: float = 2.0):
        self.base_delay = base_delay

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry number attempt+1: base_delay * 2^attempt."""
        return self.base_delay * (2 ** max(attempt, 0))

    def next_attempt_at(self, attempt: int, now: float) -> float:
        """Absolute time of the next retry. The sync loop never sleeps on a failure."""
        wait = self.delay(attempt)
        logger.debug(f"Backoff attempt {attempt}: next try in {wait:.1f}s")
        return now + wait
