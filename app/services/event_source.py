# app/services/event_source.py
"""
Random draws used to synthesize device transactions:
who badged in, what happened, and how long until the next event.
"""

import random
from typing import Optional, Sequence


class RandomEventSource:
    def __init__(self, usernames: Sequence[str], event_types: Sequence[str],
                 min_delay_ms: int = 1000, max_delay_ms: int = 5000,
                 rng: Optional[random.Random] = None):
        if not usernames:
            raise ValueError("username vocabulary must not be empty")
        if not event_types:
            raise ValueError("event type vocabulary must not be empty")
        if min_delay_ms < 0 or min_delay_ms >= max_delay_ms:
            raise ValueError(
                f"invalid delay bounds: need 0 <= min < max, got [{min_delay_ms}, {max_delay_ms})"
            )
        self.usernames = tuple(usernames)
        self.event_types = tuple(event_types)
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings) -> "RandomEventSource":
        return cls(
            usernames=settings.SAMPLE_USERNAMES,
            event_types=settings.EVENT_TYPES,
            min_delay_ms=settings.TRANSACTION_MIN_DELAY_MS,
            max_delay_ms=settings.TRANSACTION_MAX_DELAY_MS,
        )

    def pick_username(self) -> str:
        return self._rng.choice(self.usernames)

    def pick_event_type(self) -> str:
        return self._rng.choice(self.event_types)

    def next_delay(self) -> int:
        """Milliseconds in [min_delay_ms, max_delay_ms)."""
        return self._rng.randrange(self.min_delay_ms, self.max_delay_ms)
