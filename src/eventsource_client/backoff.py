"""Reconnect backoff with decorrelated jitter.

Each delay is drawn from [base, previous * 3] and capped at ``max_delay``,
so consecutive clients drift apart instead of reconnecting in lockstep.
"""

from __future__ import annotations

import random


class DecorrelatedJitterBackoff:
    """Produces successive reconnect delays, in seconds."""

    def __init__(
        self,
        base_delay: float,
        max_delay: float,
        rng: random.Random | None = None,
    ) -> None:
        if base_delay < 0:
            raise ValueError(f"base_delay must be non-negative, got {base_delay}")
        if max_delay < base_delay:
            raise ValueError(f"max_delay ({max_delay}) must be >= base_delay ({base_delay})")
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._rng = rng or random.Random()
        self._attempt_count = 0
        self._last_delay = base_delay

    @property
    def attempt_count(self) -> int:
        return self._attempt_count

    @property
    def base_delay(self) -> float:
        return self._base_delay

    @base_delay.setter
    def base_delay(self, value: float) -> None:
        if value < 0:
            raise ValueError(f"base_delay must be non-negative, got {value}")
        self._base_delay = value
        # The sampling range needs last_delay >= base_delay.
        if self._attempt_count == 0 or self._last_delay < value:
            self._last_delay = value

    @property
    def max_delay(self) -> float:
        return self._max_delay

    @property
    def last_delay(self) -> float:
        return self._last_delay

    def next_delay(self) -> float:
        """Advance the attempt counter and return the delay before the next attempt."""
        self._attempt_count += 1
        candidate = self._rng.uniform(self._base_delay, self._last_delay * 3)
        delay = min(self._max_delay, candidate)
        self._last_delay = delay
        return delay

    def record_attempt(self) -> None:
        """Count an attempt that was made without waiting."""
        self._attempt_count += 1

    def reset(self) -> None:
        self._attempt_count = 0
        self._last_delay = self._base_delay
