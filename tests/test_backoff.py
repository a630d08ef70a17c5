"""Tests for decorrelated jitter backoff."""

import random

import pytest

from eventsource_client.backoff import DecorrelatedJitterBackoff


def make(base=1.0, maximum=30.0, seed=1234):
    return DecorrelatedJitterBackoff(base, maximum, rng=random.Random(seed))


class TestNextDelay:
    def test_within_bounds(self):
        backoff = make()
        for _ in range(200):
            delay = backoff.next_delay()
            assert 1.0 <= delay <= 30.0

    def test_capped_at_max(self):
        backoff = make(base=1.0, maximum=2.0)
        delays = [backoff.next_delay() for _ in range(50)]
        assert max(delays) <= 2.0
        assert min(delays) >= 1.0

    def test_first_delay_drawn_from_base_range(self):
        backoff = make(base=1.0)
        assert 1.0 <= backoff.next_delay() <= 3.0

    def test_increments_attempt_count(self):
        backoff = make()
        backoff.next_delay()
        backoff.next_delay()
        assert backoff.attempt_count == 2

    def test_stores_last_delay(self):
        backoff = make()
        delay = backoff.next_delay()
        assert backoff.last_delay == delay

    def test_zero_base(self):
        backoff = make(base=0.0, maximum=5.0)
        assert backoff.next_delay() == 0.0


class TestReset:
    def test_reset_restores_initial_behaviour(self):
        fresh = make(seed=99)
        used = make(seed=99)
        first = fresh.next_delay()

        for _ in range(10):
            used.next_delay()
        used.reset()
        used._rng = random.Random(99)

        assert used.attempt_count == 0
        assert used.last_delay == 1.0
        assert used.next_delay() == first

    def test_record_attempt(self):
        backoff = make()
        backoff.record_attempt()
        assert backoff.attempt_count == 1
        assert backoff.last_delay == 1.0


class TestBaseDelay:
    def test_setter_changes_lower_bound(self):
        backoff = make(base=0.1, maximum=30.0)
        backoff.base_delay = 1.5
        for _ in range(20):
            assert backoff.next_delay() >= 1.5

    def test_setter_when_idle_resets_last(self):
        backoff = make(base=1.0)
        backoff.base_delay = 0.5
        assert backoff.last_delay == 0.5

    def test_rejects_negative(self):
        backoff = make()
        with pytest.raises(ValueError):
            backoff.base_delay = -1


class TestValidation:
    def test_negative_base(self):
        with pytest.raises(ValueError):
            DecorrelatedJitterBackoff(-1.0, 5.0)

    def test_max_below_base(self):
        with pytest.raises(ValueError):
            DecorrelatedJitterBackoff(5.0, 1.0)
