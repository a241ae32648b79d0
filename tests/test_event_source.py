"""Unit tests for the random event source."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
import pytest
from collections import Counter
from types import SimpleNamespace
from app.services.event_source import RandomEventSource

USERNAMES = ["john_doe", "jane_smith", "alice_johnson"]
EVENT_TYPES = ["access_granted", "access_denied", "face_match", "plate_read", "unauthorized_access"]


def make_source(seed=42, min_delay_ms=1000, max_delay_ms=5000):
    return RandomEventSource(USERNAMES, EVENT_TYPES, min_delay_ms, max_delay_ms,
                             rng=random.Random(seed))


class TestDraws:
    def test_username_from_vocabulary(self):
        source = make_source()
        assert {source.pick_username() for _ in range(200)} == set(USERNAMES)

    def test_event_type_from_vocabulary(self):
        source = make_source()
        assert {source.pick_event_type() for _ in range(500)} == set(EVENT_TYPES)

    def test_delay_within_bounds(self):
        source = make_source()
        delays = [source.next_delay() for _ in range(10_000)]
        assert all(isinstance(d, int) for d in delays)
        assert min(delays) >= 1000
        assert max(delays) < 5000

    def test_delay_roughly_uniform(self):
        source = make_source(seed=7)
        buckets = Counter((source.next_delay() - 1000) // 1000 for _ in range(20_000))
        assert set(buckets) == {0, 1, 2, 3}
        for count in buckets.values():
            assert 4500 < count < 5500

    def test_single_value_range(self):
        source = make_source(min_delay_ms=10, max_delay_ms=11)
        assert {source.next_delay() for _ in range(50)} == {10}


class TestConfiguration:
    def test_empty_usernames_rejected(self):
        with pytest.raises(ValueError):
            RandomEventSource([], EVENT_TYPES)

    def test_empty_event_types_rejected(self):
        with pytest.raises(ValueError):
            RandomEventSource(USERNAMES, [])

    @pytest.mark.parametrize("bounds", [(5000, 5000), (5000, 1000), (-1, 10)])
    def test_bad_delay_bounds_rejected(self, bounds):
        with pytest.raises(ValueError):
            RandomEventSource(USERNAMES, EVENT_TYPES, *bounds)

    def test_from_settings(self):
        cfg = SimpleNamespace(SAMPLE_USERNAMES=["a"], EVENT_TYPES=["face_match"],
                              TRANSACTION_MIN_DELAY_MS=100, TRANSACTION_MAX_DELAY_MS=200)
        source = RandomEventSource.from_settings(cfg)
        assert source.pick_username() == "a"
        assert source.pick_event_type() == "face_match"
        assert 100 <= source.next_delay() < 200
