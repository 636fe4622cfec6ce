"""Unit tests for duplicate message suppression"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier
from carteira_gateway.domain.dedup import MessageDeduplicator


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_duplicate_within_window():
    """Test the same message inside 30s is reported as seen"""
    clock = Clock()
    dedup = MessageDeduplicator(ttl_seconds=30, clock=clock)

    assert dedup.seen_recently("u1", "m1") is False
    clock.now = 29.0
    assert dedup.seen_recently("u1", "m1") is True


def test_duplicate_window_expires():
    """Test the same message after 30s is handled again"""
    clock = Clock()
    dedup = MessageDeduplicator(ttl_seconds=30, clock=clock)

    dedup.seen_recently("u1", "m1")
    clock.now = 31.0
    assert dedup.seen_recently("u1", "m1") is False


def test_duplicate_key_includes_user():
    """Test keys combine user and message id"""
    dedup = MessageDeduplicator(ttl_seconds=30, clock=Clock())

    dedup.seen_recently("u1", "m1")
    assert dedup.seen_recently("u2", "m1") is False
    assert dedup.seen_recently("u1", "m2") is False


def test_expired_entries_are_purged():
    """Test old keys are dropped when new messages arrive"""
    clock = Clock()
    dedup = MessageDeduplicator(ttl_seconds=30, clock=clock)
    for i in range(5):
        dedup.seen_recently("u1", f"m{i}")

    clock.now = 60.0
    dedup.seen_recently("u1", "late")

    assert len(dedup) == 1


def test_concurrent_deliveries_admit_one():
    """Test simultaneous deliveries of one message let exactly one through"""
    dedup = MessageDeduplicator(ttl_seconds=30)
    workers = 16
    barrier = Barrier(workers)

    def deliver(_):
        barrier.wait()
        return dedup.seen_recently("u1", "same-message")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(deliver, range(workers)))

    assert results.count(False) == 1


def test_concurrent_distinct_messages_all_admitted():
    """Test inserts from many threads while purging never lose a message"""
    dedup = MessageDeduplicator(ttl_seconds=30)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda i: dedup.seen_recently("u1", f"m{i}"), range(500)))

    assert not any(results)
    assert len(dedup) == 500
