"""
Module 02 - Tree Cache Unit Tests
Tests for core/merkle/cache.py
"""
import threading

import pytest

from core.merkle import MerkleTree, TreeCache
from core.schemas.errors import CampaignNotFoundError

from fixtures.common import make_records


def build(count: int = 3) -> MerkleTree:
    return MerkleTree.from_records(make_records(count))


class TestTreeCache:
    """Basic map behavior."""

    def test_put_get(self):
        cache = TreeCache()
        tree = build()

        cache.put("spring", tree)

        assert cache.get("spring") is tree
        assert "spring" in cache
        assert len(cache) == 1

    def test_missing_campaign(self):
        with pytest.raises(CampaignNotFoundError) as exc_info:
            TreeCache().get("nope")

        assert exc_info.value.campaign_id == "nope"
        assert isinstance(exc_info.value, KeyError)

    def test_put_replaces(self):
        cache = TreeCache()
        first, second = build(2), build(4)

        cache.put("c", first)
        cache.put("c", second)

        assert cache.get("c") is second
        assert len(cache) == 1

    def test_unbuilt_tree_rejected(self):
        with pytest.raises(ValueError, match="built"):
            TreeCache().put("c", MerkleTree())

    def test_evict_and_clear(self):
        cache = TreeCache()
        cache.put("a", build())
        cache.put("b", build())

        assert cache.evict("a") is True
        assert cache.evict("a") is False
        assert list(cache) == ["b"]

        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            TreeCache(max_entries=0)

    def test_separate_instances_are_independent(self):
        first, second = TreeCache(), TreeCache()
        first.put("c", build())

        assert "c" not in second


class TestEviction:
    """LRU bound."""

    def test_oldest_evicted(self):
        cache = TreeCache(max_entries=2)
        cache.put("a", build())
        cache.put("b", build())
        cache.put("c", build())

        assert cache.campaign_ids() == ["b", "c"]

    def test_get_refreshes_recency(self):
        cache = TreeCache(max_entries=2)
        cache.put("a", build())
        cache.put("b", build())

        cache.get("a")
        cache.put("c", build())

        assert cache.campaign_ids() == ["a", "c"]


class TestGetOrBuild:
    """Lazy construction."""

    def test_builds_once(self):
        cache = TreeCache()
        calls = []

        def factory():
            calls.append(1)
            return build(5)

        first = cache.get_or_build("c", factory)
        second = cache.get_or_build("c", factory)

        assert first is second
        assert len(calls) == 1

    def test_unbuilt_factory_result(self):
        with pytest.raises(ValueError, match="unbuilt"):
            TreeCache().get_or_build("c", MerkleTree)

    def test_factory_error_propagates_and_caches_nothing(self):
        cache = TreeCache()

        with pytest.raises(ValueError):
            cache.get_or_build("c", lambda: MerkleTree.from_records([]))

        assert "c" not in cache

    def test_concurrent_callers_share_one_tree(self):
        cache = TreeCache()
        calls = []
        results = []
        barrier = threading.Barrier(8)

        def factory():
            calls.append(1)
            return build(64)

        def worker():
            barrier.wait()
            tree = cache.get_or_build("c", factory)
            results.append(tree.get_proof(10))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(r == results[0] for r in results)

    def test_factory_may_read_cache(self):
        cache = TreeCache()
        base = build(4)
        cache.put("base", base)
        seen = []

        def factory():
            seen.append(cache.get("base"))
            return build(2)

        worker = threading.Thread(target=cache.get_or_build, args=("derived", factory))
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert seen == [base]
        assert "derived" in cache

    def test_other_campaigns_readable_during_slow_build(self):
        cache = TreeCache()
        ready = build(3)
        cache.put("ready", ready)
        started = threading.Event()
        release = threading.Event()

        def slow_factory():
            started.set()
            release.wait(timeout=5)
            return build(8)

        worker = threading.Thread(target=cache.get_or_build, args=("slow", slow_factory))
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert cache.get("ready") is ready
            assert "slow" not in cache
            assert worker.is_alive()
        finally:
            release.set()
            worker.join(timeout=5)

        assert not worker.is_alive()
        assert "slow" in cache

    def test_waiter_retries_after_failed_build(self):
        cache = TreeCache()
        started = threading.Event()
        release = threading.Event()
        errors = []

        def failing_factory():
            started.set()
            release.wait(timeout=5)
            raise RuntimeError("boom")

        def first_caller():
            try:
                cache.get_or_build("c", failing_factory)
            except RuntimeError as e:
                errors.append(e)

        first = threading.Thread(target=first_caller)
        first.start()
        assert started.wait(timeout=5)

        results = []
        second = threading.Thread(
            target=lambda: results.append(cache.get_or_build("c", lambda: build(4)))
        )
        second.start()
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert len(errors) == 1
        assert len(results) == 1
        assert cache.get("c") is results[0]
