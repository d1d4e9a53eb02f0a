"""
Module 02 - Tree Cache
Caller-owned cache of built Merkle trees keyed by campaign id.

Module ID: M02

Building a tree is the expensive step; proofs are cheap once the levels
exist. Services that answer many proof lookups for the same campaign keep
one TreeCache instance and pass it around explicitly. There is no
module-level cache.

Thread-safety: the cache map is guarded by a lock that is never held
while a tree is being built. Concurrent misses for the same campaign wait
on one in-flight build. Cached trees are immutable, so callers may read
them concurrently without holding the lock.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, Iterator

from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import CampaignNotFoundError


logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 128


class TreeCache:
    """
    Bounded LRU map: campaign id -> built MerkleTree.

    Example:
        >>> cache = TreeCache(max_entries=8)
        >>> tree = cache.get_or_build("spring-2026", lambda: MerkleTree.from_records(records))
        >>> cache.get("spring-2026") is tree
        True
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._max_entries = max_entries
        self._trees: OrderedDict[str, MerkleTree] = OrderedDict()
        self._lock = threading.Lock()
        self._pending: dict[str, threading.Event] = {}

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def put(self, campaign_id: str, tree: MerkleTree) -> None:
        """
        Store a built tree, replacing any previous tree for the campaign.

        Raises:
            ValueError: If the tree is not built
        """
        if not tree.is_built:
            raise ValueError("Only built trees can be cached")
        with self._lock:
            self._trees[campaign_id] = tree
            self._trees.move_to_end(campaign_id)
            self._evict_overflow()

    def get(self, campaign_id: str) -> MerkleTree:
        """
        Raises:
            CampaignNotFoundError: If the campaign is not cached
        """
        with self._lock:
            try:
                tree = self._trees[campaign_id]
            except KeyError:
                raise CampaignNotFoundError(campaign_id) from None
            self._trees.move_to_end(campaign_id)
            return tree

    def get_or_build(self, campaign_id: str, factory: Callable[[], MerkleTree]) -> MerkleTree:
        """
        Return the cached tree, building it with ``factory`` on a miss.

        ``factory`` runs without the cache lock, so it may itself read the
        cache and other campaigns stay available meanwhile. Concurrent
        callers for the same campaign wait for the first caller's build; if
        that build fails, one of them retries it.

        Raises:
            ValueError: If ``factory`` returns an unbuilt tree
        """
        while True:
            with self._lock:
                tree = self._trees.get(campaign_id)
                if tree is not None:
                    self._trees.move_to_end(campaign_id)
                    return tree
                pending = self._pending.get(campaign_id)
                if pending is None:
                    done = threading.Event()
                    self._pending[campaign_id] = done
                    break
            pending.wait()

        try:
            logger.info(f"Tree cache miss for campaign {campaign_id}, building")
            tree = factory()
            if not tree.is_built:
                raise ValueError(f"Factory for campaign {campaign_id} returned an unbuilt tree")
            with self._lock:
                self._trees[campaign_id] = tree
                self._trees.move_to_end(campaign_id)
                self._evict_overflow()
            return tree
        finally:
            with self._lock:
                self._pending.pop(campaign_id, None)
            done.set()

    def evict(self, campaign_id: str) -> bool:
        """Drop a campaign; returns whether it was cached."""
        with self._lock:
            return self._trees.pop(campaign_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._trees.clear()

    def campaign_ids(self) -> list[str]:
        """Cached campaign ids, least recently used first."""
        with self._lock:
            return list(self._trees)

    def _evict_overflow(self) -> None:
        while len(self._trees) > self._max_entries:
            evicted, _ = self._trees.popitem(last=False)
            logger.debug(f"Evicted campaign {evicted} from tree cache")

    def __contains__(self, campaign_id: object) -> bool:
        with self._lock:
            return campaign_id in self._trees

    def __len__(self) -> int:
        with self._lock:
            return len(self._trees)

    def __iter__(self) -> Iterator[str]:
        return iter(self.campaign_ids())


__all__ = ["DEFAULT_MAX_ENTRIES", "TreeCache"]
