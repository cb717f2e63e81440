"""
SceneCache — Generated scene descriptions keyed by (world, stage, location).

Whether a cached scene is reused instead of generating a fresh one is up to
a ReusePolicy. The default reuses with fixed probability 0.3 so revisited
places sometimes read the same and sometimes change.
"""

import random
import logging
from collections import OrderedDict
from typing import Optional, Tuple, Dict, Any

logger = logging.getLogger('SceneCache')

CacheKey = Tuple[str, int, str]


class ReusePolicy:
    """Decides whether a cache hit should actually be served."""

    def should_reuse(self, key: CacheKey) -> bool:
        raise NotImplementedError


class ProbabilisticReuse(ReusePolicy):
    def __init__(self, probability: float = 0.3, rng: Optional[random.Random] = None):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"Reuse probability must be in [0, 1], got {probability}")
        self.probability = probability
        self.rng = rng or random.Random()

    def should_reuse(self, key: CacheKey) -> bool:
        return self.rng.random() < self.probability


class AlwaysReuse(ReusePolicy):
    def should_reuse(self, key: CacheKey) -> bool:
        return True


class NeverReuse(ReusePolicy):
    def should_reuse(self, key: CacheKey) -> bool:
        return False


class SceneCache:
    """Bounded LRU store of scene documents.

    `get` returns a stored scene only when one exists *and* the policy
    agrees to reuse it. Least recently stored/served entries are evicted
    once `max_entries` is exceeded.
    """

    def __init__(self, policy: Optional[ReusePolicy] = None, max_entries: int = 128):
        self.policy = policy or ProbabilisticReuse()
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, Dict[str, Any]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(world: str, stage: int, location: str) -> CacheKey:
        return (world, stage, location or "Unknown")

    def get(self, key: CacheKey) -> Optional[Dict[str, Any]]:
        scene = self._entries.get(key)
        if scene is None or not self.policy.should_reuse(key):
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        logger.info(f"Reusing cached scene for {key}")
        return dict(scene)

    def put(self, key: CacheKey, scene: Dict[str, Any]) -> None:
        self._entries[key] = dict(scene)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cached scene {evicted}")

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
