"""Time-boxed cache of aggregated profiles."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional
import logging

from .config import CacheConfig
from .contracts.profile import CulturalProfile, PreferenceSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """One cached profile."""
    cache_key: str
    profile: CulturalProfile
    created_at: datetime
    expires_at: datetime
    hit_count: int = 0


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    hit_count: int
    miss_count: int
    eviction_count: int
    hit_rate: float

    def to_dict(self) -> dict:
        return {
            'totalEntries': self.total_entries,
            'hits': self.hit_count,
            'misses': self.miss_count,
            'evictions': self.eviction_count,
            'hitRate': round(self.hit_rate, 4),
        }


class ProfileCache:
    """
    In-memory profile cache keyed by the PreferenceSet content hash.

    Expired entries are never returned; the oldest entry is evicted
    when the cache is full. Degraded profiles are not stored.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._config = config or CacheConfig()
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @staticmethod
    def key_for(preferences: PreferenceSet) -> str:
        return preferences.content_hash()

    def get(self, preferences: PreferenceSet) -> Optional[CulturalProfile]:
        key = self.key_for(preferences)
        entry = self._cache.get(key)

        if entry is None:
            self._misses += 1
            return None

        if self._clock() >= entry.expires_at:
            del self._cache[key]
            self._misses += 1
            return None

        self._hits += 1
        self._cache[key] = CacheEntry(
            cache_key=entry.cache_key,
            profile=entry.profile,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
            hit_count=entry.hit_count + 1,
        )
        logger.debug("Profile cache hit %s", key[:12])
        return entry.profile

    def put(self, preferences: PreferenceSet, profile: CulturalProfile) -> bool:
        """Store a profile. Returns False when it was not cacheable."""
        if profile.is_degraded:
            return False

        key = self.key_for(preferences)
        if key not in self._cache and len(self._cache) >= self._config.max_entries:
            self._evict_oldest()

        now = self._clock()
        self._cache[key] = CacheEntry(
            cache_key=key,
            profile=profile,
            created_at=now,
            expires_at=now + timedelta(seconds=self._config.ttl_seconds),
        )
        return True

    def _evict_oldest(self):
        if not self._cache:
            return
        oldest_key = min(self._cache.keys(), key=lambda k: self._cache[k].created_at)
        del self._cache[oldest_key]
        self._evictions += 1

    def invalidate(self, preferences: PreferenceSet):
        self._cache.pop(self.key_for(preferences), None)

    def clear(self):
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            total_entries=len(self._cache),
            hit_count=self._hits,
            miss_count=self._misses,
            eviction_count=self._evictions,
            hit_rate=self._hits / total if total > 0 else 0.0,
        )
