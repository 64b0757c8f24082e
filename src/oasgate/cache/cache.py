"""Disk-based cache for fetched remote ``$ref`` documents.

Uses :mod:`diskcache` to persist the text of remote documents (schemas shared
by many definitions in a batch) with a configurable time-to-live (TTL). Only
successful fetches are cached; failures are always retried so a transient
outage never sticks.

Cache keys are SHA-256 hashes of the absolute URL without its fragment.

See Also:
    :class:`~oasgate.models.CacheConfig` -- the Pydantic model that
    controls ``enabled`` and ``ttl_seconds``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

import diskcache

from oasgate.models import CacheConfig


class RemoteReferenceCache:
    """Disk-backed cache for remote reference text.

    Args:
        cache_dir: Root directory for the cache. A ``remote-refs/``
            subdirectory is created inside it.
        config: Cache configuration (``enabled`` flag and ``ttl_seconds``).

    Example::

        cache = RemoteReferenceCache("/tmp/oasgate", CacheConfig(enabled=True))
        cache.set("https://example.com/pet.yaml", "type: object")
        cache.get("https://example.com/pet.yaml")
    """

    def __init__(self, cache_dir: str | Path, config: CacheConfig) -> None:
        self._config = config
        self._cache: Optional[diskcache.Cache] = None
        self._cache_dir = Path(cache_dir)
        if config.enabled:
            self._cache = diskcache.Cache(str(self._cache_dir / "remote-refs"))

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    def get(self, url: str) -> Optional[str]:
        """Return the cached text for *url*, or ``None`` on a miss or when disabled."""
        if self._cache is None:
            return None
        return self._cache.get(self._make_key(url))

    def set(self, url: str, text: str) -> None:
        """Store the fetched text for *url*. A no-op when caching is disabled."""
        if self._cache is None:
            return
        self._cache.set(self._make_key(url), text, expire=self._config.ttl_seconds)

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()

    def _make_key(self, url: str) -> str:
        return hashlib.sha256(url.encode()).hexdigest()
