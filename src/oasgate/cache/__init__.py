"""Remote reference caching backed by :mod:`diskcache`."""

from oasgate.cache.cache import RemoteReferenceCache

__all__ = ["RemoteReferenceCache"]
