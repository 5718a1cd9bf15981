"""
Cache backends for deduplicating identical requests.

All backends share one key derivation (canonical request hashing).
"""

from .base import AsyncCache, BaseCache, Cache, CacheAdapter
from .disk import DiskCache
from .factory import build_cache
from .memory import BoundedMemoryCache, MemoryCache

__all__ = [
    "AsyncCache",
    "BaseCache",
    "BoundedMemoryCache",
    "Cache",
    "CacheAdapter",
    "DiskCache",
    "MemoryCache",
    "build_cache",
]
