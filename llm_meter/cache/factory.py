"""
Cache backend selection.

Turns the cache configuration surface into a backend instance.
"""

from typing import Any, Mapping, Optional, Union

from llm_meter.config.loader import CacheBackend, CacheConfig, parse_cache_config
from .base import is_cache_backend
from .disk import DiskCache
from .memory import BoundedMemoryCache, MemoryCache

CacheOption = Union[None, str, CacheConfig, Mapping[str, Any], Any]


def build_cache(value: CacheOption, cache_dir: Optional[str] = None) -> Optional[Any]:
    """Build a cache backend from a configuration value.

    Args:
        value: None, "memory", "disk", a CacheConfig, a mapping with a
            "backend" key, or an object implementing make_key/get/set/clear
        cache_dir: Directory for the "disk" shorthand

    Returns:
        A cache backend, or None when caching is disabled

    Raises:
        ValueError: If the configuration is invalid
        TypeError: If value is an object that is not a cache backend
    """
    if value is None:
        return None
    if isinstance(value, str):
        if value == "memory":
            return MemoryCache()
        if value == "disk":
            return DiskCache(cache_dir=cache_dir)
        if value == "none":
            return None
        raise ValueError(f"Unknown cache backend: {value!r}")
    if isinstance(value, Mapping):
        value = parse_cache_config(dict(value), "cache")
    if isinstance(value, CacheConfig):
        return _from_config(value)
    if is_cache_backend(value):
        return value
    raise TypeError(f"{type(value).__name__} is not a cache configuration or backend")


def _from_config(config: CacheConfig) -> Optional[Any]:
    if config.backend == CacheBackend.NONE:
        return None
    if config.backend == CacheBackend.MEMORY:
        return MemoryCache()
    if config.backend == CacheBackend.BOUNDED_MEMORY:
        return BoundedMemoryCache(max_entries=config.max_entries, ttl_ms=config.ttl_ms)
    return DiskCache(
        cache_dir=config.cache_dir,
        max_entries=config.max_entries,
        ttl_ms=config.ttl_ms,
    )
