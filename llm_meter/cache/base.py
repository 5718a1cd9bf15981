"""
Cache capability interfaces.

Backends are either synchronous (``Cache``) or return awaitables
(``AsyncCache``, e.g. Redis-style clients). ``CacheAdapter`` gives every
call site one async code path over both shapes.
"""

import inspect
import logging
from typing import Any, Optional, Protocol, runtime_checkable

from llm_meter.core.hashing import hash_request

logger = logging.getLogger(__name__)


@runtime_checkable
class Cache(Protocol):
    """Synchronous cache backend."""

    def make_key(self, request: Any) -> str: ...

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self) -> Any: ...


@runtime_checkable
class AsyncCache(Protocol):
    """Cache backend whose get/set/clear return awaitables.

    ``make_key`` stays synchronous so requests are hashed locally.
    """

    def make_key(self, request: Any) -> str: ...

    async def get(self, key: str) -> Optional[Any]: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def clear(self) -> Any: ...


class BaseCache:
    """Shared key derivation for the built-in backends."""

    def make_key(self, request: Any) -> str:
        return hash_request(request)


def is_cache_backend(obj: Any) -> bool:
    """Whether ``obj`` implements the cache capability interface."""
    return all(callable(getattr(obj, name, None)) for name in ("make_key", "get", "set", "clear"))


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class CacheAdapter:
    """Uniformly async view of a sync or async cache backend.

    Backend failures never reach the caller: a failing ``get`` reads as a
    miss and a failing ``set``/``clear`` as a no-op.
    """

    def __init__(self, backend: Any):
        if not is_cache_backend(backend):
            raise TypeError(
                f"{type(backend).__name__} does not implement make_key/get/set/clear"
            )
        self.backend = backend

    def make_key(self, request: Any) -> str:
        return self.backend.make_key(request)

    async def get(self, key: str) -> Optional[Any]:
        try:
            return await _resolve(self.backend.get(key))
        except Exception:
            logger.debug("Cache get failed for key %s; treating as miss", key, exc_info=True)
            return None

    async def set(self, key: str, value: Any) -> None:
        try:
            await _resolve(self.backend.set(key, value))
        except Exception:
            logger.debug("Cache set failed for key %s; ignoring", key, exc_info=True)

    async def clear(self) -> None:
        try:
            await _resolve(self.backend.clear())
        except Exception:
            logger.debug("Cache clear failed; ignoring", exc_info=True)
