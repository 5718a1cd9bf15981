from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Protocol


class LimitChecker(Protocol):
    def check_limits(self) -> None: ...


_current_scope: ContextVar[Optional[LimitChecker]] = ContextVar("llm_meter_scope", default=None)


def current_scope() -> Optional[LimitChecker]:
    """Return the budget scope bound to the calling context, if any."""
    return _current_scope.get()


@contextmanager
def bind_scope(scope: LimitChecker) -> Iterator[LimitChecker]:
    """Bind ``scope`` as current for the body of the ``with`` block.

    Tasks created inside the block inherit the binding; siblings do not.
    """
    token = _current_scope.set(scope)
    try:
        yield scope
    finally:
        _current_scope.reset(token)


def check_current_scope() -> None:
    """Run the current scope's limit check, if a scope is bound."""
    scope = _current_scope.get()
    if scope is not None:
        scope.check_limits()
