"""
Budget scopes and spend limits.

A budget scope records a baseline of the meter's totals when it is created
and measures every later change against it.

Enforcement Order:
1. Cost limit - checked first, wins when both limits are crossed
2. Token limit

Limits are checked whenever usage is recorded while the scope is current,
and once more when ``run`` completes without raising.
"""

import functools
import inspect
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar, Union

from .context import bind_scope, current_scope
from .errors import CostLimitExceeded, TokenCapExceeded
from .meter import LlmMeter
from .usage import UsageSnapshot

T = TypeVar("T")


class BudgetScope:
    """Accounting boundary measuring usage delta since its creation."""

    def __init__(
        self,
        max_cost_usd: Optional[float] = None,
        max_tokens: Optional[int] = None,
        meter: Optional[LlmMeter] = None,
    ):
        """Create a scope and capture the meter's baseline totals.

        Args:
            max_cost_usd: Spend ceiling in USD (None means unconstrained)
            max_tokens: Token ceiling (None means unconstrained)
            meter: Meter to track; a fresh one is created if omitted

        Raises:
            ValueError: If a limit is negative
        """
        if max_cost_usd is not None and max_cost_usd < 0:
            raise ValueError("max_cost_usd cannot be negative")
        if max_tokens is not None and max_tokens < 0:
            raise ValueError("max_tokens cannot be negative")

        self.max_cost_usd = max_cost_usd
        self.max_tokens = max_tokens
        self.meter = meter if meter is not None else LlmMeter()
        self.baseline = self.meter.summary

    @property
    def current_usage(self) -> UsageSnapshot:
        """Usage recorded since this scope was created.

        Not clamped: a negative field means the meter was cleared mid-scope.
        """
        return self.meter.summary - self.baseline

    @property
    def remaining_budget(self) -> Optional[float]:
        """USD left before the cost limit, or None when unconstrained."""
        if self.max_cost_usd is None:
            return None
        return max(0.0, self.max_cost_usd - self.current_usage.cost_usd)

    @property
    def remaining_tokens(self) -> Optional[int]:
        """Tokens left before the token limit, or None when unconstrained."""
        if self.max_tokens is None:
            return None
        return max(0, self.max_tokens - self.current_usage.tokens)

    def check_limits(self) -> None:
        """Raise if this scope's usage delta exceeds a limit.

        Raises:
            CostLimitExceeded: If spend exceeds max_cost_usd
            TokenCapExceeded: If tokens exceed max_tokens
        """
        usage = self.current_usage
        if self.max_cost_usd is not None and usage.cost_usd > self.max_cost_usd:
            raise CostLimitExceeded(usage.cost_usd, self.max_cost_usd)
        if self.max_tokens is not None and usage.tokens > self.max_tokens:
            raise TokenCapExceeded(usage.tokens, self.max_tokens)

    @property
    def is_active(self) -> bool:
        """Whether this scope is the current scope for the calling context."""
        return current_scope() is self

    @contextmanager
    def activate(self) -> Iterator["BudgetScope"]:
        """Make this scope current for the body of a ``with`` block.

        Limits are checked on normal exit; the binding is always released.
        """
        with bind_scope(self):
            yield self
            self.check_limits()

    async def run(
        self,
        fn: Callable[..., Union[T, Awaitable[T]]],
        *args: Any,
        pass_scope: bool = False,
        **kwargs: Any,
    ) -> T:
        """Run ``fn`` with this scope current and return its result.

        ``fn`` may be a plain function or a coroutine function. The scope
        stays current across every suspension of ``fn`` and in tasks it
        spawns. With ``pass_scope=True`` the scope is passed to ``fn`` as
        its first argument, ahead of ``args``.

        Raises:
            CostLimitExceeded: If the cost limit is crossed
            TokenCapExceeded: If the token limit is crossed
        """
        if pass_scope:
            args = (self,) + args
        with self.activate():
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

    def run_sync(self, fn: Callable[..., T], *args: Any, pass_scope: bool = False, **kwargs: Any) -> T:
        """Synchronous counterpart of ``run``."""
        if pass_scope:
            args = (self,) + args
        with self.activate():
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise TypeError("run_sync() got an awaitable; use 'await scope.run(...)' instead")
            return result

    def wrap(self, fn: Callable[..., T]) -> Callable[..., T]:
        """Wrap a function so every call executes under this scope."""
        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any):
                return await self.run(fn, *args, **kwargs)

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            return self.run_sync(fn, *args, **kwargs)

        return wrapper

    def __repr__(self) -> str:
        return (
            f"BudgetScope(max_cost_usd={self.max_cost_usd!r}, "
            f"max_tokens={self.max_tokens!r}, current_usage={self.current_usage!r})"
        )


def cap(
    max_cost_usd: Optional[float] = None,
    max_tokens: Optional[int] = None,
    meter: Optional[LlmMeter] = None,
) -> BudgetScope:
    """Create a budget scope."""
    return BudgetScope(max_cost_usd=max_cost_usd, max_tokens=max_tokens, meter=meter)


def current_budget() -> Optional[BudgetScope]:
    """Return the budget scope current for the calling context, if any."""
    scope = current_scope()
    return scope if isinstance(scope, BudgetScope) else None
