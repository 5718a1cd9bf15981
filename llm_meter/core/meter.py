"""
Usage ledger.

Accumulates token and cost usage globally and per provider, tracks cache
savings, and notifies the active budget scope after every recorded event.
"""

import logging
import threading
from typing import Any, Dict, Optional

from llm_meter.cache.base import CacheAdapter
from llm_meter.cache.factory import CacheOption, build_cache
from .context import check_current_scope
from .pricing import define_model, estimate_cost_usd
from .usage import CacheSavings, CacheSummary, UsageCounter, UsageEvent, UsageSnapshot

logger = logging.getLogger(__name__)


class LlmMeter:
    """Ledger of LLM usage, cost and cache savings.

    The global counter always equals the sum of the per-provider counters:
    both are updated under the same lock by ``record_usage`` and reset
    together by ``clear``.
    """

    def __init__(
        self,
        cache: CacheOption = None,
        cache_dir: Optional[str] = None,
        allow_unknown_models: bool = False,
    ):
        """Create an empty meter.

        Args:
            cache: Cache selection (None, "memory", "disk", a CacheConfig,
                a mapping with a "backend" key, or a backend instance)
            cache_dir: Directory for the "disk" shorthand
            allow_unknown_models: Price unknown models at zero instead of raising
        """
        self._lock = threading.Lock()
        self._usage = UsageCounter()
        self._by_provider: Dict[str, UsageCounter] = {}
        self._savings = CacheSavings()
        self._cache = build_cache(cache, cache_dir=cache_dir)
        self.allow_unknown_models = allow_unknown_models

    @classmethod
    def from_config(cls, config) -> "LlmMeter":
        """Build a meter from a loaded ``MeterConfig``.

        Custom model pricing from the config is registered globally.
        """
        for model, pricing in config.pricing.models.items():
            define_model(model, pricing.input_per_1k, pricing.output_per_1k, pricing.provider)
        return cls(cache=config.cache, allow_unknown_models=config.pricing.allow_unknown_models)

    @property
    def summary(self) -> UsageSnapshot:
        """Snapshot of global usage."""
        with self._lock:
            return self._usage.snapshot()

    def snapshot(self) -> UsageSnapshot:
        return self.summary

    @property
    def breakdown(self) -> Dict[str, UsageSnapshot]:
        """Snapshot of usage per provider (a fresh dict on every access)."""
        with self._lock:
            return {name: counter.snapshot() for name, counter in self._by_provider.items()}

    @property
    def spent_usd(self) -> float:
        with self._lock:
            return self._usage.cost_usd

    @property
    def savings(self) -> CacheSummary:
        with self._lock:
            return self._savings.snapshot()

    def cache_store(self) -> Optional[Any]:
        """Return the configured cache backend, or None."""
        return self._cache

    def cache_adapter(self) -> Optional[CacheAdapter]:
        """Return the cache backend behind a uniformly async adapter, or None."""
        if self._cache is None:
            return None
        return CacheAdapter(self._cache)

    def record_usage(self, event: UsageEvent, provider: str) -> None:
        """Fold a usage event into the global and provider counters.

        After the update, the budget scope bound to the calling context (if
        any) checks its limits, so a breach surfaces at the recording call.

        Raises:
            CostLimitExceeded: If the current scope's cost limit is crossed
            TokenCapExceeded: If the current scope's token limit is crossed
        """
        if not provider:
            raise ValueError("provider is required and cannot be empty")

        with self._lock:
            self._usage.add(event)
            counter = self._by_provider.get(provider)
            if counter is None:
                counter = self._by_provider[provider] = UsageCounter()
            counter.add(event)

        check_current_scope()

    def record(self, model: str, input_tokens: int, output_tokens: int, provider: str) -> UsageEvent:
        """Price a call with the pricing table and record it.

        Returns:
            The recorded UsageEvent

        Raises:
            UnknownModelError: If the model is unpriced and unknown models
                are not allowed
        """
        cost = estimate_cost_usd(
            model, input_tokens, output_tokens, allow_unknown=self.allow_unknown_models
        )
        event = UsageEvent(input_tokens=input_tokens, output_tokens=output_tokens, cost_usd=cost)
        self.record_usage(event, provider)
        return event

    def note_cache_hit(self, tokens_saved: int, usd_saved: float) -> None:
        """Count a cache hit. Hits are never billed."""
        with self._lock:
            self._savings.note_hit(tokens_saved, usd_saved)

    def note_cache_miss(self) -> None:
        with self._lock:
            self._savings.note_miss()

    def clear(self) -> None:
        """Reset usage, per-provider usage and cache savings together."""
        with self._lock:
            self._usage = UsageCounter()
            self._by_provider = {}
            self._savings = CacheSavings()
        logger.debug("Meter cleared")
