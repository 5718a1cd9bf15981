"""
llm-meter: usage metering, response caching and spend caps for LLM calls.
"""

from llm_meter.cache import (
    AsyncCache,
    BoundedMemoryCache,
    Cache,
    CacheAdapter,
    DiskCache,
    MemoryCache,
    build_cache,
)
from llm_meter.config.loader import CacheConfig, MeterConfig, load_meter_config
from llm_meter.core.budget import BudgetScope, cap, current_budget
from llm_meter.core.errors import (
    BudgetExceeded,
    CostLimitExceeded,
    LimitKind,
    MeterError,
    TokenCapExceeded,
    UnknownModelError,
)
from llm_meter.core.hashing import hash_request
from llm_meter.core.meter import LlmMeter
from llm_meter.core.pricing import (
    ModelPricing,
    define_model,
    estimate_cost_usd,
    list_pricing,
    pricing_for,
)
from llm_meter.core.usage import CacheSummary, UsageEvent, UsageSnapshot
from llm_meter.sdk import BringYourOwnProvider, StreamUsageHint, meter_stream

__version__ = "0.1.0"

__all__ = [
    "AsyncCache",
    "BoundedMemoryCache",
    "BringYourOwnProvider",
    "BudgetExceeded",
    "BudgetScope",
    "Cache",
    "CacheAdapter",
    "CacheConfig",
    "CacheSummary",
    "CostLimitExceeded",
    "DiskCache",
    "LimitKind",
    "LlmMeter",
    "MemoryCache",
    "MeterConfig",
    "MeterError",
    "ModelPricing",
    "StreamUsageHint",
    "TokenCapExceeded",
    "UnknownModelError",
    "UsageEvent",
    "UsageSnapshot",
    "build_cache",
    "cap",
    "current_budget",
    "define_model",
    "estimate_cost_usd",
    "hash_request",
    "list_pricing",
    "load_meter_config",
    "meter_stream",
    "pricing_for",
]
