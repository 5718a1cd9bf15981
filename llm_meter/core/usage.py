"""
Usage events, snapshots and counters.

Value types folded into the meter's ledger and handed back to callers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UsageEvent:
    """A single metered call, folded into a ledger and then discarded."""
    input_tokens: int
    output_tokens: int
    cost_usd: float
    call_count: int = 1

    def __post_init__(self):
        """Validate token and call counts are non-negative."""
        if self.input_tokens < 0:
            raise ValueError("input_tokens cannot be negative")
        if self.output_tokens < 0:
            raise ValueError("output_tokens cannot be negative")
        if self.call_count < 0:
            raise ValueError("call_count cannot be negative")

    @property
    def tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class UsageSnapshot:
    """Immutable view of a usage counter at one point in time.

    Subtracting two snapshots yields the per-field delta. Deltas are never
    clamped: a negative field means the ledger was cleared in between.
    """
    tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0
    calls: int = 0

    def __sub__(self, other: "UsageSnapshot") -> "UsageSnapshot":
        if not isinstance(other, UsageSnapshot):
            return NotImplemented
        return UsageSnapshot(
            tokens=self.tokens - other.tokens,
            input_tokens=self.input_tokens - other.input_tokens,
            output_tokens=self.output_tokens - other.output_tokens,
            cost_usd=self.cost_usd - other.cost_usd,
            calls=self.calls - other.calls,
        )


@dataclass(frozen=True)
class CacheSummary:
    """Immutable view of cache savings."""
    hit_count: int = 0
    miss_count: int = 0
    tokens_saved: int = 0
    usd_saved: float = 0.0


class UsageCounter:
    """Mutable usage totals owned by a meter."""

    def __init__(self):
        self.tokens = 0
        self.input_tokens = 0
        self.output_tokens = 0
        self.cost_usd = 0.0
        self.calls = 0

    def add(self, event: UsageEvent) -> None:
        self.tokens += event.tokens
        self.input_tokens += event.input_tokens
        self.output_tokens += event.output_tokens
        self.cost_usd += event.cost_usd
        self.calls += event.call_count

    def snapshot(self) -> UsageSnapshot:
        return UsageSnapshot(
            tokens=self.tokens,
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            cost_usd=self.cost_usd,
            calls=self.calls,
        )


class CacheSavings:
    """Mutable cache hit/miss counters owned by a meter."""

    def __init__(self):
        self.hit_count = 0
        self.miss_count = 0
        self.tokens_saved = 0
        self.usd_saved = 0.0

    def note_hit(self, tokens_saved: int, usd_saved: float) -> None:
        self.hit_count += 1
        self.tokens_saved += tokens_saved
        self.usd_saved += usd_saved

    def note_miss(self) -> None:
        self.miss_count += 1

    def snapshot(self) -> CacheSummary:
        return CacheSummary(
            hit_count=self.hit_count,
            miss_count=self.miss_count,
            tokens_saved=self.tokens_saved,
            usd_saved=self.usd_saved,
        )
