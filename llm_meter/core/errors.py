"""
Error types raised by the meter and budget scopes.
"""

from enum import Enum


class LimitKind(Enum):
    """Which budget ceiling was crossed."""
    COST = "cost"
    TOKEN = "token"


class MeterError(Exception):
    """Base class for all llm-meter errors."""


class BudgetExceeded(MeterError):
    """Raised when a budget scope's usage delta crosses one of its limits."""
    def __init__(self, message: str, kind: LimitKind, current: float, maximum: float):
        super().__init__(message)
        self.kind = kind
        self.current = current
        self.maximum = maximum


class CostLimitExceeded(BudgetExceeded):
    """Spend inside a scope exceeded its max_cost_usd."""
    def __init__(self, current_cost: float, max_cost: float):
        super().__init__(
            f"Spending cap exceeded: ${current_cost:.4f} > ${max_cost:.4f}",
            LimitKind.COST,
            current_cost,
            max_cost,
        )
        self.current_cost = current_cost
        self.max_cost = max_cost


class TokenCapExceeded(BudgetExceeded):
    """Tokens used inside a scope exceeded its max_tokens."""
    def __init__(self, current_tokens: int, max_tokens: int):
        super().__init__(
            f"Token cap exceeded: {current_tokens} > {max_tokens}",
            LimitKind.TOKEN,
            current_tokens,
            max_tokens,
        )
        self.current_tokens = current_tokens
        self.max_tokens = max_tokens


class UnknownModelError(MeterError, ValueError):
    """Raised when a model has no entry in the pricing table."""
