"""
Core modules for llm-meter.

This package contains request hashing, pricing, the usage ledger and
budget scopes.
"""
