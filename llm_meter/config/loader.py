"""
Configuration management and loading.

Loads meter settings (cache backend, default budget, custom pricing) from
YAML with strict validation.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class CacheBackend(Enum):
    """Available cache backends."""
    NONE = "none"
    MEMORY = "memory"
    BOUNDED_MEMORY = "bounded-memory"
    DISK = "disk"


@dataclass(frozen=True)
class CacheConfig:
    """Cache backend selection and its bounds."""
    backend: CacheBackend = CacheBackend.NONE
    max_entries: Optional[int] = None
    ttl_ms: Optional[float] = None
    cache_dir: Optional[str] = None

    def __post_init__(self):
        """Validate bounds are consistent with the backend."""
        if self.max_entries is not None and self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if self.ttl_ms is not None and self.ttl_ms <= 0:
            raise ValueError("ttl_ms must be > 0")
        if self.backend == CacheBackend.BOUNDED_MEMORY and self.max_entries is None:
            raise ValueError("bounded-memory cache requires max_entries")
        if self.backend == CacheBackend.MEMORY and self.ttl_ms is not None:
            raise ValueError("memory cache does not support ttl_ms; use bounded-memory")
        if self.cache_dir is not None and self.backend != CacheBackend.DISK:
            raise ValueError("cache_dir is only valid for the disk backend")


@dataclass(frozen=True)
class BudgetConfig:
    """Default spend and token ceilings."""
    max_cost_usd: Optional[float] = None
    max_tokens: Optional[int] = None

    def __post_init__(self):
        """Validate limit values are positive."""
        if self.max_cost_usd is not None and self.max_cost_usd <= 0:
            raise ValueError("max_cost_usd must be > 0")
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError("max_tokens must be > 0")


@dataclass(frozen=True)
class ModelPricingConfig:
    """Custom per-1K-token pricing for one model."""
    input_per_1k: float
    output_per_1k: float
    provider: str = "custom"


@dataclass(frozen=True)
class PricingConfig:
    """Pricing overrides and the unknown-model policy."""
    allow_unknown_models: bool = False
    models: Dict[str, ModelPricingConfig] = field(default_factory=dict)


@dataclass(frozen=True)
class MeterConfig:
    """Complete meter configuration."""
    cache: CacheConfig = field(default_factory=CacheConfig)
    budget: Optional[BudgetConfig] = None
    pricing: PricingConfig = field(default_factory=PricingConfig)

    def budget_scope(self, meter):
        """Create a BudgetScope over ``meter`` from the budget section.

        Returns:
            BudgetScope, or None when no budget section is configured
        """
        if self.budget is None:
            return None
        from llm_meter.core.budget import BudgetScope
        return BudgetScope(
            max_cost_usd=self.budget.max_cost_usd,
            max_tokens=self.budget.max_tokens,
            meter=meter,
        )


def load_meter_config(path: str) -> MeterConfig:
    """Load and validate meter configuration from a YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated MeterConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Meter config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")

    return parse_meter_config(raw_config)


def parse_meter_config(raw_config: Any) -> MeterConfig:
    """Validate an already-parsed configuration mapping.

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")
    _reject_unknown(raw_config, {'cache', 'budget', 'pricing'}, "configuration")

    cache = CacheConfig()
    if raw_config.get('cache') is not None:
        cache = parse_cache_config(_section(raw_config, 'cache'), "cache")

    budget = None
    if raw_config.get('budget') is not None:
        budget = _parse_budget_config(_section(raw_config, 'budget'))

    pricing = PricingConfig()
    if raw_config.get('pricing') is not None:
        pricing = _parse_pricing_config(_section(raw_config, 'pricing'))

    return MeterConfig(cache=cache, budget=budget, pricing=pricing)


def parse_cache_config(data: Dict, path: str = "cache") -> CacheConfig:
    """Parse and validate a cache section.

    A ``memory`` backend given ``max_entries`` selects the bounded backend.

    Args:
        data: Cache configuration data
        path: Path for error messages

    Returns:
        Validated CacheConfig

    Raises:
        ValueError: If configuration is invalid
    """
    _reject_unknown(data, {'backend', 'max_entries', 'ttl_ms', 'cache_dir'}, path)

    if 'backend' not in data:
        raise ValueError(f"Missing required 'backend' in {path}")
    backend_str = data['backend']
    if not isinstance(backend_str, str):
        raise ValueError(f"'backend' in {path} must be a string")
    try:
        backend = CacheBackend(backend_str.lower())
    except ValueError:
        valid_backends = [backend.value for backend in CacheBackend]
        raise ValueError(f"'backend' in {path} must be one of: {valid_backends}")

    max_entries = _optional_int(data, 'max_entries', path)
    ttl_ms = _optional_number(data, 'ttl_ms', path)
    cache_dir = data.get('cache_dir')
    if cache_dir is not None and not isinstance(cache_dir, str):
        raise ValueError(f"'cache_dir' in {path} must be a string")

    if backend == CacheBackend.MEMORY and max_entries is not None:
        backend = CacheBackend.BOUNDED_MEMORY

    try:
        return CacheConfig(
            backend=backend,
            max_entries=max_entries,
            ttl_ms=ttl_ms,
            cache_dir=cache_dir
        )
    except ValueError as e:
        raise ValueError(f"Invalid {path}: {e}")


def _parse_budget_config(data: Dict) -> BudgetConfig:
    _reject_unknown(data, {'max_cost_usd', 'max_tokens'}, "budget")
    try:
        return BudgetConfig(
            max_cost_usd=_optional_number(data, 'max_cost_usd', "budget"),
            max_tokens=_optional_int(data, 'max_tokens', "budget")
        )
    except ValueError as e:
        raise ValueError(f"Invalid budget: {e}")


def _parse_pricing_config(data: Dict) -> PricingConfig:
    _reject_unknown(data, {'allow_unknown_models', 'models'}, "pricing")

    allow_unknown = data.get('allow_unknown_models', False)
    if not isinstance(allow_unknown, bool):
        raise ValueError("'allow_unknown_models' in pricing must be a boolean")

    models_data = data.get('models') or {}
    if not isinstance(models_data, dict):
        raise ValueError("'models' in pricing must be a dictionary")

    models = {}
    for model_name, model_data in models_data.items():
        model_path = f"pricing.models.{model_name}"
        if not isinstance(model_data, dict):
            raise ValueError(f"Model '{model_name}' must be a dictionary")
        _reject_unknown(model_data, {'input_per_1k', 'output_per_1k', 'provider'}, model_path)
        for key in ('input_per_1k', 'output_per_1k'):
            if key not in model_data:
                raise ValueError(f"Missing required '{key}' in {model_path}")
            value = model_data[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"'{key}' in {model_path} must be a number >= 0")
        provider = model_data.get('provider', "custom")
        if not isinstance(provider, str) or not provider:
            raise ValueError(f"'provider' in {model_path} must be a non-empty string")
        models[str(model_name)] = ModelPricingConfig(
            input_per_1k=float(model_data['input_per_1k']),
            output_per_1k=float(model_data['output_per_1k']),
            provider=provider
        )

    return PricingConfig(allow_unknown_models=allow_unknown, models=models)


def _section(raw_config: Dict, name: str) -> Dict:
    data = raw_config[name]
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    return data


def _reject_unknown(data: Dict, allowed_keys: set, path: str) -> None:
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")


def _optional_number(data: Dict, key: str, path: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' in {path} must be a number")
    return float(value)


def _optional_int(data: Dict, key: str, path: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' in {path} must be an integer")
    return value
