"""
Bring-your-own provider recording.

Records usage for any client whose responses expose a model name and token
counts, with optional response deduplication through the meter's cache.
"""

import inspect
import logging
from typing import Any, Callable

from ..core.context import check_current_scope
from ..core.meter import LlmMeter
from ..core.pricing import estimate_cost_usd

logger = logging.getLogger(__name__)


class BringYourOwnProvider:
    """Provider wrapper that records usage extracted from responses.

    Extraction is delegated to caller-supplied functions so no client SDK
    is assumed. Recording failures are loud; cache failures are not.
    """

    def __init__(
        self,
        meter: LlmMeter,
        provider_name: str,
        extract_model: Callable[[Any], str],
        extract_input_tokens: Callable[[Any], int],
        extract_output_tokens: Callable[[Any], int],
    ):
        """Initialize the provider wrapper.

        Args:
            meter: Meter receiving usage events (required)
            provider_name: Provider identifier for the breakdown (required)
            extract_model: Returns the model name from a response
            extract_input_tokens: Returns input token count from a response
            extract_output_tokens: Returns output token count from a response

        Raises:
            ValueError: If provider_name is missing/empty
        """
        if not provider_name or not provider_name.strip():
            raise ValueError("provider_name is required and cannot be empty")

        self.meter = meter
        self.provider_name = provider_name
        self.extract_model = extract_model
        self.extract_input_tokens = extract_input_tokens
        self.extract_output_tokens = extract_output_tokens

    def record(self, response: Any) -> Any:
        """Record the usage a response reports and return it unchanged.

        Raises:
            UnknownModelError: If the model is unpriced and not allowed
            CostLimitExceeded: If the current scope's cost limit is crossed
            TokenCapExceeded: If the current scope's token limit is crossed
        """
        self.meter.record(
            model=self.extract_model(response),
            input_tokens=self.extract_input_tokens(response),
            output_tokens=self.extract_output_tokens(response),
            provider=self.provider_name,
        )
        return response

    def _note_hit(self, response: Any) -> Any:
        model = self.extract_model(response)
        input_tokens = self.extract_input_tokens(response)
        output_tokens = self.extract_output_tokens(response)
        usd_saved = estimate_cost_usd(
            model, input_tokens, output_tokens, allow_unknown=self.meter.allow_unknown_models
        )
        self.meter.note_cache_hit(input_tokens + output_tokens, usd_saved)
        check_current_scope()
        return response

    async def call(self, request: Any, fn: Callable[[Any], Any]) -> Any:
        """Call ``fn(request)`` with deduplication and usage recording.

        On a cache hit the stored response is returned and counted as
        savings, never billed. On a miss ``fn`` is called (awaited if it
        returns an awaitable), the response is stored, and its usage is
        recorded. ``None`` responses are never stored, since ``None`` reads
        as a miss.

        Args:
            request: Serializable request; hashed into the cache key
            fn: Performs the real call for ``request``

        Returns:
            The cached or fresh response
        """
        cache = self.meter.cache_adapter()
        if cache is None:
            return self.record(await _call(fn, request))

        key = cache.make_key(request)
        cached = await cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s request %s", self.provider_name, key)
            return self._note_hit(cached)

        self.meter.note_cache_miss()
        response = await _call(fn, request)
        if response is not None:
            await cache.set(key, response)
        return self.record(response)


async def _call(fn: Callable[[Any], Any], request: Any) -> Any:
    result = fn(request)
    if inspect.isawaitable(result):
        result = await result
    return result
