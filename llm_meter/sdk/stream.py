"""
Streaming usage recording.

Providers report usage on some stream chunks (often only the last). The
wrapper passes chunks through untouched and records once the stream ends.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

from ..core.meter import LlmMeter


@dataclass(frozen=True)
class StreamUsageHint:
    """Usage figures reported by a single stream chunk."""
    model: Optional[str] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


def _coerce(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _reports_usage(hint: StreamUsageHint) -> bool:
    return (
        _coerce(hint.input_tokens) + _coerce(hint.output_tokens) > 0
        or _coerce(hint.total_tokens) > 0
    )


def meter_stream(
    stream: Any,
    meter: LlmMeter,
    provider: str,
    extract: Callable[[Any], Optional[StreamUsageHint]],
    model: Optional[str] = None,
) -> Any:
    """Wrap an async stream so its usage is recorded when it completes.

    The last chunk whose hint reports non-zero tokens wins. When input
    tokens are missing, total tokens stand in for them. Nothing is recorded
    if no chunk reported usage. Objects that are not async iterables are
    returned unchanged.

    Args:
        stream: Async iterable of provider chunks
        meter: Meter receiving the usage event
        provider: Provider identifier for the breakdown
        extract: Returns a StreamUsageHint (or None) for a chunk
        model: Fallback model name when chunks do not carry one
    """
    if not hasattr(stream, "__aiter__"):
        return stream
    return _metered(stream, meter, provider, extract, model)


async def _metered(
    stream: Any,
    meter: LlmMeter,
    provider: str,
    extract: Callable[[Any], Optional[StreamUsageHint]],
    model: Optional[str],
) -> AsyncIterator[Any]:
    last: Optional[StreamUsageHint] = None

    async for chunk in stream:
        hint = extract(chunk)
        if hint is not None and _reports_usage(hint):
            last = hint
        yield chunk

    if last is None:
        return

    if last.input_tokens is not None:
        input_tokens = _coerce(last.input_tokens)
    else:
        input_tokens = _coerce(last.total_tokens)
    output_tokens = _coerce(last.output_tokens)
    if input_tokens == 0 and output_tokens == 0:
        return

    meter.record(
        model=last.model or model or "unknown",
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        provider=provider,
    )
