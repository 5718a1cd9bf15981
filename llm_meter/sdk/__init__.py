"""
SDK for llm-meter.

Generic callers of the meter for clients of any provider.
"""

from .provider import BringYourOwnProvider
from .stream import StreamUsageHint, meter_stream

__all__ = ["BringYourOwnProvider", "StreamUsageHint", "meter_stream"]
