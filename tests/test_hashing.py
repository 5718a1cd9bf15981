"""
Unit tests for canonical request hashing.

Tests key-order independence, distinct rendering of empty containers and
sentinel handling of values without a canonical form.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path

from llm_meter.core.hashing import FUNCTION_SENTINEL, hash_request, stable_render


class Role(Enum):
    USER = "user"


@dataclass
class Message:
    role: str
    content: str


class Settings:
    def __init__(self, level):
        self.level = level


class OtherSettings(Settings):
    pass


class Dumpable:
    """Exposes its fields through the named dump method."""

    def __init__(self, method, **fields):
        setattr(self, method, lambda: dict(fields))


class Handler:
    def __call__(self):
        return None


class TestStableRender:
    """Test canonical string rendering."""

    def test_mapping_keys_sorted(self):
        """Verify mapping keys render in sorted order."""
        assert stable_render({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_sequences_keep_order(self):
        """Verify list order is significant."""
        assert stable_render([3, 1, 2]) == "[3,1,2]"
        assert stable_render((1, "x")) == '[1,"x"]'

    def test_scalars(self):
        """Verify scalar literal forms."""
        assert stable_render(None) == "null"
        assert stable_render(True) == "true"
        assert stable_render(False) == "false"
        assert stable_render(42) == "42"
        assert stable_render(0.5) == "0.5"
        assert stable_render("hi") == '"hi"'

    def test_integral_float_matches_int(self):
        """Verify 1.0 and 1 render identically."""
        assert stable_render(1.0) == stable_render(1)

    def test_non_finite_floats_render_as_strings(self):
        """Verify NaN and infinity do not break rendering."""
        assert stable_render(float("inf")) == '"inf"'
        assert stable_render(float("nan")) == '"nan"'

    def test_empty_containers_distinct(self):
        """Verify {}, [] and None render distinctly."""
        rendered = {stable_render({}), stable_render([]), stable_render(None)}
        assert rendered == {"{}", "[]", "null"}

    def test_datetime_renders_iso(self):
        """Verify datetimes render as quoted ISO-8601 strings."""
        value = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert stable_render(value) == '"2024-01-01T12:00:00+00:00"'

    def test_decimal_and_enum(self):
        """Verify Decimal renders as a string and Enum as its value."""
        assert stable_render(Decimal("1.50")) == '"1.50"'
        assert stable_render(Role.USER) == '"user"'

    def test_dataclass_renders_as_mapping(self):
        """Verify dataclasses hash like the equivalent dict."""
        message = Message(role="user", content="hi")
        assert stable_render(message) == stable_render({"content": "hi", "role": "user"})

    def test_sets_are_order_independent(self):
        """Verify sets render the same regardless of iteration order."""
        assert stable_render({"b", "a", "c"}) == '["a","b","c"]'

    def test_callables_render_as_sentinel(self):
        """Verify functions render as a fixed sentinel."""
        assert stable_render(lambda: 1) == FUNCTION_SENTINEL
        assert stable_render(print) == FUNCTION_SENTINEL

    def test_arbitrary_objects_are_deterministic(self):
        """Verify plain objects do not leak memory addresses into keys."""
        assert stable_render(object()) == stable_render(object())
        assert stable_render(Settings(1)) == stable_render(Settings(1))

    def test_objects_with_str_render_by_value(self):
        """Verify UUIDs and paths keep distinct requests apart."""
        assert stable_render(uuid.UUID(int=1)) == json.dumps(str(uuid.UUID(int=1)))
        assert hash_request({"user": uuid.UUID(int=1)}) != hash_request({"user": uuid.UUID(int=2)})
        assert hash_request({"file": Path("/a")}) != hash_request({"file": Path("/b")})

    def test_plain_objects_render_their_state(self):
        """Verify instance attributes and type name feed the key."""
        assert hash_request({"s": Settings(1)}) != hash_request({"s": Settings(2)})
        assert stable_render(Settings(1)) == stable_render({"__type__": "Settings", "level": 1})
        assert stable_render(Settings(1)) != stable_render(OtherSettings(1))

    def test_dump_methods_render_as_mapping(self):
        """Verify model_dump() and _asdict() objects hash like their dicts."""
        assert stable_render(Dumpable("model_dump", a=1)) == stable_render({"a": 1})
        assert stable_render(Dumpable("_asdict", b=[1, 2])) == stable_render({"b": [1, 2]})
        assert stable_render(Dumpable("model_dump", a=1)) != stable_render(Dumpable("model_dump", a=2))

    def test_classes_and_callable_objects_render_as_sentinel(self):
        """Verify classes and callable instances stay opaque."""
        assert stable_render(Settings) == FUNCTION_SENTINEL
        assert stable_render(Handler()) == FUNCTION_SENTINEL


class TestHashRequest:
    """Test cache key derivation."""

    def test_key_order_independent(self):
        """Verify deep-equal requests with reordered keys hash identically."""
        r1 = {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "hello"}],
            "options": {"temperature": 0, "top_p": 1},
        }
        r2 = {
            "options": {"top_p": 1, "temperature": 0},
            "messages": [{"content": "hello", "role": "user"}],
            "model": "gpt-4o",
        }
        assert hash_request(r1) == hash_request(r2)

    def test_different_requests_differ(self):
        """Verify distinct content produces distinct keys."""
        assert hash_request({"prompt": "a"}) != hash_request({"prompt": "b"})

    def test_list_order_matters(self):
        """Verify message order changes the key."""
        assert hash_request({"m": [1, 2]}) != hash_request({"m": [2, 1]})

    def test_digest_format(self):
        """Verify key is a 64-char lowercase hex SHA-256 digest."""
        key = hash_request({"a": 1})
        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_deterministic(self):
        """Verify repeated hashing gives the same key."""
        request = {"model": "gpt-4o", "n": [1, 2, {"x": None}]}
        assert hash_request(request) == hash_request(request)

    def test_callables_do_not_distinguish_requests(self):
        """Verify two requests differing only by a callback hash the same."""
        assert hash_request({"cb": lambda: 1}) == hash_request({"cb": lambda: 2})
