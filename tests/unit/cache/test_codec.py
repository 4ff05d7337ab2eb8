"""
cachefront - Codec Tests

Tests value encoding, decode failure reporting and the FALSE_PAYLOAD marker.
"""

import threading
from typing import Any

import pytest

from cachefront.cache import codec
from cachefront.errors import CacheSerializationError


class TestCodec:
    """Test suite for the serialized value codec."""

    def test_round_trips_sample_values(self, sample_cache_data: dict[str, Any]) -> None:
        for name, value in sample_cache_data.items():
            decoded = codec.decode(codec.encode(value))
            assert decoded.ok, name
            assert decoded.value == value, name

    def test_false_decodes_successfully(self) -> None:
        decoded = codec.decode(codec.encode(False))

        assert decoded.ok is True
        assert decoded.value is False

    def test_false_payload_matches_encoded_false(self) -> None:
        assert codec.FALSE_PAYLOAD == codec.encode(False)
        assert codec.FALSE_PAYLOAD != codec.encode(0)
        assert codec.FALSE_PAYLOAD != codec.encode(None)

    def test_decode_garbage_fails(self) -> None:
        decoded = codec.decode(b"not a pickle")

        assert decoded.ok is False
        assert decoded is codec.DECODE_FAILED

    def test_decode_none_fails(self) -> None:
        assert codec.decode(None).ok is False

    def test_decode_truncated_payload_fails(self) -> None:
        payload = codec.encode({"key": "value"})

        assert codec.decode(payload[:-3]).ok is False

    def test_encode_unpicklable_raises(self) -> None:
        with pytest.raises(CacheSerializationError) as exc_info:
            codec.encode(threading.Lock())

        assert exc_info.value.details["value_type"] == "lock"
