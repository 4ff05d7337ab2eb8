"""
cachefront - Serialized Value Codec

Encodes arbitrary Python values to bytes and back.

Decoding carries its own success channel (Decoded.ok) so that a stored
``False`` is never confused with a failed decode or a backend miss.
"""

from __future__ import annotations

import logging
import pickle
from dataclasses import dataclass
from typing import Any

from ..errors import CacheSerializationError

logger = logging.getLogger(__name__)

PROTOCOL = pickle.HIGHEST_PROTOCOL


@dataclass(frozen=True)
class Decoded:
    """Outcome of decoding a payload."""

    ok: bool
    value: Any = None


DECODE_FAILED = Decoded(ok=False)


def encode(value: Any) -> bytes:
    """
    Serialize a value for storage.

    Raises:
        CacheSerializationError: If the value cannot be pickled
    """
    try:
        return pickle.dumps(value, protocol=PROTOCOL)
    except (pickle.PicklingError, TypeError, AttributeError, RecursionError) as e:
        raise CacheSerializationError(
            f"Cannot serialize value of type {type(value).__name__}: {e}",
            details={"value_type": type(value).__name__, "error": str(e)},
        ) from e


def decode(data: bytes | bytearray | memoryview | None) -> Decoded:
    """Deserialize a payload. Never raises; failures return DECODE_FAILED."""
    if data is None:
        return DECODE_FAILED
    try:
        return Decoded(ok=True, value=pickle.loads(data))
    except Exception as e:
        logger.debug("Failed to decode cache payload: %s", e, extra={"size": len(data), "error": str(e)})
        return DECODE_FAILED


# Exact encoded form of False. Redis-protocol adapters compare raw replies
# against it before generic decoding.
FALSE_PAYLOAD = encode(False)
