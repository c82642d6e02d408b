import logging

from w3storage.exceptions import (
    ParseError,
)

logger = logging.getLogger("w3storage.utils.varint")

# Unsigned LEB128(varint codec), as used by multiformats and CAR section headers.

LOW_MASK = 2**7 - 1
HIGH_MASK = 2**7

# The maximum shift width for a 64 bit integer.
SHIFT_64_BIT_MAX = 63


def encode_uvarint(value: int) -> bytes:
    """Encode an unsigned integer as a varint."""
    if value < 0:
        raise ValueError("Cannot encode negative value as uvarint")

    result = bytearray()
    while value >= HIGH_MASK:
        result.append((value & LOW_MASK) | HIGH_MASK)
        value >>= 7
    result.append(value & LOW_MASK)
    return bytes(result)


def decode_uvarint_at(data: bytes | memoryview, offset: int = 0) -> tuple[int, int]:
    """
    Decode a varint starting at ``offset``.

    Returns:
        tuple[int, int]: (value, offset just past the varint)

    Raises:
        ParseError: if the data ends mid-varint or the value exceeds 64 bits

    """
    result = 0
    shift = 0
    pos = offset
    end = len(data)

    while True:
        if pos >= end:
            raise ParseError("Unexpected end of data while decoding varint")
        byte = data[pos]
        pos += 1
        result |= (byte & LOW_MASK) << shift
        if not byte & HIGH_MASK:
            return result, pos
        shift += 7
        if shift > SHIFT_64_BIT_MAX:
            raise ParseError(
                "Varint decoding error: integer exceeds maximum size of 64 bits."
            )


def encode_varint_prefixed(data: bytes) -> bytes:
    """Encode data with a varint length prefix."""
    return encode_uvarint(len(data)) + data
