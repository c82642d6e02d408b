"""
Random-access reader over an in-memory CARv1 archive.

CARv1 layout::

    | varint | DAG-CBOR header {version: 1, roots: [CID]} |
    | varint | CID | block bytes |
    ...
    | varint | CID | block bytes |
"""

from collections.abc import Iterator
import logging
from typing import NamedTuple

import dag_cbor
from multiformats import CID

from w3storage.exceptions import ParseError
from w3storage.utils.varint import decode_uvarint_at

from .cid import canonical_cid, decode_cid
from .errors import MalformedArchiveError

logger = logging.getLogger(__name__)

CAR_VERSION = 1

# CIDv0 is a bare sha2-256 multihash: <0x12><0x20><32 byte digest>
CIDV0_PREFIX = b"\x12\x20"
CIDV0_LENGTH = 34


class BlockRange(NamedTuple):
    """Location of a block's bytes within the archive buffer."""

    offset: int
    length: int


def read_cid_length(section: bytes | memoryview) -> int:
    """
    Return the byte length of the binary CID at the start of a CAR section.

    Raises:
        ParseError: if the section ends before the CID does

    """
    if bytes(section[:2]) == CIDV0_PREFIX:
        if len(section) < CIDV0_LENGTH:
            raise ParseError("Truncated CIDv0")
        return CIDV0_LENGTH

    _, pos = decode_uvarint_at(section, 0)  # version
    _, pos = decode_uvarint_at(section, pos)  # codec
    _, pos = decode_uvarint_at(section, pos)  # multihash code
    digest_length, pos = decode_uvarint_at(section, pos)
    end = pos + digest_length
    if end > len(section):
        raise ParseError("Truncated CID digest")
    return end


class CarBlockReader:
    """
    Index of the blocks in a CAR buffer.

    Built once per request with :meth:`from_bytes`; read-only afterwards.
    Blocks are looked up by structural CID equality.
    """

    def __init__(
        self,
        buffer: bytes,
        roots: list[CID],
        index: dict[bytes, BlockRange],
        order: list[CID],
    ) -> None:
        self._buffer = buffer
        self._roots = roots
        self._index = index
        self._order = order

    @classmethod
    def from_bytes(cls, buffer: bytes) -> "CarBlockReader":
        """
        Parse a CARv1 buffer into a block index.

        Raises:
            MalformedArchiveError: if the buffer is not a valid CARv1 encoding

        """
        buffer = bytes(buffer)
        view = memoryview(buffer)
        try:
            header_length, pos = decode_uvarint_at(view, 0)
        except ParseError as e:
            raise MalformedArchiveError(f"invalid CAR header length: {e}") from e

        if header_length == 0 or pos + header_length > len(buffer):
            raise MalformedArchiveError("CAR header exceeds buffer")

        roots = cls._decode_header(buffer[pos : pos + header_length])
        pos += header_length

        index: dict[bytes, BlockRange] = {}
        order: list[CID] = []
        while pos < len(buffer):
            try:
                section_length, section_start = decode_uvarint_at(view, pos)
            except ParseError as e:
                raise MalformedArchiveError(
                    f"invalid section length at offset {pos}: {e}"
                ) from e

            section_end = section_start + section_length
            if section_length == 0 or section_end > len(buffer):
                raise MalformedArchiveError(f"truncated section at offset {pos}")

            section = view[section_start:section_end]
            try:
                cid_length = read_cid_length(section)
                cid = decode_cid(bytes(section[:cid_length]))
            except Exception as e:
                raise MalformedArchiveError(
                    f"invalid CID in section at offset {pos}: {e}"
                ) from e

            key = bytes(cid)
            if key not in index:
                order.append(cid)
            index[key] = BlockRange(
                section_start + cid_length, section_length - cid_length
            )
            pos = section_end

        logger.debug(f"Indexed CAR: {len(roots)} roots, {len(order)} blocks")
        return cls(buffer, roots, index, order)

    @staticmethod
    def _decode_header(header_bytes: bytes) -> list[CID]:
        try:
            header = dag_cbor.decode(header_bytes)
        except Exception as e:
            raise MalformedArchiveError(f"invalid CAR header: {e}") from e

        if not isinstance(header, dict):
            raise MalformedArchiveError("CAR header is not a map")
        if header.get("version") != CAR_VERSION:
            raise MalformedArchiveError(
                f"unsupported CAR version: {header.get('version')!r}"
            )

        roots = header.get("roots")
        if not isinstance(roots, list) or not all(
            isinstance(root, CID) for root in roots
        ):
            raise MalformedArchiveError("CAR header roots must be a list of CIDs")
        return [canonical_cid(root) for root in roots]

    def get_roots(self) -> list[CID]:
        """Declared roots, in declaration order."""
        return list(self._roots)

    def get(self, cid: CID) -> bytes | None:
        """Raw bytes of the block for ``cid``, or None if it is not in the archive."""
        block_range = self._index.get(bytes(cid))
        if block_range is None:
            return None
        offset, length = block_range
        return self._buffer[offset : offset + length]

    def has(self, cid: CID) -> bool:
        return bytes(cid) in self._index

    def cids(self) -> Iterator[CID]:
        """CIDs of all blocks, in archive order."""
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)
