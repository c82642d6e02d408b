"""
CARv1 encoding.
"""

from collections.abc import Iterable

import dag_cbor
from multiformats import CID, multihash

from w3storage.utils.varint import encode_varint_prefixed

from .codecs import CODEC_RAW
from .reader import CAR_VERSION


def make_cid(data: bytes, codec: int | str = CODEC_RAW, version: int = 1) -> CID:
    """
    Compute the sha2-256 CID of ``data``.

    Args:
        data: Block bytes
        codec: Multicodec code or name (default: raw)
        version: CID version; version 0 requires the dag-pb codec

    """
    digest = multihash.digest(data, "sha2-256")
    if version == 0:
        return CID("base58btc", 0, "dag-pb", digest)
    return CID("base32", 1, codec, digest)


def encode_car(roots: list[CID], blocks: Iterable[tuple[CID, bytes]]) -> bytes:
    """
    Encode roots and (cid, bytes) blocks as a CARv1 archive.

    Blocks are written in the order given. No check is made that the roots
    are among the blocks.
    """
    header = dag_cbor.encode({"version": CAR_VERSION, "roots": list(roots)})
    parts = [encode_varint_prefixed(header)]
    for cid, data in blocks:
        parts.append(encode_varint_prefixed(bytes(cid) + bytes(data)))
    return b"".join(parts)
