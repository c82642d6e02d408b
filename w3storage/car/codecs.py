"""
Codec registry for IPLD block decoding.

Maps a CID's multicodec code to a decoder returning the block's structured
value together with its outbound links.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import dag_cbor
from multiformats import CID

from .cid import canonical_cid
from .dag_pb import decode_dag_pb
from .errors import BlockDecodingError, UnsupportedCodecError

CODEC_RAW = 0x55
CODEC_DAG_PB = 0x70
CODEC_DAG_CBOR = 0x71

DecodeFn = Callable[[bytes], tuple[Any, list[CID]]]


@dataclass(frozen=True)
class Codec:
    """A decoder capability for a single multicodec."""

    code: int
    name: str
    decode: DecodeFn


def _decode_raw(data: bytes) -> tuple[Any, list[CID]]:
    return data, []


def _decode_dag_pb(data: bytes) -> tuple[Any, list[CID]]:
    node = decode_dag_pb(data)
    return node, [link.cid for link in node.links]


def iter_cid_links(value: Any) -> Iterator[CID]:
    """Yield every CID found in a decoded IPLD value, depth first."""
    if isinstance(value, CID):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from iter_cid_links(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_cid_links(item)


def _decode_dag_cbor(data: bytes) -> tuple[Any, list[CID]]:
    try:
        value = dag_cbor.decode(data)
    except Exception as e:
        raise BlockDecodingError(f"invalid dag-cbor block: {e}") from e
    return value, [canonical_cid(link) for link in iter_cid_links(value)]


RAW = Codec(CODEC_RAW, "raw", _decode_raw)
DAG_PB = Codec(CODEC_DAG_PB, "dag-pb", _decode_dag_pb)
DAG_CBOR = Codec(CODEC_DAG_CBOR, "dag-cbor", _decode_dag_cbor)


class CodecRegistry:
    """
    Static mapping from multicodec code to :class:`Codec`.

    Codecs are registered while the registry is assembled at startup;
    lookups never mutate it.
    """

    def __init__(self, codecs: list[Codec] | None = None) -> None:
        self._codecs: dict[int, Codec] = {}
        for codec in codecs or []:
            self.register(codec)

    def register(self, codec: Codec) -> "CodecRegistry":
        """Register a codec, replacing any previous codec with the same code."""
        self._codecs[codec.code] = codec
        return self

    def get(self, code: int) -> Codec:
        """
        Get the codec registered for ``code``.

        Raises:
            UnsupportedCodecError: if no codec is registered for ``code``

        """
        codec = self._codecs.get(code)
        if codec is None:
            raise UnsupportedCodecError(code)
        return codec

    def decode(self, cid: CID, data: bytes) -> tuple[Any, list[CID]]:
        """Decode ``data`` with the codec named by ``cid``."""
        return self.get(cid.codec.code).decode(data)

    def __contains__(self, code: object) -> bool:
        return code in self._codecs

    def codes(self) -> list[int]:
        return list(self._codecs)


def default_registry() -> CodecRegistry:
    """Registry with the raw, dag-pb and dag-cbor codecs."""
    return CodecRegistry([DAG_PB, RAW, DAG_CBOR])
