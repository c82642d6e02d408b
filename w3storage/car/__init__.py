"""
CAR (Content Addressable aRchive) reading and DAG size computation.
"""

from .byte_counter import size_of
from .cid import canonical_cid, decode_cid
from .codecs import (
    CODEC_DAG_CBOR,
    CODEC_DAG_PB,
    CODEC_RAW,
    Codec,
    CodecRegistry,
    default_registry,
)
from .dag_size import Block, compute_dag_size, get_car_dag_size
from .errors import (
    BlockDecodingError,
    CarError,
    DagCycleError,
    MalformedArchiveError,
    MissingBlockError,
    UnsupportedCodecError,
)
from .reader import CarBlockReader
from .writer import encode_car, make_cid

__all__ = [
    "CarBlockReader",
    "Block",
    "Codec",
    "CodecRegistry",
    "default_registry",
    "compute_dag_size",
    "get_car_dag_size",
    "encode_car",
    "make_cid",
    "size_of",
    "canonical_cid",
    "decode_cid",
    "CODEC_DAG_CBOR",
    "CODEC_DAG_PB",
    "CODEC_RAW",
    # Errors
    "CarError",
    "BlockDecodingError",
    "DagCycleError",
    "MalformedArchiveError",
    "MissingBlockError",
    "UnsupportedCodecError",
]
