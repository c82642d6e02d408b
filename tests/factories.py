from collections.abc import Callable

import factory
from multiformats import CID

from w3storage.car.codecs import CODEC_DAG_PB, Codec
from w3storage.car.dag_pb import Link, encode_dag_pb
from w3storage.car.writer import encode_car, make_cid
from w3storage.cluster.pin import Pin, PinLocation, PinStatus

# A real multicodec that the default registry does not decode
CODEC_DAG_JSON = 0x0129


class PinLocationFactory(factory.Factory):
    class Meta:
        model = PinLocation

    peer_id = factory.Sequence(lambda n: f"12D3KooWPeer{n:04d}")
    peer_name = factory.Sequence(lambda n: f"cluster-peer-{n}")


class PinFactory(factory.Factory):
    class Meta:
        model = Pin

    status = PinStatus.PINNED
    location = factory.SubFactory(PinLocationFactory)


def raw_block(data: bytes) -> tuple[CID, bytes]:
    return make_cid(data), data


def dag_pb_block(
    children: list[tuple[CID, bytes]], data: bytes | None = None
) -> tuple[CID, bytes]:
    links = [
        Link(cid=cid, name=f"child{i}", size=len(child))
        for i, (cid, child) in enumerate(children)
    ]
    encoded = encode_dag_pb(links, data)
    return make_cid(encoded, CODEC_DAG_PB), encoded


def build_car(root: CID, blocks: list[tuple[CID, bytes]]) -> bytes:
    return encode_car([root], blocks)


def linking_codec(links_by_data: dict[bytes, list[CID]]) -> Codec:
    """
    A dag-json stand-in whose links are looked up by block bytes.

    Lets tests build blocks of exact sizes that still link to other blocks.
    """

    def decode(data: bytes) -> tuple[bytes, list[CID]]:
        return data, list(links_by_data.get(bytes(data), []))

    return Codec(CODEC_DAG_JSON, "dag-json", decode)


def sized_tree(
    sizes: list[int],
) -> tuple[CID, list[tuple[CID, bytes]], Callable[[], Codec]]:
    """
    Root block of ``sizes[-1]`` bytes linking to raw leaves of the other sizes.

    Returns the root CID, every block, and a factory for the codec able to
    decode the root.
    """
    leaves = [raw_block(bytes([i + 1]) * size) for i, size in enumerate(sizes[:-1])]
    root_data = b"r" * sizes[-1]
    root_cid = make_cid(root_data, CODEC_DAG_JSON)
    links = {root_data: [cid for cid, _ in leaves]}
    return root_cid, [(root_cid, root_data), *leaves], lambda: linking_codec(links)
