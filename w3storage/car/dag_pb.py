"""
DAG-PB codec.

DAG-PB is the protobuf encoding IPFS uses to represent files and directories
as Merkle DAGs. Every ``PBLink`` carries the binary CID of a child block.
"""

from dataclasses import dataclass, field

from google.protobuf.message import DecodeError
from multiformats import CID

from .cid import decode_cid
from .errors import BlockDecodingError
from .pb.dag_pb_pb2 import PBNode


@dataclass
class Link:
    """Represents a link to another block in the DAG."""

    cid: CID
    name: str = ""
    size: int = 0

    def __post_init__(self) -> None:
        """Validate link data."""
        if not isinstance(self.cid, CID):
            raise TypeError(f"cid must be CID, got {type(self.cid)}")
        if not isinstance(self.size, int) or self.size < 0:
            raise TypeError(f"size must be non-negative int, got {self.size}")


@dataclass
class DagPbNode:
    """Decoded DAG-PB node."""

    links: list[Link] = field(default_factory=list)
    data: bytes | None = None


def encode_dag_pb(links: list[Link], data: bytes | None = None) -> bytes:
    """
    Encode links and opaque data as a DAG-PB node.

    Example:
        >>> from multiformats import multihash
        >>> leaf = CID("base32", 1, "raw", multihash.digest(b"leaf", "sha2-256"))
        >>> encoded = encode_dag_pb([Link(cid=leaf, name="leaf", size=4)])

    """
    pb_node = PBNode()

    for link in links:
        pb_link = pb_node.Links.add()
        pb_link.Hash = bytes(link.cid)
        pb_link.Name = link.name
        pb_link.Tsize = link.size

    if data is not None:
        pb_node.Data = data

    return pb_node.SerializeToString()


def decode_dag_pb(data: bytes) -> DagPbNode:
    """
    Decode a DAG-PB node.

    Raises:
        BlockDecodingError: if the bytes are not a PBNode or a link hash is
            not a valid CID

    """
    pb_node = PBNode()
    try:
        pb_node.ParseFromString(data)
    except DecodeError as e:
        raise BlockDecodingError(f"invalid dag-pb node: {e}") from e

    links = []
    for pb_link in pb_node.Links:
        try:
            cid = decode_cid(pb_link.Hash)
        except Exception as e:
            raise BlockDecodingError(f"invalid link hash: {e}") from e
        links.append(Link(cid=cid, name=pb_link.Name, size=pb_link.Tsize))

    node_data = pb_node.Data if pb_node.HasField("Data") else None
    return DagPbNode(links=links, data=node_data)
