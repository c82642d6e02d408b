"""
DAG size computation over the blocks of a CAR.

The size of a DAG is the sum of the raw byte lengths of the root block and
every block reachable from it through decoded links.
"""

from dataclasses import dataclass, field
import logging
from typing import Any

from multiformats import CID

from .codecs import CodecRegistry, default_registry
from .errors import DagCycleError, MalformedArchiveError, MissingBlockError
from .reader import CarBlockReader

logger = logging.getLogger(__name__)


@dataclass
class Block:
    """A block fetched and decoded during a single walk."""

    cid: CID
    bytes: bytes
    value: Any
    links: list[CID] = field(default_factory=list)


def get_block(
    reader: CarBlockReader, cid: CID, registry: CodecRegistry
) -> Block:
    """
    Fetch and decode the block for ``cid``.

    Raises:
        MissingBlockError: if the block is not in the archive
        UnsupportedCodecError: if no decoder is registered for the CID's codec

    """
    data = reader.get(cid)
    if data is None:
        raise MissingBlockError(cid)
    value, links = registry.decode(cid, data)
    return Block(cid=cid, bytes=data, value=value, links=links)


def compute_dag_size(
    reader: CarBlockReader,
    root_cid: CID,
    registry: CodecRegistry | None = None,
    memoize: bool = False,
) -> int:
    """
    Compute the size of the DAG rooted at ``root_cid``.

    With the default ``memoize=False`` the walk is UNSAFE FOR NON-TREE DAGS:
    there is no deduplication, so a block reachable through several paths is
    counted once per path, and a cycle recurses until ``RecursionError``.
    This matches sizes recorded for tree-shaped imports (files and
    directories).

    With ``memoize=True`` every distinct CID is counted once and a cycle
    raises :class:`DagCycleError`.

    Raises:
        MissingBlockError: if a reachable block is not in the archive
        UnsupportedCodecError: if a reachable block's codec has no decoder
        DagCycleError: on a cycle, when ``memoize`` is enabled

    """
    registry = registry or default_registry()

    if memoize:
        return _dedup_size(reader, root_cid, registry, set(), set())

    def get_size(cid: CID) -> int:
        block = get_block(reader, cid, registry)
        size = len(block.bytes)
        for link in block.links:
            size += get_size(link)
        return size

    return get_size(root_cid)


def _dedup_size(
    reader: CarBlockReader,
    cid: CID,
    registry: CodecRegistry,
    seen: set[bytes],
    ancestors: set[bytes],
) -> int:
    key = bytes(cid)
    if key in ancestors:
        raise DagCycleError(f"cycle detected at {cid}")
    if key in seen:
        return 0
    seen.add(key)

    block = get_block(reader, cid, registry)
    size = len(block.bytes)
    ancestors.add(key)
    for link in block.links:
        size += _dedup_size(reader, link, registry, seen, ancestors)
    ancestors.discard(key)
    return size


def get_car_dag_size(
    car: bytes,
    registry: CodecRegistry | None = None,
    memoize: bool = False,
) -> int:
    """
    Size of the DAG under the first declared root of a CAR.

    Only meaningful when the CAR holds the complete graph.

    Raises:
        MalformedArchiveError: if the CAR is invalid or declares no roots
        MissingBlockError: if the root or any reachable block is absent

    """
    reader = CarBlockReader.from_bytes(car)
    roots = reader.get_roots()
    if not roots:
        raise MalformedArchiveError("CAR declares no roots")

    root_cid = roots[0]
    size = compute_dag_size(reader, root_cid, registry=registry, memoize=memoize)
    logger.debug(f"DAG size of {root_cid}: {size} bytes")
    return size
