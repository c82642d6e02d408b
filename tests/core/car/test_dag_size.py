"""Tests for DAG size computation."""

import dag_cbor
import pytest

from w3storage.car.codecs import CODEC_DAG_CBOR, RAW, CodecRegistry, default_registry
from w3storage.car.dag_size import compute_dag_size, get_block, get_car_dag_size
from w3storage.car.errors import (
    DagCycleError,
    MalformedArchiveError,
    MissingBlockError,
    UnsupportedCodecError,
)
from w3storage.car.reader import CarBlockReader
from w3storage.car.writer import encode_car, make_cid

from tests.factories import (
    CODEC_DAG_JSON,
    build_car,
    dag_pb_block,
    linking_codec,
    raw_block,
    sized_tree,
)


def reader_for(root, blocks):
    return CarBlockReader.from_bytes(build_car(root, blocks))


class TestTreeDags:
    """Size of tree-shaped DAGs is the sum of every block's bytes."""

    def test_single_raw_block(self):
        cid, data = raw_block(b"x" * 100)

        assert compute_dag_size(reader_for(cid, [(cid, data)]), cid) == 100

    def test_file_with_chunks(self):
        chunks = [raw_block(bytes([i]) * (1000 + i)) for i in range(4)]
        root = dag_pb_block(chunks, data=b"\x08\x02")
        blocks = [root, *chunks]

        expected = sum(len(data) for _, data in blocks)

        assert compute_dag_size(reader_for(root[0], blocks), root[0]) == expected

    def test_nested_directories(self):
        leaves = [raw_block(f"file {i}".encode()) for i in range(3)]
        subdir = dag_pb_block(leaves[:2], data=b"\x08\x01")
        root = dag_pb_block([subdir, leaves[2]], data=b"\x08\x01")
        blocks = [root, subdir, *leaves]

        expected = sum(len(data) for _, data in blocks)

        assert compute_dag_size(reader_for(root[0], blocks), root[0]) == expected

    def test_dag_cbor_root(self):
        leaves = [raw_block(b"left leaf"), raw_block(b"right leaf")]
        root_data = dag_cbor.encode({"left": leaves[0][0], "right": leaves[1][0]})
        root_cid = make_cid(root_data, CODEC_DAG_CBOR)
        blocks = [(root_cid, root_data), *leaves]

        expected = len(root_data) + len(b"left leaf") + len(b"right leaf")

        assert compute_dag_size(reader_for(root_cid, blocks), root_cid) == expected

    def test_exact_block_sizes(self):
        root_cid, blocks, codec = sized_tree([10, 20, 30])
        registry = CodecRegistry([RAW, codec()])

        size = compute_dag_size(reader_for(root_cid, blocks), root_cid, registry)

        assert size == 60

    def test_memoize_matches_default_for_trees(self):
        chunks = [raw_block(bytes([i]) * 50) for i in range(3)]
        root = dag_pb_block(chunks)
        reader = reader_for(root[0], [root, *chunks])

        assert compute_dag_size(reader, root[0]) == compute_dag_size(
            reader, root[0], memoize=True
        )


class TestSharedChildren:
    """Blocks reachable through several paths."""

    def test_shared_child_counted_once_per_path(self):
        shared = raw_block(b"s" * 100)
        root = dag_pb_block([shared, shared, shared])
        reader = reader_for(root[0], [root, shared])

        size = compute_dag_size(reader, root[0])

        assert size == len(root[1]) + 3 * 100

    def test_shared_subdag_double_counted(self):
        leaf = raw_block(b"l" * 40)
        middle = dag_pb_block([leaf])
        root = dag_pb_block([middle, middle])
        reader = reader_for(root[0], [root, middle, leaf])

        size = compute_dag_size(reader, root[0])

        assert size == len(root[1]) + 2 * (len(middle[1]) + 40)

    def test_memoize_counts_shared_child_once(self):
        shared = raw_block(b"s" * 100)
        root = dag_pb_block([shared, shared, shared])
        reader = reader_for(root[0], [root, shared])

        size = compute_dag_size(reader, root[0], memoize=True)

        assert size == len(root[1]) + 100


class TestCycles:
    """Cyclic graphs can only be built with a codec whose links are chosen freely."""

    def _cycle(self):
        a_data = b"block a"
        b_data = b"block b"
        a_cid = make_cid(a_data, CODEC_DAG_JSON)
        b_cid = make_cid(b_data, CODEC_DAG_JSON)
        codec = linking_codec({a_data: [b_cid], b_data: [a_cid]})
        reader = reader_for(a_cid, [(a_cid, a_data), (b_cid, b_data)])
        return reader, a_cid, CodecRegistry([codec])

    def test_memoize_detects_cycle(self):
        reader, root, registry = self._cycle()

        with pytest.raises(DagCycleError):
            compute_dag_size(reader, root, registry, memoize=True)

    def test_default_walk_does_not_terminate_normally(self):
        reader, root, registry = self._cycle()

        with pytest.raises(RecursionError):
            compute_dag_size(reader, root, registry)


class TestFailures:
    """Missing blocks and unknown codecs abort the walk."""

    def test_missing_linked_block(self):
        present = raw_block(b"present")
        missing = raw_block(b"missing")
        root = dag_pb_block([present, missing])
        reader = reader_for(root[0], [root, present])

        with pytest.raises(MissingBlockError) as excinfo:
            compute_dag_size(reader, root[0])

        assert excinfo.value.cid == missing[0]

    def test_missing_root(self):
        present = raw_block(b"present")
        missing_root, _ = raw_block(b"root")
        reader = reader_for(missing_root, [present])

        with pytest.raises(MissingBlockError):
            compute_dag_size(reader, missing_root)

    def test_unsupported_codec(self):
        data = b'{"hello":"world"}'
        cid = make_cid(data, CODEC_DAG_JSON)

        with pytest.raises(UnsupportedCodecError):
            compute_dag_size(reader_for(cid, [(cid, data)]), cid)

    def test_unsupported_codec_in_child(self):
        data = b'{"hello":"world"}'
        child = (make_cid(data, CODEC_DAG_JSON), data)
        root = dag_pb_block([child])

        with pytest.raises(UnsupportedCodecError):
            compute_dag_size(reader_for(root[0], [root, child]), root[0])


class TestGetBlock:
    def test_decodes_value_and_links(self):
        leaf = raw_block(b"leaf")
        root = dag_pb_block([leaf])
        reader = reader_for(root[0], [root, leaf])

        block = get_block(reader, root[0], default_registry())

        assert block.cid == root[0]
        assert block.bytes == root[1]
        assert block.links == [leaf[0]]


class TestGetCarDagSize:
    def test_uses_first_root(self):
        first = raw_block(b"a" * 10)
        second = raw_block(b"b" * 20)
        car = encode_car([first[0], second[0]], [first, second])

        assert get_car_dag_size(car) == 10

    def test_no_roots(self):
        cid, data = raw_block(b"orphan")

        with pytest.raises(MalformedArchiveError, match="no roots"):
            get_car_dag_size(encode_car([], [(cid, data)]))

    def test_malformed_car(self):
        with pytest.raises(MalformedArchiveError):
            get_car_dag_size(b"definitely not a car")
