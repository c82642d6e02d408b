import pytest

from w3storage.car.byte_counter import size_of


async def chunks(*parts):
    for part in parts:
        yield part


@pytest.mark.trio
async def test_counts_every_chunk():
    assert await size_of(chunks(b"a" * 10, b"b" * 20, b"c" * 30)) == 60


@pytest.mark.trio
async def test_empty_stream():
    assert await size_of(chunks()) == 0


@pytest.mark.trio
async def test_empty_chunks_count_zero():
    assert await size_of(chunks(b"", b"abc", b"")) == 3


@pytest.mark.trio
async def test_stream_is_fully_drained():
    consumed = []

    async def tracked():
        for part in (b"one", b"two", b"three"):
            consumed.append(part)
            yield part

    size = await size_of(tracked())

    assert size == 11
    assert consumed == [b"one", b"two", b"three"]
