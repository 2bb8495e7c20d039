"""
Unit tests for the streaming executor (spawn / relay / termination)

All tests run the fake extraction program from tests/fixtures.
"""

import asyncio

import pytest

from common.errors import ExtractionLaunchError
from common.types import BoundingBox, ExtractionRequest
from tests.fixtures.fake_vex import render
from vex_server.config import Settings
from vex_server.executor import build_argv, reap, relay, spawn, terminate

pytestmark = pytest.mark.anyio

REQ = ExtractionRequest(BoundingBox(north=10, south=0, east=20, west=0))
POSITIONAL = ["testdb", "0", "0", "10", "20", "-"]


async def _collect(settings):
    proc = await spawn(REQ, settings)
    chunks = [c async for c in relay(proc, settings.chunk_size)]
    rc = await reap(proc)
    return chunks, rc


async def test_build_argv_splits_command():
    s = Settings(db_path="/var/osm/db", command="nice -n 10 vex")
    assert build_argv(REQ, s) == ["nice", "-n", "10", "vex", "/var/osm/db", "0", "0", "10", "20", "-"]


async def test_relays_exact_bytes(make_settings):
    chunks, rc = await _collect(make_settings(size=10_000))
    assert b"".join(chunks) == render(POSITIONAL, 10_000)
    assert rc == 0


@pytest.mark.parametrize("writes", [1, 3, 17, 256])
async def test_chunking_invariance(make_settings, writes):
    chunks, _ = await _collect(make_settings(size=50_000, writes=writes))
    assert b"".join(chunks) == render(POSITIONAL, 50_000)


async def test_chunks_bounded_by_chunk_size(make_settings):
    chunks, _ = await _collect(make_settings(chunk_size=1000, size=20_000, writes=3))
    assert chunks
    assert max(len(c) for c in chunks) <= 1000
    assert b"".join(chunks) == render(POSITIONAL, 20_000)


async def test_empty_output(make_settings):
    chunks, rc = await _collect(make_settings(size=0, exit=3))
    # header line only; exit status does not affect the stream
    assert b"".join(chunks) == render(POSITIONAL, 0)
    assert rc == 3


async def test_stderr_flood_does_not_stall(make_settings):
    # 4 MiB on stderr would deadlock an undrained stderr pipe
    settings = make_settings(size=1000, stderr=4 * 1024 * 1024)
    chunks, rc = await asyncio.wait_for(_collect(settings), timeout=30)
    assert b"".join(chunks) == render(POSITIONAL, 1000)
    assert rc == 0


async def test_slow_consumer_gets_everything(make_settings):
    settings = make_settings(chunk_size=4096, size=512 * 1024, writes=8)
    proc = await spawn(REQ, settings)
    got = bytearray()
    async for chunk in relay(proc, settings.chunk_size):
        got += chunk
        if len(got) % 7 == 0:
            await asyncio.sleep(0.001)
    await reap(proc)
    assert bytes(got) == render(POSITIONAL, 512 * 1024)


async def test_backpressure_blocks_producer(make_settings):
    # 64 MiB that nobody reads: the program must stay blocked on the pipe
    settings = make_settings(chunk_size=4096, size=64 * 1024 * 1024, writes=1024)
    proc = await spawn(REQ, settings)
    gen = relay(proc, settings.chunk_size)
    first = [await gen.__anext__() for _ in range(3)]
    assert all(len(c) <= 4096 for c in first)

    await asyncio.sleep(0.5)
    assert proc.returncode is None
    assert proc.stdout is not None
    assert not proc.stdout.at_eof()

    await gen.aclose()
    assert proc.returncode is not None
    assert proc.returncode != 0


async def test_terminate_is_idempotent(make_settings):
    proc = await spawn(REQ, make_settings(size=10))
    await terminate(proc)
    await terminate(proc)
    assert proc.returncode is not None


async def test_reap_kills_lingering_process(make_settings):
    # closes nothing early but sleeps after each write; reap must not hang
    settings = make_settings(size=10, writes=2, delay=30)
    proc = await spawn(REQ, settings)
    rc = await reap(proc, timeout=0.2)
    assert rc is not None
    assert rc != 0


async def test_launch_failure():
    s = Settings(db_path="db", command="/nonexistent/bin/vex-missing")
    with pytest.raises(ExtractionLaunchError):
        await spawn(REQ, s)
