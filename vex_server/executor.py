from __future__ import annotations

"""
Streaming executor: one extraction process per request, relayed to the client.

Flow control:
    The relay is an async generator pulled by the response writer. It reads at
    most `chunk_size` bytes per step and only reads again once the previous
    chunk was handed to the transport (uvicorn awaits drain on a paused
    socket). The subprocess StreamReader is created with `limit=chunk_size`,
    so it stops reading the pipe once ~2*chunk_size bytes are buffered; after
    that the OS pipe fills and the program blocks in write(). Memory per
    request stays bounded regardless of export size.

Lifecycle:
    - stdout EOF ends the response; exit status is only logged afterwards.
    - If the response stops early (client gone, send error) the process is
      killed and reaped.
"""

import asyncio
import shlex
from typing import AsyncIterator, List, Optional

from starlette.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from common.errors import ExtractionLaunchError
from common.logging_setup import get_logger
from common.types import ExtractionRequest
from vex_server.config import Settings


log = get_logger("vex_server.executor")

MEDIA_TYPE = "application/octet-stream"

# How long to wait for the program to exit after it closed stdout.
REAP_TIMEOUT_S = 5.0
DRAIN_CHUNK = 64 * 1024


def build_argv(request: ExtractionRequest, settings: Settings) -> List[str]:
    return shlex.split(settings.command) + request.argv(settings.db_path)


async def spawn(request: ExtractionRequest, settings: Settings) -> asyncio.subprocess.Process:
    """
    Launch the extraction program for `request`.

    stdin is /dev/null and stderr is discarded outright (the program is chatty
    on stderr and would stall on a full, undrained pipe).
    """
    argv = build_argv(request, settings)
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            limit=settings.chunk_size,
        )
    except OSError as e:
        log.error("Extraction process failed to start", extra={"extra": {"argv": argv, "error": str(e)}})
        raise ExtractionLaunchError(f"cannot start {argv[0]!r}: {e}") from e
    log.debug("Extraction process started", extra={"extra": {"pid": proc.pid, "argv": argv}})
    return proc


async def terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the process if it is still running and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    # wait() also waits for the pipes to close; a paused, unread stdout
    # would never see EOF, so drop what is left (bounded by the reader limit).
    if proc.stdout is not None:
        while await proc.stdout.read(DRAIN_CHUNK):
            pass
    await proc.wait()


async def reap(proc: asyncio.subprocess.Process, timeout: float = REAP_TIMEOUT_S) -> Optional[int]:
    """Wait for exit after stdout closed; kill if the program lingers. Returns the exit code."""
    if proc.returncode is None:
        try:
            await asyncio.wait_for(proc.wait(), timeout)
        except asyncio.TimeoutError:
            log.warning("Extraction process still running after EOF; killing", extra={"extra": {"pid": proc.pid}})
            await terminate(proc)
    rc = proc.returncode
    if rc == 0:
        log.debug("Extraction process exited", extra={"extra": {"pid": proc.pid, "returncode": rc}})
    else:
        log.warning("Extraction process exited abnormally", extra={"extra": {"pid": proc.pid, "returncode": rc}})
    return rc


async def relay(proc: asyncio.subprocess.Process, chunk_size: int) -> AsyncIterator[bytes]:
    """
    Yield the process's stdout in order, at most `chunk_size` bytes per chunk.

    Ends at EOF. If the consumer stops early (aclose / cancellation) the
    process is killed before the generator finishes.
    """
    assert proc.stdout is not None
    total = 0
    eof = False
    try:
        while True:
            chunk = await proc.stdout.read(chunk_size)
            if not chunk:
                eof = True
                return
            total += len(chunk)
            yield chunk
    finally:
        if not eof:
            log.info("Relay stopped before EOF; terminating extraction", extra={"extra": {"pid": proc.pid, "bytes": total}})
            await terminate(proc)
        else:
            log.debug("Relay reached EOF", extra={"extra": {"pid": proc.pid, "bytes": total}})


class ExtractionResponse(StreamingResponse):
    """
    200 response whose body is the relay of one extraction process.

    Headers are fixed up front; the body is pulled from the relay as the
    transport accepts it. Whatever way the response ends, the relay is closed
    and the process reaped.
    """

    def __init__(self, proc: asyncio.subprocess.Process, request: ExtractionRequest, chunk_size: int):
        self.proc = proc
        super().__init__(
            relay(proc, chunk_size),
            status_code=200,
            media_type=MEDIA_TYPE,
            headers={"Content-Disposition": request.content_disposition},
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.body_iterator.aclose()  # type: ignore[union-attr]
            assert self.proc.stdout is not None
            if not self.proc.stdout.at_eof():
                # never started or stopped early
                await terminate(self.proc)
            await reap(self.proc)


async def stream_extraction(request: ExtractionRequest, settings: Settings) -> ExtractionResponse:
    """
    Start the extraction and return the streaming response.

    The process is launched before any header is sent, so a launch failure
    surfaces as ExtractionLaunchError instead of an empty 200.
    """
    proc = await spawn(request, settings)
    return ExtractionResponse(proc, request, settings.chunk_size)
