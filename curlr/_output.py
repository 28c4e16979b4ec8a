"""
Output side of a run.

All bytes a run produces, header echo and bodies alike, go through a single
:class:`OutputMultiplexer`. It owns the sink and is fed through a queue that
holds one chunk, so a producer waits until the previous chunk has been
handed to the sink before it can queue the next one.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import types
import typing
from pathlib import Path

import anyio
import anyio.to_thread

from ._config import OutputFile, OutputTarget
from ._exceptions import OutputError

logger = logging.getLogger(__name__)

_CLOSE = object()


class OutputSink(typing.Protocol):
    async def write(self, chunk: bytes) -> None: ...

    async def aclose(self) -> None: ...


class StreamSink:
    """Writes to a binary stream owned by someone else, such as stdout."""

    def __init__(self, stream: typing.BinaryIO) -> None:
        self._stream = stream

    async def write(self, chunk: bytes) -> None:
        await anyio.to_thread.run_sync(self._write, chunk)

    async def aclose(self) -> None:
        await anyio.to_thread.run_sync(self._stream.flush)

    def _write(self, chunk: bytes) -> None:
        self._stream.write(chunk)
        self._stream.flush()


class FileSink:
    def __init__(self, fp: anyio.AsyncFile[bytes]) -> None:
        self._fp = fp

    @classmethod
    async def create(cls, path: Path) -> FileSink:
        """Create or truncate ``path`` for writing."""
        try:
            fp = await anyio.open_file(path, "wb")
        except OSError as exc:
            raise OutputError(f"can't create output file {str(path)!r}: {exc}") from exc
        return cls(fp)

    async def write(self, chunk: bytes) -> None:
        await self._fp.write(chunk)

    async def aclose(self) -> None:
        await self._fp.aclose()


async def open_sink(target: OutputTarget) -> OutputSink:
    if isinstance(target, OutputFile):
        return await FileSink.create(target.path)
    return StreamSink(sys.stdout.buffer)


class OutputMultiplexer:
    """Single writer for a sink, fed through a one-chunk queue.

    >>> async with OutputMultiplexer(sink) as output:
    ...     await output.send(b"hello")

    Leaving the ``async with`` block waits until every chunk sent so far has
    been written, then closes the sink.
    """

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink
        self._queue: asyncio.Queue[typing.Any] = asyncio.Queue(maxsize=1)
        self._task: asyncio.Task[None] | None = None
        self._error: Exception | None = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._drain())

    async def send(self, chunk: bytes) -> None:
        """Queue ``chunk`` for writing, waiting while the previous one is pending."""
        if self._task is None:
            raise RuntimeError("OutputMultiplexer.send() called before start().")
        self._raise_for_error()
        if self._task.done():
            raise OutputError("output writer stopped before all output was sent")
        await self._queue.put(chunk)

    async def aclose(self) -> None:
        if self._task is None:
            await self._close_sink()
            return
        if not self._task.done():
            await self._queue.put(_CLOSE)
        await self._task
        self._task = None
        await self._close_sink()
        self._raise_for_error()

    async def _drain(self) -> None:
        while True:
            chunk = await self._queue.get()
            if chunk is _CLOSE:
                return
            # After a failed write the remaining chunks are consumed and
            # dropped so that senders never block on a dead writer.
            if self._error is not None:
                continue
            try:
                await self._sink.write(chunk)
            except Exception as exc:
                logger.debug("output write failed: %s", exc)
                self._error = exc

    async def _close_sink(self) -> None:
        try:
            await self._sink.aclose()
        except Exception as exc:
            if self._error is None:
                self._error = exc

    def _raise_for_error(self) -> None:
        if self._error is not None:
            raise OutputError(f"failed writing output: {self._error}") from self._error

    async def __aenter__(self) -> OutputMultiplexer:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        if exc_type is None:
            await self.aclose()
            return
        # Keep the error that ended the run; still flush what was already sent.
        try:
            await self.aclose()
        except OutputError:
            logger.debug("output error while closing after %s", exc_type.__name__)
