from __future__ import annotations

import asyncio
import base64
import os
import stat
import typing
from pathlib import Path

import anyio
import httpx

from ._config import InlineBytes, RequestConfig, UploadFile
from ._exceptions import ConfigError, FileLoadError, InvalidURL

CHUNK_SIZE = 16 * 1024

_EOF = object()


def normalize_url(url: str) -> str:
    """Assume ``http://`` for URLs given without a scheme."""
    if "://" not in url:
        return f"http://{url}"
    return url


def split_header(entry: str) -> tuple[str, str]:
    """Split a raw ``"Name: value"`` entry on its first colon.

    An entry without a colon is a header with an empty value.
    """
    name, _, value = entry.partition(":")
    return name.strip(), value.strip()


class FileBodyStream(httpx.AsyncByteStream):
    """Request body read lazily from a local file.

    A producer task reads the file in ``chunk_size`` pieces into a queue that
    holds a single chunk, so reading never gets more than one chunk ahead of
    what the transport has sent.
    """

    def __init__(self, path: Path, chunk_size: int = CHUNK_SIZE) -> None:
        self._path = path
        self._chunk_size = chunk_size

    async def __aiter__(self) -> typing.AsyncIterator[bytes]:
        queue: asyncio.Queue[typing.Any] = asyncio.Queue(maxsize=1)
        producer = asyncio.create_task(self._produce(queue))
        try:
            while True:
                item = await queue.get()
                if item is _EOF:
                    break
                if isinstance(item, OSError):
                    raise FileLoadError(
                        f"can't read upload file {str(self._path)!r}: {item}"
                    ) from item
                yield item
        finally:
            if not producer.done():
                producer.cancel()

    async def _produce(self, queue: asyncio.Queue[typing.Any]) -> None:
        try:
            async with await anyio.open_file(self._path, "rb") as fp:
                while True:
                    chunk = await fp.read(self._chunk_size)
                    if not chunk:
                        break
                    await queue.put(chunk)
        except OSError as exc:
            await queue.put(exc)
            return
        await queue.put(_EOF)


def _upload_body(path: Path, headers: httpx.Headers) -> FileBodyStream:
    try:
        info = os.stat(path)
    except OSError as exc:
        raise FileLoadError(f"can't open upload file {str(path)!r}: {exc}") from exc
    # Pipes and devices have no meaningful size and go out chunked.
    if stat.S_ISREG(info.st_mode):
        headers["Content-Length"] = str(info.st_size)
    return FileBodyStream(path)


def build_request(config: RequestConfig, url: str) -> httpx.Request:
    """Build the request for one URL of the work-list.

    Header precedence, from weakest to strongest:

    1. the configured User-Agent, only sent when no ``-H`` entry names
       ``User-Agent``;
    2. ``-H`` entries, in command line order, duplicates kept;
    3. ``-u`` credentials, which replace any ``Authorization`` given with
       ``-H``.

    Only the upload file's metadata is touched here; its contents are read
    while the transport sends the request.
    """
    try:
        target = httpx.URL(normalize_url(url))
    except httpx.InvalidURL as exc:
        raise InvalidURL(f"malformed URL {url!r}: {exc}") from exc
    if not target.host:
        raise InvalidURL(f"malformed URL {url!r}: no host")

    fields = [split_header(entry) for entry in config.headers]
    for entry, (name, _) in zip(config.headers, fields):
        if not name:
            raise ConfigError(f"malformed header {entry!r}: empty header name")
    try:
        headers = httpx.Headers(fields)
    except UnicodeEncodeError as exc:
        raise ConfigError(f"malformed header: {exc}") from exc

    if config.user_agent and "User-Agent" not in headers:
        headers["User-Agent"] = config.user_agent

    if config.basic_auth is not None:
        token = base64.b64encode(config.basic_auth.encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {token}"

    content: bytes | FileBodyStream | None = None
    if isinstance(config.body, InlineBytes):
        content = config.body.data
    elif isinstance(config.body, UploadFile):
        content = _upload_body(config.body.path, headers)

    return httpx.Request(config.method, target, headers=headers, content=content)
