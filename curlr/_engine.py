from __future__ import annotations

import asyncio
import logging

import httpx

from ._config import RequestConfig
from ._exceptions import (
    HTTPStatusFailure,
    InvalidRedirect,
    TooManyRedirects,
    TransportError,
)
from ._output import OutputMultiplexer, OutputSink, open_sink
from ._request import build_request

logger = logging.getLogger(__name__)


def create_client(
    config: RequestConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Return the client shared by every request of a run.

    Redirects are never followed by the client itself; the engine decides
    what to do with a 3xx response.
    """
    return httpx.AsyncClient(
        verify=not config.insecure,
        transport=transport,
        follow_redirects=False,
        timeout=None,
    )


def status_line(response: httpx.Response) -> str:
    return f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()


def head_lines(response: httpx.Response) -> list[bytes]:
    """Status line, one line per header as received, then an empty line."""
    lines = [f"{status_line(response)}\n".encode("latin-1")]
    for name, value in response.headers.raw:
        lines.append(name + b": " + value + b"\n")
    lines.append(b"\n")
    return lines


def redirect_target(response: httpx.Response) -> str | None:
    """Where a 3xx response points to, or ``None`` if it is not a redirect.

    Absolute locations are used as they are; anything else is resolved
    against the URL of the request that got the response.
    """
    if not 300 <= response.status_code < 400:
        return None
    raw = next(
        (value for name, value in response.headers.raw if name.lower() == b"location"),
        None,
    )
    if raw is None:
        return None
    try:
        location = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidRedirect(f"redirect location is not valid UTF-8: {raw!r}") from exc
    if "://" in location:
        return location
    try:
        return str(response.request.url.join(location))
    except httpx.InvalidURL as exc:
        raise InvalidRedirect(f"malformed redirect location {location!r}: {exc}") from exc


class Engine:
    """Runs every URL of a :class:`RequestConfig`, one at a time.

    URLs are taken from the end of the work-list. A followed redirect pushes
    its target back onto the end, so a redirect chain is fully resolved
    before the next command line URL is started.

    The first error ends the run; URLs still on the work-list are not
    attempted.
    """

    def __init__(
        self,
        config: RequestConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sink: OutputSink | None = None,
    ) -> None:
        self.config = config
        self.urls: list[str] = list(config.urls)
        self._transport = transport
        self._sink = sink

    async def run(self) -> None:
        sink = self._sink if self._sink is not None else await open_sink(self.config.output)
        async with OutputMultiplexer(sink) as output:
            async with create_client(self.config, self._transport) as client:
                redirects = 0
                while self.urls:
                    url = self.urls.pop()
                    target = await self._fetch(client, output, url)
                    if target is None:
                        redirects = 0
                        continue
                    redirects += 1
                    max_redirects = self.config.max_redirects
                    if max_redirects is not None and redirects > max_redirects:
                        raise TooManyRedirects(
                            f"Maximum ({max_redirects}) redirects followed"
                        )
                    logger.debug("* Following redirect to %s", target)
                    self.urls.append(target)

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        output: OutputMultiplexer,
        url: str,
    ) -> str | None:
        """Send one request and forward its response to ``output``.

        Returns the redirect target when the response is followed instead
        of emitted.
        """
        request = build_request(self.config, url)
        logger.debug("> %s %s", request.method, request.url)
        for name, value in request.headers.raw:
            logger.debug("> %s: %s", name.decode("latin-1"), value.decode("latin-1"))

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        try:
            logger.debug("< %s", status_line(response))
            for name, value in response.headers.raw:
                logger.debug("< %s: %s", name.decode("latin-1"), value.decode("latin-1"))

            if self.config.fail and response.status_code >= 400:
                raise HTTPStatusFailure(response.status_code, str(request.url))

            if self.config.include_headers:
                for line in head_lines(response):
                    await output.send(line)

            if self.config.follow_redirects:
                target = redirect_target(response)
                if target is not None:
                    return target

            await self._emit_body(response, output)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
        finally:
            await response.aclose()
        return None

    async def _emit_body(self, response: httpx.Response, output: OutputMultiplexer) -> None:
        # Transports may hand back a response whose body was read up front.
        if response.is_stream_consumed:
            if response.content:
                await output.send(response.content)
            return
        async for chunk in response.aiter_raw():
            await output.send(chunk)


def run_config(config: RequestConfig) -> None:
    """Run ``config`` to completion on a fresh event loop."""
    asyncio.run(Engine(config).run())
