"""
Errors raised by curlr.

Every error carries the process exit code the command line reports for it.
The codes follow curl's where curl has an equivalent.

* CurlError
  + ConfigError
    - InvalidURL
  + FileLoadError
  + TransportError
    - InvalidRedirect
    - TooManyRedirects
  + HTTPStatusFailure
  + OutputError
"""

from __future__ import annotations


class CurlError(Exception):
    """Base class for every fatal curlr error."""

    exit_code = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(CurlError):
    """The command line does not describe a runnable set of requests."""

    exit_code = 2


class InvalidURL(ConfigError):
    exit_code = 3


class FileLoadError(CurlError):
    """A local file needed for the request body could not be read."""

    exit_code = 26


class TransportError(CurlError):
    """Connecting, sending or receiving over HTTP failed."""


class InvalidRedirect(TransportError):
    pass


class TooManyRedirects(TransportError):
    exit_code = 47


class HTTPStatusFailure(CurlError):
    """Raised with ``--fail`` when the server answers with an error status."""

    exit_code = 22

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"The requested URL returned error: {status_code}")
        self.status_code = status_code
        self.url = url


class OutputError(CurlError):
    exit_code = 23
