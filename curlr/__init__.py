from .__version__ import __description__, __title__, __version__
from ._config import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_USER_AGENT,
    InlineBytes,
    OutputFile,
    RequestConfig,
    Stdout,
    UploadFile,
    Verbosity,
    resolve_config,
)
from ._engine import Engine, run_config
from ._exceptions import (
    ConfigError,
    CurlError,
    FileLoadError,
    HTTPStatusFailure,
    InvalidRedirect,
    InvalidURL,
    OutputError,
    TooManyRedirects,
    TransportError,
)
from ._output import FileSink, OutputMultiplexer, OutputSink, StreamSink
from ._request import FileBodyStream, build_request, normalize_url, split_header
from .cli import main

_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(  # pyright: ignore[reportUnsupportedDunderAll]
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
