from __future__ import annotations

import enum
import typing
from dataclasses import dataclass, field
from pathlib import Path

from ._exceptions import ConfigError
from ._files import expand_header_arguments, read_data_argument
from .__version__ import __title__, __version__

DEFAULT_USER_AGENT = f"{__title__}/{__version__}"
DEFAULT_MAX_REDIRECTS = 50


class Verbosity(enum.Enum):
    SILENT = "silent"
    NORMAL = "normal"
    VERBOSE = "verbose"


# ---------------------------------------------------------------------------
# Body sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InlineBytes:
    data: bytes


@dataclass(frozen=True)
class UploadFile:
    path: Path


BodySource = typing.Union[InlineBytes, UploadFile, None]


# ---------------------------------------------------------------------------
# Output targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Stdout:
    pass


@dataclass(frozen=True)
class OutputFile:
    path: Path


OutputTarget = typing.Union[Stdout, OutputFile]


@dataclass(frozen=True)
class RequestConfig:
    """Everything needed to run a batch of requests.

    Built once by :func:`resolve_config` and never modified afterwards.
    ``urls`` keeps the command line order; the engine works through it from
    the end.
    """

    urls: tuple[str, ...]
    method: str = "GET"
    headers: tuple[str, ...] = ()
    user_agent: str | None = DEFAULT_USER_AGENT
    basic_auth: str | None = None
    body: BodySource = None
    include_headers: bool = False
    follow_redirects: bool = False
    max_redirects: int | None = DEFAULT_MAX_REDIRECTS
    fail: bool = False
    insecure: bool = False
    output: OutputTarget = field(default_factory=Stdout)
    verbosity: Verbosity = Verbosity.NORMAL


def default_method(body: BodySource) -> str:
    if isinstance(body, UploadFile):
        return "PUT"
    if isinstance(body, InlineBytes):
        return "POST"
    return "GET"


def resolve_config(
    urls: typing.Sequence[str],
    *,
    method: str | None = None,
    headers: typing.Sequence[str] = (),
    data: str | None = None,
    upload_file: str | Path | None = None,
    output: str | Path | None = None,
    user: str | None = None,
    user_agent: str | None = None,
    include: bool = False,
    location: bool = False,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    fail: bool = False,
    insecure: bool = False,
    verbosity: Verbosity = Verbosity.NORMAL,
    remote_name: bool = False,
    recursive: bool = False,
) -> RequestConfig:
    """Validate raw command line values and fill in defaults.

    Conflicts are detected before any file is read, so a rejected command
    line performs no I/O at all.
    """
    if recursive:
        raise ConfigError("--recursive is not implemented yet")
    if remote_name:
        raise ConfigError("-O, --remote-name is not implemented yet")
    if not urls:
        raise ConfigError("no URL specified!")
    if data is not None and upload_file is not None:
        raise ConfigError(
            "You can only select one HTTP request method! "
            "You asked for both PUT (-T, --upload-file) and POST (-d, --data)."
        )

    body: BodySource = None
    if upload_file is not None:
        body = UploadFile(Path(upload_file))
    elif data is not None:
        body = InlineBytes(read_data_argument(data))

    return RequestConfig(
        urls=tuple(urls),
        method=method if method else default_method(body),
        headers=tuple(expand_header_arguments(headers)),
        user_agent=user_agent if user_agent is not None else DEFAULT_USER_AGENT,
        basic_auth=user,
        body=body,
        include_headers=include,
        follow_redirects=location,
        max_redirects=None if max_redirects < 0 else max_redirects,
        fail=fail,
        insecure=insecure,
        output=OutputFile(Path(output)) if output is not None else Stdout(),
        verbosity=verbosity,
    )
