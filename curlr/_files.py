from __future__ import annotations

import logging
import sys
import typing
from pathlib import Path

from ._exceptions import FileLoadError

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


def strip_file_marker(argument: str) -> str:
    return argument[1:] if argument.startswith("@") else argument


def read_data_argument(value: str) -> bytes:
    """Return the request body for a ``-d`` argument.

    ``@path`` loads the whole file, ``@-`` reads standard input and anything
    else is sent literally as UTF-8.
    """
    if not value.startswith("@"):
        return value.encode("utf-8")

    name = strip_file_marker(value)
    if name == STDIN_MARKER:
        return sys.stdin.buffer.read()
    try:
        return Path(name).read_bytes()
    except OSError as exc:
        raise FileLoadError(f"can't read data from file {name!r}: {exc}") from exc


def read_header_lines(path: str | Path) -> list[str]:
    """Return the non-empty, trimmed lines of a header file.

    A file that cannot be read contributes no headers.
    """
    try:
        with open(path, encoding="utf-8") as fp:
            return [line.strip() for line in fp if line.strip()]
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("can't read headers from file %r: %s", str(path), exc)
        return []


def expand_header_arguments(values: typing.Iterable[str]) -> list[str]:
    entries: list[str] = []
    for value in values:
        if value.startswith("@"):
            entries.extend(read_header_lines(strip_file_marker(value)))
        else:
            entries.append(value)
    return entries
