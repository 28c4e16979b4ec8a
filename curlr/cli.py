from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from ._config import DEFAULT_MAX_REDIRECTS, Verbosity, resolve_config
from ._engine import run_config
from ._exceptions import CurlError
from ._logging import configure_logging
from .__version__ import __title__, __version__

# ---------------------------------------------------------------------------
# Error reporting
# ---------------------------------------------------------------------------


def report_error(exc: CurlError, verbosity: Verbosity) -> None:
    """Print ``exc`` on stderr unless the run is silent."""
    if verbosity is Verbosity.SILENT:
        return
    console = Console(stderr=True)
    console.print(
        f"[bold red]{__title__}:[/bold red] {escape(exc.message)}",
        highlight=False,
        soft_wrap=True,
    )


def _verbosity(silent: bool, verbose: bool) -> Verbosity:
    if silent:
        return Verbosity.SILENT
    if verbose:
        return Verbosity.VERBOSE
    return Verbosity.NORMAL


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(
    help="curlr is the best curl alternative. Transfer data from or to each URL.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("urls", nargs=-1, metavar="URL...")
@click.option(
    "-X", "--request", "method", default=None, metavar="METHOD",
    help="Specify request method to use.",
)
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    metavar="HEADER/@FILE",
    help='Pass custom header(s) to server, e.g. -H "Accept: text/plain".',
)
@click.option("-d", "--data", default=None, metavar="DATA", help="HTTP POST data.")
@click.option(
    "-T",
    "--upload-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Transfer local FILE to destination.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to file instead of stdout.",
)
@click.option(
    "-O", "--remote-name", is_flag=True, default=False,
    help="Write output to a file named as the remote file.",
)
@click.option(
    "--recursive", is_flag=True, default=False, help="Download recursively."
)
@click.option(
    "-u", "--user", default=None, metavar="USER:PASSWORD",
    help="Server user and password.",
)
@click.option(
    "-A", "--user-agent", default=None, metavar="NAME",
    help="Send User-Agent NAME to server.",
)
@click.option(
    "-i", "--include", is_flag=True, default=False,
    help="Include protocol response headers in the output.",
)
@click.option(
    "-L", "--location", is_flag=True, default=False, help="Follow redirects."
)
@click.option(
    "--max-redirs",
    "max_redirects",
    type=int,
    default=DEFAULT_MAX_REDIRECTS,
    show_default=True,
    help="Maximum number of redirects allowed, -1 for no limit.",
)
@click.option(
    "-f", "--fail", is_flag=True, default=False,
    help="Fail fast with no output on HTTP errors.",
)
@click.option(
    "-k", "--insecure", is_flag=True, default=False,
    help="Allow insecure server connections.",
)
@click.option("-s", "--silent", is_flag=True, default=False, help="Silent mode.")
@click.option(
    "-v", "--verbose", is_flag=True, default=False,
    help="Make the operation more talkative.",
)
@click.version_option(
    __version__, "-V", "--version", prog_name=__title__,
    message="%(prog)s version: %(version)s",
)
def main(
    urls: tuple[str, ...],
    method: str | None,
    headers: tuple[str, ...],
    data: str | None,
    upload_file: Path | None,
    output: Path | None,
    remote_name: bool,
    recursive: bool,
    user: str | None,
    user_agent: str | None,
    include: bool,
    location: bool,
    max_redirects: int,
    fail: bool,
    insecure: bool,
    silent: bool,
    verbose: bool,
) -> None:
    verbosity = _verbosity(silent, verbose)
    configure_logging(verbosity)

    try:
        config = resolve_config(
            urls,
            method=method,
            headers=headers,
            data=data,
            upload_file=upload_file,
            output=output,
            user=user,
            user_agent=user_agent,
            include=include,
            location=location,
            max_redirects=max_redirects,
            fail=fail,
            insecure=insecure,
            verbosity=verbosity,
            remote_name=remote_name,
            recursive=recursive,
        )
        run_config(config)
    except CurlError as exc:
        report_error(exc, verbosity)
        sys.exit(exc.exit_code)


__all__ = ["main", "report_error"]
