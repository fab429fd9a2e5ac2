"""httping CLI: ping-style latency measurement for HTTP(S) endpoints."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from httping import __version__

from .config import load_config
from .constants import DEFAULT_DELAY_MS, DEFAULT_TIMEOUT_MS
from .errors import ConfigError
from .logging import configure_logging
from .output import OutputContext
from .run import ping


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"httping {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="httping",
    help="Measure HTTP(S) latency per phase, ping style",
    no_args_is_help=True,
    add_completion=False,
)


@app.command()
def main(
    url: Annotated[str, typer.Argument(help="Target URL, e.g. https://example.com/")],
    count: Annotated[
        int | None,
        typer.Option(
            "--count", "-c", min=0, help="Number of requests to send [default: 0 = unbounded]"
        ),
    ] = None,
    delay: Annotated[
        int | None,
        typer.Option(
            "--delay",
            "-d",
            min=0,
            help=f"Minimum delay between requests in ms [default: {DEFAULT_DELAY_MS}]",
        ),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option(
            "--timeout", "-t", min=1, help=f"Request timeout in ms [default: {DEFAULT_TIMEOUT_MS}]"
        ),
    ] = None,
    enable_keep_alive: Annotated[
        bool,
        typer.Option("--enable-keep-alive", "-k", help="Reuse connections between requests"),
    ] = False,
    disable_compression: Annotated[
        bool,
        typer.Option("--disable-compression", help="Do not request compressed responses"),
    ] = False,
    disable_h2: Annotated[
        bool,
        typer.Option("--disable-h2", help="Disable HTTP/2"),
    ] = False,
    no_new_conn_count: Annotated[
        bool,
        typer.Option(
            "--no-new-conn-count",
            help="Leave requests that did not reuse a connection out of the statistics",
        ),
    ] = False,
    user_agent: Annotated[
        str | None,
        typer.Option("--user-agent", "-A", help="User-Agent header to send"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="TOML file with defaults for the options above"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format for automation"),
    ] = False,
    no_color: Annotated[
        bool,
        typer.Option("--no-color", help="Disable colored output"),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log warnings and errors"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Send requests to URL and report per-phase timings.

    Runs until --count requests were sent or Ctrl+C is pressed, then
    prints a summary.
    """
    log_console = configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)
    ctx = OutputContext(
        console=Console(no_color=no_color, highlight=False),
        err_console=log_console,
        json_mode=json_output,
    )

    # Flags only override the config file when given
    try:
        config = load_config(
            url,
            config_file,
            count=count,
            delay_ms=delay,
            timeout_ms=timeout,
            keep_alive=True if enable_keep_alive else None,
            disable_compression=True if disable_compression else None,
            disable_http2=True if disable_h2 else None,
            exclude_new_connections=True if no_new_conn_count else None,
            user_agent=user_agent,
        )
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None

    state = asyncio.run(ping(config, ctx.result))
    ctx.summary(
        requests=state.requests_sent,
        successful=state.successful,
        failed=state.failed,
        summary=state.stats.summarize(),
    )
