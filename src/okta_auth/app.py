"""Typer application and CLI entry point for okta-auth.

This module wires the top-level Typer application: the session commands
(``login``, ``status``, ``token``, ``refresh``, ``copy``, ``clear``,
``services``), the ``config`` sub-group, and ``serve``, which runs the MCP
server on stdio.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Typed errors exit with their ``exit_code``; anything else is written to a
crash log under the data directory.

See Also:
    :mod:`okta_auth.server`: The MCP tool surface started by ``serve``.
    :mod:`okta_auth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from okta_auth import __version__
from okta_auth.commands.config import config_app
from okta_auth.commands.session import (
    clear_command,
    copy_command,
    login_command,
    refresh_command,
    services_command,
    status_command,
    token_command,
)
from okta_auth.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS


app = typer.Typer(
    name="okta-auth",
    help="Shared Okta SSO sessions for MCP tools and the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("login")(login_command)
app.command("status")(status_command)
app.command("token")(token_command)
app.command("refresh")(refresh_command)
app.command("copy")(copy_command)
app.command("clear")(clear_command)
app.command("services")(services_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"okta-auth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~okta_auth.output.OutputManager` from
    CLI flags and stores ``force`` and ``verbose`` in ``ctx.obj`` for
    sub-commands.
    """
    from okta_auth.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


@app.command("serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the MCP server on stdio.

    stdout carries the MCP protocol, so all logging goes to stderr. Exits
    non-zero only if the server cannot start.

    Example::

        okta-auth serve
        okta-auth --verbose serve
    """
    from okta_auth.server import run_server

    verbose = ctx.obj.get("verbose", False) if ctx.obj else False
    code = run_server(verbose=verbose)
    if code != EXIT_SUCCESS:
        raise typer.Exit(code=code)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from okta_auth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``okta-auth`` console script.

    Unhandled :class:`~okta_auth.exceptions.OktaAuthError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from okta_auth.exceptions import OktaAuthError
        from okta_auth.output import error

        if isinstance(exc, OktaAuthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
