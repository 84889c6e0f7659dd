"""Typer application factory and CLI entry point for methodmap.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``extract``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, and
invokes the Typer app. :class:`~methodmap.exceptions.MethodMapError`
instances exit with their ``exit_code``; anything else is written to a crash
log under the data directory.

See Also:
    :mod:`methodmap.config`: Global and project configuration resolution.
    :mod:`methodmap.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from methodmap import __version__
from methodmap.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="methodmap",
    help="Extract Appium method maps and execute-method maps from declaration trees.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"methodmap {__version__}")
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
        False, "--verbose", "-v", help="Show the extractor's trace messages."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective configuration, initialises the global
    :class:`~methodmap.output.OutputManager` from it, and stores shared
    options in ``ctx.obj`` for the sub-commands.

    Raises:
        InvalidUsageError: If both ``--json`` and ``--plain`` are given.
        ConfigError: If a config layer is invalid or names an unknown
            output format.
    """
    from methodmap.config import resolve_config
    from methodmap.exceptions import ConfigError, InvalidUsageError
    from methodmap.output import OutputFormat, OutputManager, set_output

    if json_output and plain_output:
        raise InvalidUsageError("--json and --plain are mutually exclusive")

    cli_format = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config = resolve_config(cli_format=cli_format)
    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        raise ConfigError(f"Unknown output format: {config.output.format}") from None

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["names"] = config.names
    ctx.obj["force"] = force


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from methodmap.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app` (idempotent)."""
    from methodmap.commands.config import config_app
    from methodmap.commands.extract import extract_command

    if getattr(app, "_methodmap_registered", False):
        return
    app.command("extract")(extract_command)
    app.add_typer(config_app, name="config", help="Configuration management.")
    app._methodmap_registered = True  # type: ignore[attr-defined]


def main() -> None:
    """CLI entry point invoked by the ``methodmap`` console script.

    Unhandled :class:`~methodmap.exceptions.MethodMapError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from methodmap.exceptions import MethodMapError
        from methodmap.output import error

        if isinstance(exc, MethodMapError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
