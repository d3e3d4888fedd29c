"""CLI entry-point: Click command group and dispatch."""

from __future__ import annotations

import dataclasses
import logging
import sys

import click
from pydantic import ValidationError

from axestatus.api.errors import ConfigError
from axestatus.models.config import AppSettings
from axestatus.output.formatter import OutputFormatter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Application context (stored in ctx.obj)
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class AppContext:
    """Shared state passed to every Click command via ``@click.pass_obj``."""

    addresses: str | None
    output_format: str | None
    quiet: bool
    verbose: bool
    _formatter: OutputFormatter | None = dataclasses.field(default=None, repr=False)

    @property
    def formatter(self) -> OutputFormatter:
        if self._formatter is None:
            force = "quiet" if self.quiet else (self.output_format or AppSettings().output_format)
            self._formatter = OutputFormatter(force_format=force)
        return self._formatter


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr: DEBUG with *verbose*, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s  %(levelname)-5s  [%(name)s]  %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Root Click group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--addresses",
    default=None,
    help="Comma-separated device IPs/hostnames (default: BITAXE_ADDRESSES)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["rich", "json", "quiet"]),
    default=None,
    help="Output format (default: auto-detect)",
)
@click.option("--quiet", is_flag=True, default=False, help="Suppress normal output")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    addresses: str | None,
    output_format: str | None,
    quiet: bool,
    verbose: bool,
) -> None:
    """Show status of Bitaxe miners on the local network."""
    configure_logging(verbose)
    ctx.obj = AppContext(
        addresses=addresses,
        output_format=output_format,
        quiet=quiet,
        verbose=verbose,
    )


# ---------------------------------------------------------------------------
# Register subcommands (lazy imports keep startup fast)
# ---------------------------------------------------------------------------


def _register_commands() -> None:
    """Import and attach all subcommands to the root CLI."""
    from axestatus.cli.dashboard import dashboard_cmd
    from axestatus.cli.status import raw_cmd, status_cmd

    cli.add_command(dashboard_cmd)
    cli.add_command(raw_cmd)
    cli.add_command(status_cmd)


_register_commands()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Run the CLI; turn failures into an error report and an exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    ctx: click.Context | None = None
    try:
        ctx = cli.make_context("axestatus", args)
        with ctx:
            cli.invoke(ctx)
    except click.exceptions.Exit as exc:
        raise SystemExit(exc.exit_code) from None
    except click.exceptions.Abort:
        raise SystemExit(1) from None
    except click.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except SystemExit:
        raise
    except Exception as exc:
        logger.debug("Command failed", exc_info=True)
        _formatter_for(ctx, exc).output_error(
            code=_error_code(exc), message=str(exc), command=_command_name(ctx)
        )
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# Helpers for error handling
# ---------------------------------------------------------------------------


def _formatter_for(ctx: click.Context | None, exc: Exception) -> OutputFormatter:
    """The command's formatter, or a fresh one when settings failed to load."""
    app_ctx = ctx.obj if ctx is not None else None
    if not isinstance(app_ctx, AppContext):
        return OutputFormatter()
    if not isinstance(exc, ValidationError):
        return app_ctx.formatter
    return OutputFormatter(force_format="quiet" if app_ctx.quiet else app_ctx.output_format)


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ConfigError):
        return "config_error"
    if isinstance(exc, ValidationError):
        return "invalid_settings"
    return type(exc).__name__


def _command_name(ctx: click.Context | None) -> str:
    if ctx is None or not ctx.invoked_subcommand:
        return "unknown"
    return ctx.invoked_subcommand
