"""CLI entry point for crater-report."""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import click

from crater import __version__
from crater.config import CraterConfig, load_config
from crater.models import ReportRequest, parse_report_request
from crater.reporter import MarkdownRenderer, build_report, render_json
from crater.utils.errors import CraterError, DataUnavailable
from crater.utils.logging import configure_logging, get_correlation_id, get_logger
from crater.utils.result import ExitCode

DEFAULT_CONFIG = "./config"


class Context:
    """CLI context for sharing state between commands."""

    def __init__(
        self,
        config_dir: Path,
        log_level: Optional[str],
        log_format: Optional[str],
    ) -> None:
        self.config_dir = config_dir
        self.log_level = log_level
        self.log_format = log_format
        self.logger = get_logger("cli")
        self._config: Optional[CraterConfig] = None

    @property
    def config(self) -> CraterConfig:
        """Load configuration on first use, exiting on invalid configuration."""
        if self._config is None:
            result = load_config(self.config_dir)
            if result.is_err():
                error = result.unwrap_err()
                self.logger.error("config_invalid", field=error.field, message=error.message)
                output_error(str(error))
                sys.exit(ExitCode.CONFIG_INVALID)
            self._config = result.unwrap()
            if self.log_level is None or self.log_format is None:
                configure_logging(
                    level=self.log_level or self._config.logging.level,
                    format_type=self.log_format or self._config.logging.format,
                )
        return self._config


pass_context = click.make_pass_decorator(Context)


def output_error(message: str, **details: object) -> None:
    """Write an error as JSON to stderr."""
    click.echo(json.dumps({"status": "error", "message": message, **details}, default=str), err=True)


def run_report(ctx: Context, args: Sequence[str], output_format: Optional[str]) -> None:
    """Parse, build and print one report."""
    request_result = parse_report_request(args, today=date.today())
    if request_result.is_err():
        output_error(str(request_result.unwrap_err()))
        sys.exit(ExitCode.REQUEST_INVALID)
    request: ReportRequest = request_result.unwrap()

    config = ctx.config
    output_format = output_format or config.report.format

    ctx.logger.info(
        "report_requested",
        kind=request.kind.value,
        args=list(args[1:]),
        correlation_id=get_correlation_id(),
    )

    try:
        report = asyncio.run(build_report(config, request))
    except DataUnavailable as e:
        ctx.logger.error("report_data_unavailable", error=str(e))
        output_error(**e.to_dict())
        sys.exit(ExitCode.DATA_UNAVAILABLE)
    except CraterError as e:
        ctx.logger.error("report_failed", error=str(e))
        output_error(**e.to_dict())
        sys.exit(ExitCode.REPORT_FAILED)

    if output_format == "json":
        click.echo(render_json(report, config.report.inspector_url))
    else:
        renderer = MarkdownRenderer(inspector_url=config.report.inspector_url)
        click.echo(renderer.render(report), nl=False)


format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["markdown", "json"], case_sensitive=False),
    default=None,
    help="Output format (default from config)",
)


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to config directory",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level (default from config)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format (default from config)",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path,
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """
    Crater reports - regressions of crates across Rust toolchains.

    Compares per-crate build and test outcomes between toolchains and
    separates root regressions from those caused by a broken dependency.
    """
    configure_logging(level=log_level or "warn", format_type=log_format or "json")

    ctx.obj = Context(
        config_dir=config,
        log_level=log_level,
        log_format=log_format,
    )


@cli.command()
@click.argument("report_date", required=False)
@format_option
@pass_context
def current(ctx: Context, report_date: Optional[str], output_format: Optional[str]) -> None:
    """Show the stable, beta and nightly toolchains current on REPORT_DATE."""
    run_report(ctx, ["current", *([report_date] if report_date else [])], output_format)


@cli.command()
@click.argument("report_date", required=False)
@format_option
@pass_context
def weekly(ctx: Context, report_date: Optional[str], output_format: Optional[str]) -> None:
    """Compare stable->beta and beta->nightly as of REPORT_DATE."""
    run_report(ctx, ["weekly", *([report_date] if report_date else [])], output_format)


@cli.command()
@click.argument("from_toolchain")
@click.argument("to_toolchain")
@format_option
@pass_context
def comparison(
    ctx: Context,
    from_toolchain: str,
    to_toolchain: str,
    output_format: Optional[str],
) -> None:
    """Compare FROM_TOOLCHAIN to TO_TOOLCHAIN, e.g. nightly-2016-01-01 nightly-2016-01-08."""
    run_report(ctx, ["comparison", from_toolchain, to_toolchain], output_format)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
