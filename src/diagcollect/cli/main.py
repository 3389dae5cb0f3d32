"""diagcollect CLI entry point and global options."""

import sys
from typing import Literal

import click

from diagcollect import __version__
from diagcollect.cli.collect import collect
from diagcollect.cli.content import classify, redact
from diagcollect.cli.output import OutputFormat, OutputFormatter, set_output_format
from diagcollect.cli.profile import profile
from diagcollect.core.errors import EXIT_ERROR
from diagcollect.core.logging import configure_logging, set_verbose


@click.group()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "human"]),
    default="json",
    help="Output format (default: json)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose logging to stderr",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress progress output",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Log format for stderr (default: text)",
)
@click.version_option(version=__version__, prog_name="diagcollect")
@click.pass_context
def cli(
    ctx: click.Context,
    format: OutputFormat,
    verbose: bool,
    quiet: bool,
    log_format: Literal["text", "json"],
) -> None:
    """diagcollect: host diagnostic collector.

    Gathers command output, configuration and logs into a staging tree
    that mirrors the host's paths, with passwords, tokens and keys
    redacted, then packs it for hand-off to support.
    """
    ctx.ensure_object(dict)
    ctx.obj = {
        "format": format,
        "verbose": verbose,
        "quiet": quiet,
        "log_format": log_format,
        "formatter": OutputFormatter(format=format),
    }

    set_output_format(format)
    set_verbose(verbose)
    configure_logging(log_format=log_format, quiet=quiet)


cli.add_command(collect)
cli.add_command(redact)
cli.add_command(classify)
cli.add_command(profile)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
