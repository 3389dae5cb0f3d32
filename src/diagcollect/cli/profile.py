"""Profile commands."""

from pathlib import Path

import click

from diagcollect.cli.output import OutputFormatter
from diagcollect.collectors.profile import load_profile
from diagcollect.core.errors import DiagError, handle_error


@click.group()
def profile() -> None:
    """Inspect collection profiles."""
    pass


@profile.command()
@click.option(
    "--profile",
    "-p",
    "profile_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Profile YAML (default: built-in Linux profile)",
)
@click.pass_context
def show(ctx: click.Context, profile_path: Path | None) -> None:
    """Show the commands and path patterns a profile collects."""
    formatter: OutputFormatter = ctx.obj.get("formatter", OutputFormatter())

    try:
        loaded = load_profile(profile_path)
    except DiagError as e:
        handle_error(e)

    formatter.output(loaded.model_dump(mode="json"), title=f"Profile {loaded.name}")
