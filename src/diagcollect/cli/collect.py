"""Collect command: run a profile into a staging directory and archive it."""

from pathlib import Path

import click
from click.core import ParameterSource

from diagcollect.cli.output import OutputFormatter
from diagcollect.collectors.orchestrator import Collector
from diagcollect.collectors.profile import load_profile
from diagcollect.core.config import load_config
from diagcollect.core.errors import DiagError, handle_error

# Options that map one-to-one onto CollectionConfig fields.
CONFIG_OPTIONS = (
    "profile",
    "output_dir",
    "system_root",
    "max_size_mb",
    "reveal_filtered",
    "archive",
    "keep_raw",
    "upload_command",
)


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with collection settings",
)
@click.option(
    "--profile",
    "-p",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Collection profile YAML (default: built-in Linux profile)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory that receives the staging directory and archive",
)
@click.option(
    "--system-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("/"),
    help="Resolve file paths under this root (e.g. a mounted image)",
)
@click.option(
    "--max-size-mb",
    type=int,
    default=150,
    help=(
        "Size budget per file category for newest-first files; 0 = unlimited. "
        "When given, also replaces the budgets set in the profile"
    ),
)
@click.option(
    "--reveal-filtered",
    is_flag=True,
    default=False,
    help="Echo every line that had a value redacted to stderr",
)
@click.option(
    "--archive/--no-archive",
    default=True,
    help="Pack the staging directory as tar.gz (default: on)",
)
@click.option(
    "--keep-raw",
    is_flag=True,
    default=False,
    help="Keep the staging directory after archiving",
)
@click.option(
    "--upload-command",
    default=None,
    help="Shell command run on the archive; {archive} is replaced by its path",
)
@click.pass_context
def collect(ctx: click.Context, config_path: Path | None, **options) -> None:
    """Collect command output and files with secrets redacted.

    Commands run one at a time with no timeout. Files in each profile
    category are taken newest first until the category's size budget is
    used up; older files are listed as skipped. Files that are neither
    text nor compressed text are listed in skipped_files.
    """
    formatter: OutputFormatter = ctx.obj.get("formatter", OutputFormatter())

    overrides = {
        name: options[name]
        for name in CONFIG_OPTIONS
        if ctx.get_parameter_source(name) != ParameterSource.DEFAULT
    }

    try:
        config = load_config(config_path, overrides)
        profile = load_profile(config.profile)
        if ctx.get_parameter_source("max_size_mb") != ParameterSource.DEFAULT:
            profile = profile.without_budget_overrides()
        report = Collector(config, profile).run()
    except DiagError as e:
        handle_error(e)

    formatter.output(report.summary(), title="Collection report")

    totals = report.totals()
    location = report.archive_path or report.staging_path
    click.echo(
        f"Collected {totals['written']} targets "
        f"({totals['skipped']} skipped, {totals['failed']} failed): {location}",
        err=True,
    )
