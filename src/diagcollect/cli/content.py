"""Content commands: redact files or stdin, classify files."""

from pathlib import Path

import click

from diagcollect.cli.output import OutputFormatter
from diagcollect.content.classifier import classify_file
from diagcollect.content.decompress import decoded_name, open_decoded
from diagcollect.content.redaction import RedactionFilter
from diagcollect.core import logging as log
from diagcollect.core.errors import EXIT_ERROR, UnsupportedContentError


@click.command()
@click.argument(
    "files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--reveal",
    is_flag=True,
    default=False,
    help="Echo every line that had a value redacted to stderr",
)
@click.pass_context
def redact(ctx: click.Context, files: tuple[Path, ...], reveal: bool) -> None:
    """Write FILES (or stdin) to stdout with secret values redacted.

    Compressed files are decompressed first.
    """
    redactor = RedactionFilter(reveal=reveal)
    out = click.get_binary_stream("stdout")

    if not files:
        redactor.filter_stream(click.get_binary_stream("stdin"), out, source="<stdin>")
        return

    failed = False
    for path in files:
        try:
            _, reader = open_decoded(path)
        except UnsupportedContentError as e:
            log.warning(str(e))
            failed = True
            continue
        with reader:
            stats = redactor.filter_stream(reader, out, source=str(path))
        log.debug(f"{path}: {stats.redactions} values redacted")
    out.flush()

    if failed:
        ctx.exit(EXIT_ERROR)


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
def classify(ctx: click.Context, files: tuple[Path, ...]) -> None:
    """Show the detected content type of FILES."""
    formatter: OutputFormatter = ctx.obj.get("formatter", OutputFormatter())

    results = []
    for path in files:
        classification = classify_file(path)
        results.append({
            "path": str(path),
            "kind": classification.kind.value,
            "mime": classification.mime,
            "collected_as": decoded_name(path.name, classification.kind),
            "collectable": classification.is_text or classification.is_compressed,
        })

    formatter.output(results)
