"""Writes filtered artifacts into the staging directory.

Each call processes one target end to end and returns its TargetResult.
Per-target problems are turned into ``skipped`` or ``failed`` results and
never raised to the caller.
"""

import itertools
import os
import subprocess
from pathlib import Path, PurePosixPath

from diagcollect.collectors.budget import SizeBudget
from diagcollect.content.decompress import DECODE_ERRORS, decoded_name, open_decoded
from diagcollect.content.redaction import RedactionFilter
from diagcollect.core import logging as log
from diagcollect.core.errors import CommandExecutionError, UnsupportedContentError
from diagcollect.models.collection import (
    CommandTarget,
    FileCandidate,
    TargetKind,
    TargetResult,
    TargetStatus,
)

SKIPPED_MANIFEST = "skipped_files"


class ArtifactWriter:
    """Produces filtered command output and file copies under a staging root."""

    def __init__(
        self,
        staging: Path,
        redactor: RedactionFilter,
        system_root: Path = Path("/"),
    ) -> None:
        """Initialize the writer.

        Args:
            staging: Existing staging directory
            redactor: Filter applied to every written byte
            system_root: Root that file sources are relative to
        """
        self.staging = Path(staging)
        self.redactor = redactor
        self.system_root = Path(os.path.realpath(system_root))
        self._source_dirs: dict[Path, Path] = {}

    @property
    def manifest_path(self) -> Path:
        """Path of the skipped_files manifest."""
        return self.staging / SKIPPED_MANIFEST

    def write_command(self, target: CommandTarget) -> TargetResult:
        """Run a command and write its filtered combined output.

        The output file starts with the command line itself. A nonzero exit
        marks the target failed but the captured output is still written.
        No timeout is imposed: a hanging command blocks the collection.
        """
        result = TargetResult(
            kind=TargetKind.COMMAND,
            source=target.command,
            destination=target.destination,
            status=TargetStatus.RUNNING,
        )
        header = target.command.encode() + b"\n"

        try:
            dest = self._prepare(target.destination)
            with open(dest, "wb") as out:
                stats, exit_code = self._run(target, header, out)
        except OSError as e:
            result.status = TargetStatus.FAILED
            result.reason = f"cannot write {target.destination}: {e}"
            log.error(result.reason)
            return result

        result.bytes_read = stats.bytes_read
        result.bytes_written = stats.bytes_written
        result.redactions = stats.redactions
        result.exit_code = exit_code

        if exit_code != 0:
            err = CommandExecutionError(target.command, exit_code)
            result.status = TargetStatus.FAILED
            result.reason = str(err)
            log.warning(str(err), destination=target.destination)
        else:
            result.status = TargetStatus.WRITTEN
            log.debug(f"Collected {target.destination}", bytes=stats.bytes_written)
        return result

    def _run(self, target: CommandTarget, header: bytes, out):
        """Stream the command output through the filter; returns (stats, exit code)."""
        try:
            proc = subprocess.Popen(
                target.command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            lines = [header, f"{e}\n".encode()]
            return self.redactor.filter_stream(lines, out, source=target.destination), 127

        with proc:
            stats = self.redactor.filter_stream(
                itertools.chain([header], proc.stdout),
                out,
                source=target.destination,
            )
        return stats, proc.returncode

    def write_file(
        self,
        candidate: FileCandidate,
        budget: SizeBudget,
        category: str | None = None,
    ) -> TargetResult:
        """Filter one file into the staging tree.

        Text is filtered as is, compressed text is decompressed and written
        without its compression suffix, anything else is listed in the
        skipped_files manifest. Only written files are charged to the budget.
        """
        result = TargetResult(
            kind=TargetKind.FILE,
            source=candidate.source,
            destination=candidate.destination,
            category=category,
            status=TargetStatus.RUNNING,
        )

        if candidate.skipped_for_size:
            result.status = TargetStatus.SKIPPED
            result.reason = "size limit"
            return result

        try:
            classification, reader = open_decoded(candidate.real_path)
        except UnsupportedContentError as e:
            self.record_skipped(candidate.source, e.detected_type)
            result.status = TargetStatus.SKIPPED
            result.reason = f"unknown type {e.detected_type}"
            result.detected_type = e.detected_type
            log.info(f"{candidate.source}: unknown type {e.detected_type}", category=category)
            return result
        except OSError as e:
            result.status = TargetStatus.FAILED
            result.reason = f"cannot read: {e.strerror or e}"
            log.warning(f"{candidate.source}: {result.reason}", category=category)
            return result

        result.detected_type = classification.mime
        destination = candidate.destination
        if classification.is_compressed:
            destination = decoded_name(destination, classification.kind)
        result.destination = destination

        try:
            with reader:
                dest = self._prepare(destination, track_sources=True)
                with open(dest, "wb") as out:
                    stats = self.redactor.filter_stream(reader, out, source=candidate.source)
            os.utime(dest, ns=(candidate.atime_ns or candidate.mtime_ns, candidate.mtime_ns))
        except DECODE_ERRORS as e:
            result.status = TargetStatus.FAILED
            result.reason = f"read or write error: {e}"
            log.warning(f"{candidate.source}: {result.reason}", category=category)
            return result

        budget.consume(candidate.size)
        result.status = TargetStatus.WRITTEN
        result.bytes_read = stats.bytes_read
        result.bytes_written = stats.bytes_written
        result.redactions = stats.redactions
        log.debug(f"Collected {candidate.source} -> {destination}", category=category)
        return result

    def record_skipped(self, source: str, detected_type: str) -> None:
        """Append an entry to the skipped_files manifest."""
        with open(self.manifest_path, "a", encoding="utf-8") as f:
            f.write(f"{source}: unknown type {detected_type}\n")

    def restore_directory_times(self) -> None:
        """Give created subdirectories the mtimes of their source directories.

        Must run after the last write, deepest directories first, because
        populating a directory updates its own mtime.
        """
        for dest_dir in sorted(self._source_dirs, key=lambda p: len(p.parts), reverse=True):
            source_dir = self._source_dirs[dest_dir]
            try:
                st = source_dir.stat()
                os.utime(dest_dir, ns=(st.st_atime_ns, st.st_mtime_ns))
            except OSError as e:
                log.debug(f"Cannot restore time of {dest_dir}: {e}")

    def _prepare(self, destination: str, track_sources: bool = False) -> Path:
        """Create parent directories for a staging-relative destination."""
        rel = PurePosixPath(destination)
        dest = self.staging.joinpath(*rel.parts)
        dest.parent.mkdir(parents=True, exist_ok=True)

        if track_sources:
            parts = rel.parts[:-1]
            for depth in range(1, len(parts) + 1):
                dest_dir = self.staging.joinpath(*parts[:depth])
                self._source_dirs.setdefault(dest_dir, self.system_root.joinpath(*parts[:depth]))
        return dest
