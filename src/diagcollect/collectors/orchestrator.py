"""Collection run orchestration.

Runs the command targets of a profile, then every file category with its
own size budget, and hands the finished staging directory to archiving and
upload. Everything runs sequentially in the calling thread.
"""

import platform
from datetime import UTC, datetime
from pathlib import Path

from diagcollect.collectors.budget import SizeBudget
from diagcollect.collectors.walker import CollectionWalker
from diagcollect.collectors.writer import ArtifactWriter
from diagcollect.content.redaction import RedactionFilter
from diagcollect.core import logging as log
from diagcollect.core.errors import ArchiveError, UploadError
from diagcollect.core.logging import ProgressReporter
from diagcollect.evidence.archive import create_archive
from diagcollect.evidence.staging import StagingDirectory, exit_on_signals
from diagcollect.evidence.upload import run_upload
from diagcollect.models.collection import CollectionReport, TargetStatus
from diagcollect.models.config import CollectionConfig
from diagcollect.models.profile import Profile

REPORT_NAME = "collection_report.json"


class Collector:
    """Runs one collection from a profile and a configuration."""

    def __init__(
        self,
        config: CollectionConfig,
        profile: Profile,
        redactor: RedactionFilter | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            config: Run configuration
            profile: Command and file targets to collect
            redactor: Filter to apply (built from config when omitted)
        """
        self.config = config
        self.profile = profile
        self.redactor = redactor or RedactionFilter(reveal=config.reveal_filtered)

    def run(self) -> CollectionReport:
        """Collect into a fresh staging directory, then archive and upload.

        The staging directory is removed at the end when archiving is on and
        raw data was not requested, including when the run is interrupted.
        It is kept if archiving itself failed.

        Raises:
            StagingDirectoryError: If the staging directory cannot be created
        """
        staging = StagingDirectory(
            self.config.staging_path,
            remove_on_exit=self.config.archive and not self.config.keep_raw,
        )
        with exit_on_signals(), staging:
            report = self.collect(staging.path)
            if self.config.archive:
                try:
                    self._archive(report, staging.path)
                except ArchiveError as e:
                    log.error(str(e))
                    staging.remove_on_exit = False
        return report

    def collect(self, staging_path: Path) -> CollectionReport:
        """Populate an existing staging directory and write the run report."""
        report = CollectionReport(
            hostname=platform.node() or "localhost",
            staging_path=str(staging_path),
        )
        writer = ArtifactWriter(staging_path, self.redactor, self.config.system_root)

        progress = ProgressReporter(
            total=len(self.profile.commands), description="Commands", unit="commands"
        )
        for target in self.profile.commands:
            log.debug(f"Running: {target.command}")
            report.add(writer.write_command(target))
            progress.update()
        progress.finish()

        for category, file_category in self.profile.files.items():
            budget = SizeBudget(self.profile.budget_for(category, self.config.max_size_mb))
            walker = CollectionWalker(
                file_category.paths,
                budget,
                system_root=self.config.system_root,
                category=category,
            )
            written = skipped = 0
            for candidate in walker.walk():
                result = writer.write_file(candidate, budget, category=category)
                report.add(result)
                if result.status == TargetStatus.WRITTEN:
                    written += 1
                elif result.status == TargetStatus.SKIPPED:
                    skipped += 1
            log.info(
                f"{category}: {written} files collected, {skipped} skipped",
                bytes=budget.consumed,
            )

        writer.restore_directory_times()
        report.completed_at = datetime.now(UTC)
        self._write_report(report, staging_path)
        return report

    def _archive(self, report: CollectionReport, staging_path: Path) -> None:
        archive, digest = create_archive(staging_path)
        report.archive_path = str(archive)
        report.archive_sha256 = digest

        if self.config.upload_command:
            try:
                run_upload(archive, self.config.upload_command)
                report.uploaded = True
            except UploadError as e:
                log.error(str(e), **(e.error.context or {}))

    def _write_report(self, report: CollectionReport, staging_path: Path) -> None:
        with open(staging_path / REPORT_NAME, "w", encoding="utf-8") as f:
            f.write(report.model_dump_json(indent=2))
