"""Staging directory lifecycle, archiving and upload hand-off."""

from diagcollect.evidence.archive import compute_file_hash, create_archive
from diagcollect.evidence.staging import StagingDirectory
from diagcollect.evidence.upload import run_upload

__all__ = [
    "StagingDirectory",
    "compute_file_hash",
    "create_archive",
    "run_upload",
]
