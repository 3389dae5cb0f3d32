"""Packaging of the finished staging directory."""

import hashlib
import tarfile
from pathlib import Path

from diagcollect.core import logging as log
from diagcollect.core.errors import ArchiveError


def compute_file_hash(file_path: Path) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to file

    Returns:
        Hex-encoded SHA-256 hash
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def create_archive(staging: Path) -> tuple[Path, str]:
    """Pack a staging directory as ``<staging>.tar.gz`` next to it.

    A ``<archive>.sha256`` file in sha256sum format is written alongside.

    Args:
        staging: Populated staging directory

    Returns:
        Tuple of (archive path, SHA-256 hex digest)

    Raises:
        ArchiveError: If the archive cannot be written
    """
    staging = Path(staging)
    archive = staging.with_name(staging.name + ".tar.gz")

    try:
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(staging, arcname=staging.name)
        digest = compute_file_hash(archive)
        archive.with_name(archive.name + ".sha256").write_text(
            f"{digest}  {archive.name}\n", encoding="utf-8"
        )
    except (OSError, tarfile.TarError) as e:
        archive.unlink(missing_ok=True)
        raise ArchiveError(str(archive), str(e)) from e

    log.info(f"Archive created: {archive}", sha256=digest)
    return archive, digest
