"""Hand-off of the finished archive to an operator-supplied upload command."""

import shlex
import subprocess
from pathlib import Path

from diagcollect.core import logging as log
from diagcollect.core.errors import UploadError


def build_upload_command(template: str, archive: Path) -> str:
    """Substitute the shell-quoted archive path for ``{archive}``.

    Templates without the placeholder get the path appended.
    """
    quoted = shlex.quote(str(archive))
    if "{archive}" in template:
        return template.replace("{archive}", quoted)
    return f"{template} {quoted}"


def run_upload(archive: Path, template: str) -> None:
    """Run the upload command for an archive.

    Raises:
        UploadError: If the command cannot be started or exits nonzero
    """
    command = build_upload_command(template, archive)
    log.info(f"Uploading {archive}")
    try:
        process = subprocess.run(
            command,
            shell=True,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        raise UploadError(command, str(e)) from e

    if process.returncode != 0:
        # Progress meters and other tools print arbitrary bytes
        output = process.stdout.decode("utf-8", "replace")
        tail = output.strip().splitlines()[-1:] or [""]
        raise UploadError(command, f"exit status {process.returncode} {tail[0]}".strip())
    log.info("Upload complete")
