"""Staging directory with guaranteed cleanup.

The staging directory is created on entry. On exit it is either kept or
removed, on every exit path including exceptions and SIGTERM/SIGHUP.
"""

import shutil
import signal
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from diagcollect.core import logging as log
from diagcollect.core.errors import StagingDirectoryError

TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP)


@contextmanager
def exit_on_signals() -> Generator[None, None, None]:
    """Turn termination signals into SystemExit so cleanup blocks run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _terminate(signum, frame):
        raise SystemExit(128 + signum)

    previous = {sig: signal.signal(sig, _terminate) for sig in TERMINATION_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


class StagingDirectory:
    """Scoped staging root for one collection run."""

    def __init__(self, path: Path, remove_on_exit: bool = False) -> None:
        """Initialize the staging directory.

        Args:
            path: Directory to create; must not exist yet
            remove_on_exit: Delete the tree when the scope ends
        """
        self.path = Path(path)
        self.remove_on_exit = remove_on_exit

    def create(self) -> Path:
        """Create the directory.

        Raises:
            StagingDirectoryError: If it exists or cannot be created
        """
        try:
            self.path.mkdir(parents=True)
            probe = self.path / ".write-test"
            probe.touch()
            probe.unlink()
        except FileExistsError as e:
            raise StagingDirectoryError(str(self.path), "already exists") from e
        except OSError as e:
            raise StagingDirectoryError(str(self.path), e.strerror or str(e)) from e
        log.debug(f"Created staging directory {self.path}")
        return self.path

    def cleanup(self) -> None:
        """Remove the tree if requested, otherwise leave it in place."""
        if not self.remove_on_exit:
            log.info(f"Staging directory kept at {self.path}")
            return
        shutil.rmtree(self.path, ignore_errors=True)
        log.debug(f"Removed staging directory {self.path}")

    def __enter__(self) -> "StagingDirectory":
        self.create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()
