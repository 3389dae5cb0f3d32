"""Newest-first file selection under a size budget.

Patterns are absolute host paths resolved against a system root, which is
``/`` for a live host or the mount point of an offline image.
"""

import dataclasses
import errno
import glob
import os
import stat
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

from diagcollect.collectors.budget import SizeBudget
from diagcollect.core import logging as log
from diagcollect.models.collection import FileCandidate

MAX_LINK_HOPS = 40


class CollectionWalker:
    """Enumerates eligible files for a set of glob patterns.

    Eligible files are regular files, or symlinks to regular files, that
    are non-empty and readable. Symlinks keep their own entry and their
    resolved target is added as a separate entry.
    """

    def __init__(
        self,
        patterns: Iterable[str],
        budget: SizeBudget,
        system_root: Path = Path("/"),
        category: str = "files",
    ) -> None:
        """Initialize the walker.

        Args:
            patterns: Absolute glob patterns (``**`` allowed)
            budget: Budget shared by every candidate of this walk
            system_root: Root the patterns are resolved against
            category: Profile category name, used in log context
        """
        self.patterns = list(patterns)
        self.budget = budget
        self.system_root = Path(os.path.realpath(system_root))
        self.category = category

    def walk(self) -> Iterator[FileCandidate]:
        """Yield candidates newest first, flagging those over budget.

        Every call enumerates afresh. The budget is checked lazily when each
        candidate is pulled, so the consumer must charge admitted files
        before asking for the next one. Once the budget is exceeded the
        walk carries on so every remaining candidate is still reported.
        """
        for candidate in self.enumerate():
            if self.budget.exceeded:
                log.info(
                    f"{candidate.source}: skipped due to size",
                    category=self.category,
                    size=candidate.size,
                )
                yield dataclasses.replace(candidate, skipped_for_size=True)
                continue
            yield candidate

    def enumerate(self) -> list[FileCandidate]:
        """All eligible candidates, ordered by mtime descending then path."""
        found: dict[str, FileCandidate] = {}
        for pattern in self.patterns:
            host_pattern = str(self.system_root / pattern.lstrip("/"))
            for match in sorted(glob.glob(host_pattern, recursive=True)):
                self._add_path(Path(match), found)
        return sorted(found.values(), key=lambda c: (-c.mtime_ns, c.source))

    def _add_path(self, path: Path, found: dict[str, FileCandidate]) -> None:
        if path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs.sort()
                for name in sorted(files):
                    self._add_file(Path(root) / name, found)
        else:
            self._add_file(path, found)

    def _add_file(self, path: Path, found: dict[str, FileCandidate]) -> None:
        source = self._host_path(path)
        if source is None or source in found:
            return

        try:
            is_link = stat.S_ISLNK(path.lstat().st_mode)
            real_path = self._resolve(path)
            st = real_path.stat()
        except OSError as e:
            log.debug(f"{source}: excluded, {e.strerror or e}", category=self.category)
            return

        if not stat.S_ISREG(st.st_mode):
            log.debug(f"{source}: excluded, not a regular file", category=self.category)
            return
        if st.st_size == 0:
            log.debug(f"{source}: excluded, empty", category=self.category)
            return
        if not os.access(real_path, os.R_OK):
            log.debug(f"{source}: excluded, permission denied", category=self.category)
            return

        found[source] = FileCandidate(
            source=source,
            real_path=str(real_path),
            size=st.st_size,
            mtime_ns=st.st_mtime_ns,
            atime_ns=st.st_atime_ns,
            is_symlink=is_link,
        )

        if is_link:
            if self._host_path(real_path) is None:
                log.debug(
                    f"{source}: link target {real_path} is outside {self.system_root}",
                    category=self.category,
                )
                return
            self._add_file(real_path, found)

    def _resolve(self, path: Path) -> Path:
        """Resolve symlinks as the collected host would.

        Under a non-``/`` root, absolute link targets and ``..`` are taken
        relative to the root, so resolution never leaves it.

        Raises:
            OSError: On a link loop or an unreadable link
        """
        if self.system_root == Path("/"):
            return Path(os.path.realpath(path))

        rel = Path(os.path.abspath(path)).relative_to(self.system_root)
        pending = list(rel.parts)
        resolved = self.system_root
        hops = 0
        while pending:
            part = pending.pop(0)
            if part in ("", "."):
                continue
            if part == "..":
                if resolved != self.system_root:
                    resolved = resolved.parent
                continue
            candidate = resolved / part
            if not candidate.is_symlink():
                resolved = candidate
                continue
            hops += 1
            if hops > MAX_LINK_HOPS:
                raise OSError(errno.ELOOP, "too many levels of symbolic links", str(path))
            target = PurePosixPath(os.readlink(candidate))
            if target.is_absolute():
                resolved = self.system_root
                pending = list(target.parts[1:]) + pending
            else:
                pending = list(target.parts) + pending
        return resolved

    def _host_path(self, path: Path) -> str | None:
        """Absolute path as seen on the collected host."""
        try:
            rel = Path(os.path.abspath(path)).relative_to(self.system_root)
        except ValueError:
            return None
        return "/" + rel.as_posix() if rel.parts else None
