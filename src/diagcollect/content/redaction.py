"""Secret redaction for collected text.

A single compiled alternation of case-sensitive keywords is applied line by
line. For every ``<keyword><sep><value>`` match the keyword and separator
are kept and the value is replaced by a fixed marker, so a reader can tell
that a secret was present without being able to recover it.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import BinaryIO

from diagcollect.core import logging as log

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "password",
    "PASSWORD",
    "default_password",
    "oauth_consumer_key",
    "secret",
    "token",
    "keystorePass",
    "truststorePass",
    "storepass",
)

REDACTION_MARKER = "+FILTERED+"


@dataclass
class FilterStats:
    """Counters for one filtered stream."""

    bytes_read: int = 0
    bytes_written: int = 0
    redactions: int = 0


class RedactionFilter:
    """Replaces secret values that follow known keywords."""

    def __init__(
        self,
        keywords: Iterable[str] = DEFAULT_KEYWORDS,
        marker: str = REDACTION_MARKER,
        reveal: bool = False,
    ) -> None:
        """Compile the keyword alternation.

        Args:
            keywords: Case-sensitive keywords that introduce a secret
            marker: Replacement for the secret value
            reveal: Echo every line that had a redaction to stderr
        """
        words = sorted(set(keywords), key=len, reverse=True)
        if not words:
            raise ValueError("at least one keyword is required")
        alternation = b"|".join(re.escape(w.encode()) for w in words)
        # keyword, optional quote and blanks, ':' or '=', blanks, then the value
        self._pattern = re.compile(
            rb"(" + alternation + rb")([\"']?[ \t]*[:=][ \t]*)([^\s]+)"
        )
        self._marker = marker.encode()
        self.marker = marker
        self.reveal = reveal

    def filter_line(self, line: bytes) -> tuple[bytes, int]:
        """Redact one line of raw bytes.

        Returns:
            Tuple of (filtered line, number of values replaced)
        """
        count = 0

        def replace(match: re.Match[bytes]) -> bytes:
            nonlocal count
            # already redacted
            if match.group(3) == self._marker:
                return match.group(0)
            count += 1
            return match.group(1) + match.group(2) + self._marker

        return self._pattern.sub(replace, line), count

    def filter_text(self, text: str) -> str:
        """Redact a str buffer."""
        filtered, _ = self.filter_line(text.encode("utf-8", "surrogateescape"))
        return filtered.decode("utf-8", "surrogateescape")

    def filter_stream(
        self,
        lines: Iterable[bytes],
        out: BinaryIO,
        source: str = "<stream>",
    ) -> FilterStats:
        """Filter an iterable of byte lines (e.g. a binary file) into ``out``.

        Args:
            lines: Source lines, newline terminators included
            out: Binary writable destination
            source: Name prefixed to revealed lines

        Returns:
            FilterStats for the stream
        """
        stats = FilterStats()
        for line in lines:
            stats.bytes_read += len(line)
            filtered, count = self.filter_line(line)
            if count:
                stats.redactions += count
                if self.reveal:
                    log.reveal(source, line.decode("utf-8", "replace").rstrip("\r\n"))
            out.write(filtered)
            stats.bytes_written += len(filtered)
        return stats
