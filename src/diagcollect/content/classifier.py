"""Content classification by magic bytes.

File extensions are not trusted: a ``.gz`` file holding plain text is
classified as text and a compressed log without a suffix is still
recognised as compressed.
"""

import codecs
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

SNIFF_SIZE = 8192

GZIP_MAGIC = b"\x1f\x8b"
BZIP2_MAGIC = b"BZh"
XZ_MAGIC = b"\xfd7zXZ\x00"

# Known binary signatures, used only to name the type in skipped_files.
BINARY_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x7fELF", "application/x-executable"),
    (0, b"PK\x03\x04", "application/zip"),
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF8", "image/gif"),
    (0, b"%PDF", "application/pdf"),
    (0, b"SQLite format 3\x00", "application/vnd.sqlite3"),
    (0, b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (0, b"\x28\xb5\x2f\xfd", "application/zstd"),
    (0, b"\x04\x22\x4d\x18", "application/x-lz4"),
    (257, b"ustar", "application/x-tar"),
)

# Control characters that still occur in ordinary text files.
_TEXT_CONTROLS = frozenset(b"\t\n\r\f\b\v\x1b")
_MAX_CONTROL_RATIO = 0.05


class ContentKind(str, Enum):
    """Content categories the collector distinguishes."""

    PLAIN_TEXT = "plain_text"
    XML = "xml"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    XZ = "xz"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Classification:
    """Detected category plus a MIME-equivalent type name."""

    kind: ContentKind
    mime: str

    @property
    def is_text(self) -> bool:
        """Whether the content can be filtered directly."""
        return self.kind in (ContentKind.PLAIN_TEXT, ContentKind.XML)

    @property
    def is_compressed(self) -> bool:
        """Whether the content has a supported compression wrapper."""
        return self.kind in (ContentKind.GZIP, ContentKind.BZIP2, ContentKind.XZ)


PLAIN_TEXT = Classification(ContentKind.PLAIN_TEXT, "text/plain")
XML = Classification(ContentKind.XML, "text/xml")
GZIP = Classification(ContentKind.GZIP, "application/gzip")
BZIP2 = Classification(ContentKind.BZIP2, "application/x-bzip2")
XZ = Classification(ContentKind.XZ, "application/x-xz")


def looks_like_text(sample: bytes) -> bool:
    """Heuristic text check on a leading sample.

    Text has no NUL bytes and very few control characters. High bytes are
    allowed so that both UTF-8 and legacy 8-bit encodings qualify.
    """
    if not sample:
        return True
    if b"\x00" in sample:
        return False

    controls = sum(1 for b in sample if b < 0x20 and b not in _TEXT_CONTROLS)
    return controls / len(sample) <= _MAX_CONTROL_RATIO


def classify_bytes(sample: bytes) -> Classification:
    """Classify content from its first bytes."""
    if sample.startswith(GZIP_MAGIC):
        return GZIP
    if sample.startswith(BZIP2_MAGIC) and sample[3:4].isdigit():
        return BZIP2
    if sample.startswith(XZ_MAGIC):
        return XZ

    for offset, signature, mime in BINARY_SIGNATURES:
        if sample[offset:offset + len(signature)] == signature:
            return Classification(ContentKind.UNKNOWN, mime)

    if looks_like_text(sample):
        head = sample.removeprefix(codecs.BOM_UTF8).lstrip()
        if head.startswith(b"<?xml"):
            return XML
        return PLAIN_TEXT

    return Classification(ContentKind.UNKNOWN, "application/octet-stream")


def classify_file(path: Path | str) -> Classification:
    """Classify a file by reading its leading bytes.

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, "rb") as f:
        sample = f.read(SNIFF_SIZE)
    return classify_bytes(sample)
