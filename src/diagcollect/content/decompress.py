"""Streaming decompression of collected files.

The encoding is taken from the content, not the file name. Compressed
payloads are only accepted when the decoded content is itself text,
so an archive such as ``.tar.gz`` is reported as skipped rather than
written as filtered binary.
"""

import bz2
import gzip
import lzma
import zlib
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from diagcollect.content.classifier import (
    SNIFF_SIZE,
    Classification,
    ContentKind,
    classify_bytes,
    classify_file,
)
from diagcollect.core.errors import UnsupportedContentError

_OPENERS: dict[ContentKind, Callable[[str], BinaryIO]] = {
    ContentKind.GZIP: lambda path: gzip.open(path, "rb"),
    ContentKind.BZIP2: lambda path: bz2.open(path, "rb"),
    ContentKind.XZ: lambda path: lzma.open(path, "rb"),
}

COMPRESSION_SUFFIXES: dict[ContentKind, tuple[str, ...]] = {
    ContentKind.GZIP: (".gz", ".gzip"),
    ContentKind.BZIP2: (".bz2", ".bz"),
    ContentKind.XZ: (".xz", ".lzma"),
}

# Errors raised by the decompressors on truncated or corrupt input.
DECODE_ERRORS = (EOFError, zlib.error, lzma.LZMAError, OSError)


def decoded_name(name: str, kind: ContentKind) -> str:
    """Strip the compression suffix matching ``kind`` from a file name.

    Names without a matching suffix are returned unchanged, e.g. a gzip
    stream stored as ``app.log`` keeps its name.
    """
    lower = name.lower()
    for suffix in COMPRESSION_SUFFIXES.get(kind, ()):
        if lower.endswith(suffix) and len(name) > len(suffix) and not name[: -len(suffix)].endswith("/"):
            return name[: -len(suffix)]
    return name


def open_decoded(path: Path | str) -> tuple[Classification, BinaryIO]:
    """Open a file for reading its decoded bytes.

    Args:
        path: File to open

    Returns:
        Tuple of (classification of the file, binary reader of decoded content)

    Raises:
        UnsupportedContentError: If the content is neither text nor a
            supported compression of text
        OSError: If the file cannot be read
    """
    path = str(path)
    classification = classify_file(path)

    if classification.is_text:
        return classification, open(path, "rb")

    if not classification.is_compressed:
        raise UnsupportedContentError(path, classification.mime)

    opener = _OPENERS[classification.kind]
    try:
        with opener(path) as probe:
            sample = probe.read(SNIFF_SIZE)
    except DECODE_ERRORS as e:
        raise UnsupportedContentError(path, f"corrupt {classification.mime} ({e})") from e

    inner = classify_bytes(sample)
    if not inner.is_text:
        raise UnsupportedContentError(path, f"{inner.mime} ({classification.mime})")

    return classification, opener(path)
