"""Content handling: classification, decompression and redaction."""

from diagcollect.content.classifier import Classification, ContentKind, classify_file
from diagcollect.content.decompress import decoded_name, open_decoded
from diagcollect.content.redaction import REDACTION_MARKER, RedactionFilter

__all__ = [
    "Classification",
    "ContentKind",
    "REDACTION_MARKER",
    "RedactionFilter",
    "classify_file",
    "decoded_name",
    "open_decoded",
]
