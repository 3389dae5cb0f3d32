"""Pydantic models for diagcollect."""

from diagcollect.models.collection import (
    CollectionReport,
    CommandTarget,
    FileCandidate,
    TargetKind,
    TargetResult,
    TargetStatus,
)
from diagcollect.models.config import CollectionConfig
from diagcollect.models.error import ErrorCode, StructuredError
from diagcollect.models.profile import FileCategory, Profile

__all__ = [
    "CollectionConfig",
    "CollectionReport",
    "CommandTarget",
    "ErrorCode",
    "FileCandidate",
    "FileCategory",
    "Profile",
    "StructuredError",
    "TargetKind",
    "TargetResult",
    "TargetStatus",
]
