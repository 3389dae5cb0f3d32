"""Structured error model for diagcollect."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Structured error response format.

    All errors emitted by diagcollect follow this schema so a wrapper
    script can react to them without scraping stderr.
    """

    code: str = Field(
        ...,
        pattern=r"^[A-Z][A-Z0-9_]*$",
        description="Error code (e.g., STAGING_DIRECTORY_ERROR)",
        examples=[
            "UNSUPPORTED_CONTENT",
            "COMMAND_FAILED",
            "STAGING_DIRECTORY_ERROR",
            "PROFILE_NOT_FOUND",
            "PERMISSION_DENIED",
        ],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    remediation: str = Field(
        ...,
        description="Suggested fix or next step",
    )

    retryable: bool = Field(
        ...,
        description="Whether retry may succeed",
    )

    context: dict[str, Any] | None = Field(
        default=None,
        description="Additional context (path, command, etc.)",
    )

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Standard error codes for diagcollect."""

    UNSUPPORTED_CONTENT = "UNSUPPORTED_CONTENT"
    COMMAND_FAILED = "COMMAND_FAILED"
    STAGING_DIRECTORY_ERROR = "STAGING_DIRECTORY_ERROR"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    PROFILE_VALIDATION_ERROR = "PROFILE_VALIDATION_ERROR"
    CONFIG_VALIDATION_ERROR = "CONFIG_VALIDATION_ERROR"
    ARCHIVE_ERROR = "ARCHIVE_ERROR"
    UPLOAD_ERROR = "UPLOAD_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    IO_ERROR = "IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
