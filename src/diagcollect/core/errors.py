"""Structured error handling for diagcollect."""

import sys
from typing import Any, NoReturn

from diagcollect.models.error import ErrorCode, StructuredError

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_ARGS = 2
EXIT_STAGING_FAILED = 5


class DiagError(Exception):
    """Base exception for diagcollect errors.

    Wraps a StructuredError for consistent error handling.
    """

    exit_code = EXIT_ERROR

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured(self) -> StructuredError:
        """Convert to StructuredError."""
        return self.error

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class UnsupportedContentError(DiagError):
    """Content type that can be neither filtered nor decompressed."""

    def __init__(self, path: str, detected_type: str):
        self.path = path
        self.detected_type = detected_type
        super().__init__(
            code=ErrorCode.UNSUPPORTED_CONTENT,
            message=f"{path}: unknown type {detected_type}",
            remediation="The file is listed in skipped_files; copy it manually if needed",
            retryable=False,
            context={"path": path, "detected_type": detected_type},
        )


class CommandExecutionError(DiagError):
    """A collected command exited nonzero."""

    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.returncode = exit_code
        super().__init__(
            code=ErrorCode.COMMAND_FAILED,
            message=f"Command exited with status {exit_code}: {command}",
            remediation="The captured output was still collected; inspect it for the cause",
            retryable=True,
            context={"command": command, "exit_code": exit_code},
        )


class StagingDirectoryError(DiagError):
    """The staging root cannot be created or written."""

    exit_code = EXIT_STAGING_FAILED

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=ErrorCode.STAGING_DIRECTORY_ERROR,
            message=f"Cannot use staging directory {path}: {reason}",
            remediation="Choose a writable --output-dir with enough free space",
            retryable=True,
            context={"path": path},
        )


class ConfigValidationError(DiagError):
    """Configuration file or options failed validation."""

    exit_code = EXIT_INVALID_ARGS

    def __init__(self, source: str, errors: list[str]):
        super().__init__(
            code=ErrorCode.CONFIG_VALIDATION_ERROR,
            message=f"Configuration '{source}' failed validation",
            remediation="Fix the listed settings and try again",
            retryable=False,
            context={"source": source, "errors": errors},
        )


class ArchiveError(DiagError):
    """Packing the staging directory failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            code=ErrorCode.ARCHIVE_ERROR,
            message=f"Cannot create archive {path}: {reason}",
            remediation="Re-run with --keep-raw to retain the staging directory",
            retryable=True,
            context={"path": path},
        )


class UploadError(DiagError):
    """The upload command failed."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            code=ErrorCode.UPLOAD_ERROR,
            message=f"Upload failed: {reason}",
            remediation="The archive is kept locally; upload it manually",
            retryable=True,
            context={"command": command},
        )


def handle_error(error: DiagError | Exception, exit_code: int | None = None) -> NoReturn:
    """Handle an error by outputting it and exiting.

    Args:
        error: The error to handle
        exit_code: Exit code to use (defaults to the error's own code)
    """
    from diagcollect.cli.output import output_error

    if isinstance(error, DiagError):
        output_error(error.to_structured())
        code = exit_code if exit_code is not None else error.exit_code
    else:
        structured = StructuredError(
            code=ErrorCode.INTERNAL_ERROR,
            message=str(error),
            remediation="This is an unexpected error. Please report it.",
            retryable=False,
            context={"type": type(error).__name__},
        )
        output_error(structured)
        code = exit_code if exit_code is not None else EXIT_ERROR

    sys.exit(code)
