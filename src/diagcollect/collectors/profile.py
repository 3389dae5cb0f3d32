"""Collection profile loader for YAML profile definitions.

Loads a profile from a file (or the built-in default) and validates it
against the Profile model schema.
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from diagcollect.core.errors import DiagError
from diagcollect.models.error import ErrorCode
from diagcollect.models.profile import Profile

BUILTIN_PROFILE = Path(__file__).parent.parent / "profiles" / "default.yaml"


class ProfileNotFoundError(DiagError):
    """Raised when a profile file cannot be found."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile '{path}' not found",
            remediation="Pass an existing YAML file with --profile or omit it to use the built-in profile",
            retryable=False,
            context={"path": str(path)},
        )


class ProfileValidationError(DiagError):
    """Raised when a profile fails validation."""

    def __init__(self, path: Path, errors: list[str]) -> None:
        super().__init__(
            code=ErrorCode.PROFILE_VALIDATION_ERROR,
            message=f"Profile '{path}' failed validation",
            remediation="Fix the validation errors and try again",
            retryable=False,
            context={"path": str(path), "errors": errors},
        )


def load_profile(path: Path | None = None) -> Profile:
    """Load a collection profile.

    Args:
        path: Profile YAML file; the built-in default when None

    Returns:
        Validated Profile

    Raises:
        ProfileNotFoundError: If the file does not exist
        ProfileValidationError: If the document is not a valid profile
    """
    path = Path(path) if path is not None else BUILTIN_PROFILE
    if not path.is_file():
        raise ProfileNotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ProfileValidationError(path, [f"Invalid YAML: {e}"]) from e

    if not isinstance(data, dict):
        raise ProfileValidationError(path, ["Profile must be a YAML mapping"])

    try:
        return Profile.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ProfileValidationError(path, errors) from e
