"""Run configuration model."""

import platform
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field


def default_staging_name() -> str:
    """Staging directory name: diagcollect-<host>-<timestamp>."""
    host = platform.node() or "localhost"
    return f"diagcollect-{host}-{datetime.now().strftime('%Y%m%d-%H%M%S')}"


class CollectionConfig(BaseModel):
    """Settings for one collection run.

    Replaces process-wide flags: every component receives the values it
    needs from this object.
    """

    output_dir: Path = Field(default=Path("."), description="Parent of the staging directory")
    staging_name: str = Field(
        default_factory=default_staging_name,
        min_length=1,
        pattern=r"^[^/]+$",
        description="Name of the staging directory under output_dir",
    )
    system_root: Path = Field(
        default=Path("/"),
        description="Root the profile paths are resolved against (e.g. a mounted image)",
    )
    max_size_mb: int = Field(
        default=150,
        description="Per-category size budget in MB; 0 or negative means unlimited",
    )
    reveal_filtered: bool = Field(
        default=False,
        description="Echo every redacted line to stderr for audit",
    )
    archive: bool = Field(default=True, description="Pack the staging directory as tar.gz")
    keep_raw: bool = Field(
        default=False,
        description="Keep the staging directory after archiving",
    )
    upload_command: str | None = Field(
        default=None,
        description="Shell command run on the finished archive; {archive} is substituted",
    )
    profile: Path | None = Field(
        default=None,
        description="Collection profile YAML (built-in default when unset)",
    )

    model_config = {"extra": "forbid"}

    @property
    def staging_path(self) -> Path:
        """Absolute path of the staging directory."""
        return (self.output_dir / self.staging_name).absolute()

    @property
    def max_size_bytes(self) -> int:
        """Budget maximum in bytes (0 or negative = unlimited)."""
        return self.max_size_mb * 1024 * 1024
