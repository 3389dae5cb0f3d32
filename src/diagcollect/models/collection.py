"""Collection target, per-target result and run report models."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import PurePosixPath
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class TargetKind(str, Enum):
    """Kind of unit of collection work."""

    COMMAND = "command"
    FILE = "file"


class TargetStatus(str, Enum):
    """Target lifecycle: pending -> running -> written | skipped | failed."""

    PENDING = "pending"
    RUNNING = "running"
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


class CommandTarget(BaseModel):
    """A shell command whose combined output is collected."""

    command: str = Field(..., min_length=1, description="Shell command line")
    destination: str = Field(
        ...,
        min_length=1,
        description="Destination name relative to the staging root",
    )

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("destination")
    @classmethod
    def _relative_destination(cls, value: str) -> str:
        path = PurePosixPath(value)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"destination must be a relative path inside the staging root: {value}")
        return value


@dataclass(frozen=True)
class FileCandidate:
    """One eligible file produced by the collection walker."""

    source: str  # absolute path on the host, relative to the system root
    real_path: str  # path actually opened for reading
    size: int
    mtime_ns: int
    atime_ns: int = 0
    is_symlink: bool = False
    skipped_for_size: bool = False

    @property
    def destination(self) -> str:
        """Staging-relative destination mirroring the original path."""
        return self.source.lstrip("/")


class TargetResult(BaseModel):
    """Outcome of processing a single target."""

    kind: TargetKind
    source: str = Field(..., description="Command line or source path")
    destination: str | None = Field(default=None, description="Staging-relative output path")
    category: str | None = None
    status: TargetStatus = TargetStatus.PENDING
    reason: str | None = Field(default=None, description="Why the target was skipped or failed")
    detected_type: str | None = Field(default=None, description="MIME-equivalent content type")
    exit_code: int | None = None
    bytes_read: int = Field(default=0, ge=0)
    bytes_written: int = Field(default=0, ge=0)
    redactions: int = Field(default=0, ge=0)


class CollectionReport(BaseModel):
    """Summary of one collection run."""

    run_id: UUID = Field(default_factory=uuid4)
    hostname: str
    staging_path: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    results: list[TargetResult] = Field(default_factory=list)
    archive_path: str | None = None
    archive_sha256: str | None = None
    uploaded: bool = False

    def add(self, result: TargetResult) -> None:
        """Record a target result."""
        self.results.append(result)

    def count(self, status: TargetStatus) -> int:
        """Number of targets that ended in a status."""
        return sum(1 for r in self.results if r.status == status)

    def totals(self) -> dict[str, int]:
        """Totals per terminal status plus bytes written."""
        return {
            "written": self.count(TargetStatus.WRITTEN),
            "skipped": self.count(TargetStatus.SKIPPED),
            "failed": self.count(TargetStatus.FAILED),
            "bytes_written": sum(r.bytes_written for r in self.results),
            "redactions": sum(r.redactions for r in self.results),
        }

    def summary(self) -> dict:
        """JSON-serializable summary for CLI output."""
        data = self.model_dump(mode="json", exclude={"results"})
        data["totals"] = self.totals()
        data["skipped"] = [
            {"source": r.source, "reason": r.reason}
            for r in self.results
            if r.status == TargetStatus.SKIPPED
        ]
        data["failed"] = [
            {"source": r.source, "reason": r.reason}
            for r in self.results
            if r.status == TargetStatus.FAILED
        ]
        return data
