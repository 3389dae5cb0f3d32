"""Collection profile models.

A profile is the Orchestrator's input: the command targets and the
per-category glob lists to collect.
"""

from pydantic import BaseModel, Field, field_validator

from diagcollect.models.collection import CommandTarget


class FileCategory(BaseModel):
    """A logical group of glob patterns sharing one size budget."""

    paths: list[str] = Field(default_factory=list, description="Absolute glob patterns")
    max_size_mb: int | None = Field(
        default=None,
        description="Budget override for this category; falls back to the run setting",
    )

    model_config = {"extra": "forbid"}

    @field_validator("paths")
    @classmethod
    def _absolute_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            if not pattern.startswith("/"):
                raise ValueError(f"path pattern must be absolute: {pattern}")
        return value


class Profile(BaseModel):
    """Named set of command and file targets."""

    name: str = Field(..., min_length=1)
    description: str = ""
    commands: list[CommandTarget] = Field(default_factory=list)
    files: dict[str, FileCategory] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}

    def budget_for(self, category: str, default_mb: int) -> int:
        """Budget maximum in bytes for a category."""
        override = self.files[category].max_size_mb
        size_mb = default_mb if override is None else override
        return size_mb * 1024 * 1024

    def without_budget_overrides(self) -> "Profile":
        """Copy where every category uses the run's budget setting."""
        files = {
            name: category.model_copy(update={"max_size_mb": None})
            for name, category in self.files.items()
        }
        return self.model_copy(update={"files": files})
