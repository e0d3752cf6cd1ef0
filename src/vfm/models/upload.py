"""Upload task and result models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class UploadTask(BaseModel):
    """One local file queued for upload. Consumed exactly once."""

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    size: int
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> UploadTask:
        """Build a task from a path, stat-ing it for the size.

        A path that cannot be stat-ed gets size 0; validation inside the
        upload reports the real problem.
        """
        resolved = Path(path).expanduser().absolute()
        try:
            size = resolved.stat().st_size
        except OSError:
            size = 0
        return cls(
            path=resolved,
            name=resolved.name,
            size=size,
            extension=resolved.suffix.lower(),
        )


class UploadResult(BaseModel):
    """Outcome of one UploadTask. Never mutated after creation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    file_name: str
    url: str | None = None
    success: bool
    error: Exception | None = None

    @model_validator(mode="after")
    def _check_outcome(self) -> UploadResult:
        if self.success and (self.url is None or self.error is not None):
            raise ValueError("successful result requires url and no error")
        if not self.success and (self.error is None or self.url is not None):
            raise ValueError("failed result requires error and no url")
        return self

    @classmethod
    def ok(cls, file_name: str, url: str) -> UploadResult:
        return cls(file_name=file_name, url=url, success=True)

    @classmethod
    def failed(cls, file_name: str, error: Exception) -> UploadResult:
        return cls(file_name=file_name, success=False, error=error)

    @property
    def error_text(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error)


class BatchSummary(BaseModel):
    """Aggregated results of a batch run."""

    model_config = ConfigDict(frozen=True)

    results: list[UploadResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failures(self) -> list[UploadResult]:
        return [r for r in self.results if not r.success]


class PreflightReport(BaseModel):
    """Which candidate names already exist at the destination."""

    model_config = ConfigDict(frozen=True)

    checked: bool
    existing: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_existing(self) -> bool:
        return bool(self.existing)
