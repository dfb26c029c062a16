"""
Core data models for getlogs.

This module defines the Pydantic models passed between the tracker client,
the extractor and the batch runner.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class Step(str, Enum):
    """Pipeline steps selectable from the command line."""

    FETCH = "fetch"
    EXTRACT = "extract"
    CONVERT = "convert"
    ALL = "all"

    def includes(self, other: "Step") -> bool:
        """Whether running this step runs ``other``."""
        return self is Step.ALL or self is other


class BatchPolicy(str, Enum):
    """What to do with the remaining issues once one of them fails."""

    ABORT = "abort"
    CONTINUE = "continue"


class ProcessingStatus(str, Enum):
    """Status of a processed issue."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# Tracker Models
# =============================================================================


class Attachment(BaseModel):
    """An attachment listed on a tracker issue."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Tracker attachment ID")
    filename: str = Field(..., description="Original filename")
    content_url: str = Field(..., alias="content", description="Download URL")
    size: int = Field(0, ge=0, description="Size in bytes as reported by the tracker")
    mime_type: Optional[str] = Field(None, alias="mimeType")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Jira reports ids as strings but older servers send integers."""
        return str(v)

    @property
    def safe_filename(self) -> str:
        """Filename with any directory components removed."""
        return Path(self.filename.replace("\\", "/")).name

    @classmethod
    def from_issue_json(cls, data: Dict[str, Any]) -> List["Attachment"]:
        """Parse the ``fields.attachment`` list of an issue response."""
        fields = data.get("fields") or {}
        return [cls.model_validate(item) for item in fields.get("attachment") or []]


# =============================================================================
# Extraction Models
# =============================================================================


class ExtractionSummary(BaseModel):
    """What a successful extraction pass wrote."""

    source_dir: Path
    dest_dir: Path
    copied: List[str] = Field(default_factory=list, description="Plain files copied")
    unpacked: List[str] = Field(default_factory=list, description="Archive entries written")
    archives: List[str] = Field(default_factory=list, description="Archives opened")

    @property
    def total_files(self) -> int:
        return len(self.copied) + len(self.unpacked)


# =============================================================================
# Batch Models
# =============================================================================


class IssueResult(BaseModel):
    """Outcome of processing one issue."""

    issue_id: str
    status: ProcessingStatus = ProcessingStatus.PENDING
    error: Optional[str] = None
    downloaded: List[Path] = Field(default_factory=list)
    extraction: Optional[ExtractionSummary] = None
    pending_conversion: List[Path] = Field(default_factory=list)


class BatchReport(BaseModel):
    """Outcome of a whole batch of issues."""

    step: Step
    policy: BatchPolicy
    results: List[IssueResult] = Field(default_factory=list)

    @property
    def failed(self) -> List[IssueResult]:
        return [r for r in self.results if r.status == ProcessingStatus.FAILED]

    @property
    def succeeded(self) -> List[IssueResult]:
        return [r for r in self.results if r.status == ProcessingStatus.COMPLETED]

    @property
    def ok(self) -> bool:
        return not self.failed
