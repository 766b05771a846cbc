"""Pydantic v2 schemas for generation requests, jobs, and run outcomes."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from santa_video.errors import ErrorKind


class JobStatus(str, enum.Enum):
    """Normalized job lifecycle statuses."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self not in (JobStatus.QUEUED, JobStatus.RUNNING)


# Forward-only ordering; all terminal statuses share the top rank.
_STATUS_RANK = {
    JobStatus.QUEUED: 0,
    JobStatus.RUNNING: 1,
    JobStatus.SUCCEEDED: 2,
    JobStatus.FAILED: 2,
    JobStatus.CANCELLED: 2,
    JobStatus.TIMED_OUT: 2,
}


class SourceImage(BaseModel):
    """Image bytes passed through to the provider untouched."""

    file_name: str
    data: bytes
    mime_type: str = "image/jpeg"

    model_config = {"frozen": True}


class CropBounds(BaseModel):
    """Fractional crop rectangle; the default covers the whole frame."""

    left_fraction: float = Field(0.0, ge=0.0, le=1.0)
    top_fraction: float = Field(0.0, ge=0.0, le=1.0)
    right_fraction: float = Field(1.0, ge=0.0, le=1.0)
    bottom_fraction: float = Field(1.0, ge=0.0, le=1.0)

    model_config = {"frozen": True}


class InpaintItem(BaseModel):
    """Pins a video frame to the uploaded source image."""

    frame_index: int = Field(0, ge=0)
    type: str = "image"
    file_name: str
    crop_bounds: CropBounds = Field(default_factory=CropBounds)

    model_config = {"frozen": True}


class GenerationRequest(BaseModel):
    """Everything one submission needs. Built fresh per invocation."""

    prompt: str
    image: SourceImage
    model: str
    width: int = Field(1920, gt=0)
    height: int = Field(1080, gt=0)
    duration: int = Field(10, gt=0)
    n_variants: int = Field(1, ge=1)
    aspect_ratio: str = "16:9"
    quality: str = "high"
    include_audio: bool = True
    resolution: str | None = None
    inpaint_items: tuple[InpaintItem, ...] = ()

    model_config = {"frozen": True}


class GenerationResult(BaseModel):
    """One generated video; its id addresses the content download."""

    id: str

    model_config = {"frozen": True}


class Job(BaseModel):
    """Remote job handle tracked by the poll loop."""

    id: str
    status: JobStatus = JobStatus.QUEUED
    generations: list[GenerationResult] = Field(default_factory=list)
    result_url: str | None = None
    error: Any = None

    def advance(self, status: JobStatus) -> bool:
        """Move to ``status`` if it is forward progress. Returns True on change.

        Terminal jobs never change; a stale non-terminal report is ignored.
        """
        if self.status.is_terminal:
            return False
        if _STATUS_RANK[status] < _STATUS_RANK[self.status]:
            return False
        changed = status is not self.status
        self.status = status
        return changed


class SubmissionResult(BaseModel):
    """What the submission POST yielded: a job to poll or an inline URL."""

    job: Job | None = None
    result_url: str | None = None


@dataclass
class GenerationOutcome:
    """Explicit result of one end-to-end run."""

    ok: bool
    job_id: str | None = None
    status: JobStatus | None = None
    output_path: Path | None = None
    size_bytes: int = 0
    error_kind: ErrorKind | None = None
    message: str = ""

    @property
    def size_mb(self) -> float:
        return self.size_bytes / 1024 / 1024
