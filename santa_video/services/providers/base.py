"""Base video provider: the submit → poll → resolve-download-URL contract."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from santa_video.config import Settings
from santa_video.errors import PollingError, SubmissionError
from santa_video.schemas import GenerationRequest, Job, JobStatus, SubmissionResult

logger = logging.getLogger(__name__)


class VideoProvider(ABC):
    """Abstract adapter for one endpoint shape of a video-generation API.

    Subclasses provide:
    - ``submit``: send the request, return a job or inline result URL
    - ``poll``: refresh a job from the status endpoint
    - ``resolve_download_url``: content URL for a succeeded job
    """

    name: str = "unknown"
    default_max_attempts: int = 60
    # Raw status string (lower-cased) → normalized status
    status_map: dict[str, JobStatus] = {}

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model / deployment identifier sent with each request."""
        ...

    @abstractmethod
    def headers(self) -> dict[str, str]:
        """Authentication headers for every call, download included."""
        ...

    @abstractmethod
    async def submit(
        self, client: httpx.AsyncClient, request: GenerationRequest
    ) -> SubmissionResult:
        ...

    @abstractmethod
    async def poll(self, client: httpx.AsyncClient, job: Job) -> Job:
        ...

    @abstractmethod
    def resolve_download_url(self, job: Job) -> str:
        ...

    def normalize_status(self, raw: Any) -> JobStatus | None:
        """Map a provider status string to JobStatus; None if unrecognized."""
        if not raw:
            return None
        if not isinstance(raw, str):
            logger.warning("%s non-string status: %r", self.name, raw)
            return None
        status = self.status_map.get(raw.strip().lower())
        if status is None:
            logger.warning("%s unknown status: %s", self.name, raw)
        return status

    # --- Shared HTTP helpers ---

    async def _post_submission(
        self, client: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> dict[str, Any]:
        """POST and return the JSON body; non-2xx raises SubmissionError."""
        resp = await client.post(url, headers=self.headers(), **kwargs)
        if resp.is_error:
            logger.error(
                "%s submission rejected: %s %s", self.name, resp.status_code, resp.text
            )
            raise SubmissionError(
                f"Error: {resp.status_code}",
                status_code=resp.status_code,
                detail=resp.text,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise SubmissionError(
                "Submission response was not JSON", detail=resp.text
            ) from e
        if not isinstance(data, dict):
            raise SubmissionError(
                "Submission response was not a JSON object", detail=resp.text
            )
        return data

    async def _get_status(
        self, client: httpx.AsyncClient, url: str, **kwargs: Any
    ) -> dict[str, Any]:
        """GET a status resource; non-2xx or non-JSON raises PollingError."""
        resp = await client.get(url, headers=self.headers(), **kwargs)
        if resp.is_error:
            raise PollingError(
                f"Status check failed: {resp.status_code}", detail=resp.text
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise PollingError("Status response was not JSON", detail=resp.text) from e
        if not isinstance(data, dict):
            raise PollingError("Status response was not a JSON object", detail=resp.text)
        return data

    def _apply_status(self, job: Job, data: dict[str, Any]) -> None:
        """Advance ``job`` from a status payload and copy any error detail."""
        status = self.normalize_status(data.get("status"))
        if status is not None:
            job.advance(status)
        if job.status in (JobStatus.FAILED, JobStatus.CANCELLED):
            job.error = data.get("error") or data.get("failure_reason")
