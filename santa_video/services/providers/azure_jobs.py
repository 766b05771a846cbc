"""Azure OpenAI Sora provider: multipart job queue.

1. POST /openai/v1/video/generations/jobs      → create job (multipart)
2. GET  /openai/v1/video/generations/jobs/{id} → poll status
3. GET  /openai/v1/video/generations/{generation_id}/content/video → download
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from santa_video.errors import PollingError, SubmissionError
from santa_video.schemas import (
    GenerationRequest,
    GenerationResult,
    Job,
    JobStatus,
    SubmissionResult,
)
from santa_video.services.providers.base import VideoProvider

logger = logging.getLogger(__name__)


class AzureJobsProvider(VideoProvider):
    """Job-queue Azure shape with inpaint support."""

    name = "azure_jobs"
    default_max_attempts = 120
    status_map = {
        "preprocessing": JobStatus.QUEUED,
        "queued": JobStatus.QUEUED,
        "pending": JobStatus.QUEUED,
        "running": JobStatus.RUNNING,
        "processing": JobStatus.RUNNING,
        "in_progress": JobStatus.RUNNING,
        "succeeded": JobStatus.SUCCEEDED,
        "completed": JobStatus.SUCCEEDED,
        "failed": JobStatus.FAILED,
        "cancelled": JobStatus.CANCELLED,
        "canceled": JobStatus.CANCELLED,
    }

    @property
    def model_name(self) -> str:
        return self.settings.AZURE_AI_DEPLOYMENT_NAME

    @property
    def base_url(self) -> str:
        return f"{self.settings.AZURE_AI_ENDPOINT.rstrip('/')}/openai/v1/video/generations"

    @property
    def params(self) -> dict[str, str]:
        return {"api-version": self.settings.AZURE_JOBS_API_VERSION}

    def headers(self) -> dict[str, str]:
        return {"api-key": self.settings.AZURE_AI_API_KEY}

    def build_form(self, request: GenerationRequest) -> dict[str, str]:
        form = {
            "prompt": request.prompt,
            "height": str(request.height),
            "width": str(request.width),
            "n_seconds": str(request.duration),
            "n_variants": str(request.n_variants),
            "model": request.model,
        }
        if request.inpaint_items:
            form["inpaint_items"] = json.dumps(
                [item.model_dump() for item in request.inpaint_items]
            )
        return form

    async def submit(
        self, client: httpx.AsyncClient, request: GenerationRequest
    ) -> SubmissionResult:
        image = request.image
        data = await self._post_submission(
            client,
            f"{self.base_url}/jobs",
            params=self.params,
            data=self.build_form(request),
            files={"files": (image.file_name, image.data, image.mime_type)},
        )

        job_id = data.get("id")
        if not job_id:
            raise SubmissionError("Job creation returned no id", detail=str(data))

        logger.info("Azure video job created: %s (model=%s)", job_id, request.model)
        job = Job(id=str(job_id))
        self._update(job, data)
        return SubmissionResult(job=job)

    async def poll(self, client: httpx.AsyncClient, job: Job) -> Job:
        data = await self._get_status(
            client, f"{self.base_url}/jobs/{job.id}", params=self.params
        )
        self._update(job, data)
        return job

    def _update(self, job: Job, data: dict[str, Any]) -> None:
        self._apply_status(job, data)
        if job.status is JobStatus.SUCCEEDED:
            generations = data.get("generations")
            if not isinstance(generations, list):
                generations = []
            job.generations = [
                GenerationResult(id=str(g["id"]))
                for g in generations
                if isinstance(g, dict) and g.get("id") is not None
            ]

    def resolve_download_url(self, job: Job) -> str:
        if not job.generations or not job.generations[0].id:
            raise PollingError("Azure job succeeded but returned no generations")
        generation_id = job.generations[0].id
        version = self.settings.AZURE_JOBS_API_VERSION
        return f"{self.base_url}/{generation_id}/content/video?api-version={version}"
