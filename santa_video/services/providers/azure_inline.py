"""Azure AI Foundry Sora provider: single JSON call.

POST the image inline (base64) to the deployment endpoint. The service either
answers with a ``videoUrl`` straight away or with an operation ``id`` that is
polled at ``/openai/operations/{id}``.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from santa_video.errors import PollingError, SubmissionError
from santa_video.schemas import GenerationRequest, Job, JobStatus, SubmissionResult
from santa_video.services.providers.base import VideoProvider

logger = logging.getLogger(__name__)


class AzureInlineProvider(VideoProvider):
    """Single-call Azure shape with optional operation polling."""

    name = "azure_inline"
    default_max_attempts = 60
    status_map = {
        "notstarted": JobStatus.QUEUED,
        "queued": JobStatus.QUEUED,
        "running": JobStatus.RUNNING,
        "inprogress": JobStatus.RUNNING,
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

    def headers(self) -> dict[str, str]:
        return {"api-key": self.settings.AZURE_AI_API_KEY}

    def build_body(self, request: GenerationRequest) -> dict[str, Any]:
        return {
            "prompt": request.prompt,
            "image": {
                "data": base64.b64encode(request.image.data).decode("utf-8"),
                "mimeType": request.image.mime_type,
            },
            "duration": request.duration,
            "aspectRatio": request.aspect_ratio,
            "quality": request.quality,
            "includeAudio": request.include_audio,
        }

    def status_url(self, operation_id: str) -> str:
        endpoint = self.settings.AZURE_AI_ENDPOINT.rstrip("/")
        return f"{endpoint}/openai/operations/{operation_id}"

    async def submit(
        self, client: httpx.AsyncClient, request: GenerationRequest
    ) -> SubmissionResult:
        data = await self._post_submission(
            client, self.settings.AZURE_AI_ENDPOINT, json=self.build_body(request)
        )

        if data.get("id"):
            logger.info("Azure operation created: %s", data["id"])
            return SubmissionResult(job=Job(id=str(data["id"])))
        if data.get("videoUrl"):
            logger.info("Azure returned video inline")
            return SubmissionResult(result_url=str(data["videoUrl"]))
        raise SubmissionError(
            "Response carried neither an operation id nor a videoUrl", detail=str(data)
        )

    async def poll(self, client: httpx.AsyncClient, job: Job) -> Job:
        data = await self._get_status(
            client,
            self.status_url(job.id),
            params={"api-version": self.settings.AZURE_OPERATIONS_API_VERSION},
        )
        self._apply_status(job, data)
        if job.status is JobStatus.SUCCEEDED:
            result = data.get("result")
            video_url = result.get("videoUrl") if isinstance(result, dict) else None
            job.result_url = str(video_url) if video_url else None
        return job

    def resolve_download_url(self, job: Job) -> str:
        if not job.result_url:
            raise PollingError("Azure operation succeeded but no video URL")
        return job.result_url
