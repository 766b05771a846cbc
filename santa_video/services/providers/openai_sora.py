"""OpenAI Sora provider: ``/videos`` resource.

Submission is multipart with the image under ``input_reference``; the
finished video lives at the implicit ``/videos/{id}/content`` sub-resource.
"""

from __future__ import annotations

import logging

import httpx

from santa_video.errors import SubmissionError
from santa_video.schemas import GenerationRequest, Job, JobStatus, SubmissionResult
from santa_video.services.providers.base import VideoProvider

logger = logging.getLogger(__name__)


class OpenAISoraProvider(VideoProvider):
    name = "openai"
    default_max_attempts = 120
    status_map = {
        "queued": JobStatus.QUEUED,
        "in_progress": JobStatus.RUNNING,
        "running": JobStatus.RUNNING,
        "completed": JobStatus.SUCCEEDED,
        "succeeded": JobStatus.SUCCEEDED,
        "failed": JobStatus.FAILED,
        "cancelled": JobStatus.CANCELLED,
        "canceled": JobStatus.CANCELLED,
    }

    @property
    def model_name(self) -> str:
        return self.settings.OPENAI_VIDEO_MODEL

    @property
    def videos_url(self) -> str:
        return f"{self.settings.OPENAI_BASE_URL.rstrip('/')}/videos"

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.OPENAI_API_KEY}"}

    def build_form(self, request: GenerationRequest) -> dict[str, str]:
        return {
            "prompt": request.prompt,
            "model": request.model,
            "resolution": request.resolution or f"{request.width}x{request.height}",
            "seconds": str(request.duration),
        }

    async def submit(
        self, client: httpx.AsyncClient, request: GenerationRequest
    ) -> SubmissionResult:
        image = request.image
        data = await self._post_submission(
            client,
            self.videos_url,
            data=self.build_form(request),
            files={"input_reference": (image.file_name, image.data, image.mime_type)},
        )

        video_id = data.get("id")
        if not video_id:
            raise SubmissionError("No video id returned from creation response", detail=str(data))

        logger.info("OpenAI video created: %s (model=%s)", video_id, request.model)
        job = Job(id=str(video_id))
        self._apply_status(job, data)
        return SubmissionResult(job=job)

    async def poll(self, client: httpx.AsyncClient, job: Job) -> Job:
        data = await self._get_status(client, f"{self.videos_url}/{job.id}")
        self._apply_status(job, data)
        return job

    def resolve_download_url(self, job: Job) -> str:
        return f"{self.videos_url}/{job.id}/content"
