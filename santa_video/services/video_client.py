"""Santa video client: submit a job, poll it, download the result.

Lifecycle:
1. submit_job         → POST to the provider, get a job or an inline URL
2. poll_and_download  → poll every interval until terminal or out of attempts,
                        then fetch and persist the video
3. SantaVideoClient   → wires config, input, and the two steps together and
                        returns a GenerationOutcome instead of raising
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable

import httpx

from santa_video.config import Settings, validate_provider_config
from santa_video.errors import (
    ConfigError,
    DownloadError,
    ErrorKind,
    PollingError,
    SubmissionError,
    VideoGenError,
)
from santa_video.prompts import resolve_prompt
from santa_video.schemas import (
    GenerationOutcome,
    GenerationRequest,
    InpaintItem,
    Job,
    JobStatus,
    SourceImage,
    SubmissionResult,
)
from santa_video.services.media import load_source_image, save_video
from santa_video.services.providers import VideoProvider, get_provider

logger = logging.getLogger(__name__)

SubmittedCallback = Callable[[Job], None]
ProgressCallback = Callable[[Job, float], None]


def build_generation_request(
    settings: Settings, provider: VideoProvider, image: SourceImage
) -> GenerationRequest:
    """Assemble the immutable request from settings and the loaded image."""
    inpaint_items: tuple[InpaintItem, ...] = ()
    if settings.INPAINT_ENABLED:
        inpaint_items = (
            InpaintItem(frame_index=settings.INPAINT_FRAME_INDEX, file_name=image.file_name),
        )

    return GenerationRequest(
        prompt=resolve_prompt(settings.VIDEO_PROMPT),
        image=image,
        model=provider.model_name,
        width=settings.VIDEO_WIDTH,
        height=settings.VIDEO_HEIGHT,
        duration=settings.VIDEO_DURATION,
        n_variants=settings.VIDEO_VARIANTS,
        aspect_ratio=settings.VIDEO_ASPECT_RATIO,
        quality=settings.VIDEO_QUALITY,
        include_audio=settings.VIDEO_INCLUDE_AUDIO,
        resolution=settings.OPENAI_RESOLUTION,
        inpaint_items=inpaint_items,
    )


async def submit_job(
    client: httpx.AsyncClient, provider: VideoProvider, request: GenerationRequest
) -> SubmissionResult:
    """Send the submission request. No retry.

    Raises:
        SubmissionError: on a non-2xx answer or a transport failure.
    """
    logger.info("Submitting to %s (model=%s)", provider.name, request.model)
    try:
        return await provider.submit(client, request)
    except httpx.HTTPError as e:
        raise SubmissionError(f"Request failed: {e}") from e


async def download_video(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    output_dir: str | Path = ".",
    prefix: str = "santa_video",
) -> tuple[Path, int]:
    """Fetch the whole body in one GET and write it in one go."""
    logger.info("Downloading video from %s", url)
    try:
        resp = await client.get(url, headers=headers)
        resp.raise_for_status()
        data = resp.content
        path = save_video(data, output_dir, prefix)
    except Exception as e:
        logger.error("Error downloading video: %s", e)
        raise DownloadError(f"Error downloading video: {e}") from e
    return path, len(data)


async def _download_outcome(
    client: httpx.AsyncClient,
    provider: VideoProvider,
    url: str,
    job: Job | None,
    *,
    output_dir: str | Path,
    prefix: str,
) -> GenerationOutcome:
    try:
        path, size = await download_video(
            client, url, headers=provider.headers(), output_dir=output_dir, prefix=prefix
        )
    except DownloadError as e:
        return GenerationOutcome(
            ok=False,
            job_id=job.id if job else None,
            status=job.status if job else JobStatus.SUCCEEDED,
            error_kind=ErrorKind.DOWNLOAD,
            message=e.message,
        )
    return GenerationOutcome(
        ok=True,
        job_id=job.id if job else None,
        status=JobStatus.SUCCEEDED,
        output_path=path,
        size_bytes=size,
        message=f"Video saved to: {path}",
    )


async def poll_and_download(
    client: httpx.AsyncClient,
    provider: VideoProvider,
    submission: SubmissionResult,
    *,
    poll_interval: float = 5.0,
    max_attempts: int | None = None,
    output_dir: str | Path = ".",
    prefix: str = "santa_video",
    on_progress: ProgressCallback | None = None,
) -> GenerationOutcome:
    """Poll until the job settles, then download on success.

    An inline result URL skips polling entirely. Failed, cancelled and
    timed-out jobs never trigger a download.

    Raises:
        PollingError: when a status request fails or a succeeded job
            carries nothing to download.
    """
    if submission.result_url:
        return await _download_outcome(
            client, provider, submission.result_url, None,
            output_dir=output_dir, prefix=prefix,
        )

    job = submission.job
    if job is None:
        raise SubmissionError("Submission produced neither a job nor a result URL")

    ceiling = max_attempts if max_attempts is not None else provider.default_max_attempts
    attempt = 0
    while not job.status.is_terminal and attempt < ceiling:
        await asyncio.sleep(poll_interval)
        attempt += 1

        try:
            job = await provider.poll(client, job)
        except httpx.HTTPError as e:
            raise PollingError(f"Status request failed: {e}") from e

        logger.debug(
            "%s job %s: %s (attempt %d/%d)",
            provider.name, job.id, job.status.value, attempt, ceiling,
        )
        if on_progress is not None:
            on_progress(job, attempt * poll_interval)

    if not job.status.is_terminal:
        job.advance(JobStatus.TIMED_OUT)
        logger.error("Job %s timed out after %d attempts", job.id, attempt)
        return GenerationOutcome(
            ok=False,
            job_id=job.id,
            status=JobStatus.TIMED_OUT,
            error_kind=ErrorKind.POLLING,
            message="Timeout waiting for video generation.",
        )

    if job.status is not JobStatus.SUCCEEDED:
        logger.error("Job %s ended %s: %s", job.id, job.status.value, job.error)
        message = f"Video generation {job.status.value}."
        if job.error:
            message = f"{message} Error: {job.error}"
        return GenerationOutcome(
            ok=False,
            job_id=job.id,
            status=job.status,
            error_kind=ErrorKind.POLLING,
            message=message,
        )

    url = provider.resolve_download_url(job)
    return await _download_outcome(
        client, provider, url, job, output_dir=output_dir, prefix=prefix
    )


class SantaVideoClient:
    """End-to-end runner for one image.

    Every failure comes back as a GenerationOutcome with an ErrorKind;
    nothing escapes ``generate`` except programming errors.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        provider: VideoProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        on_submitted: SubmittedCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.settings = settings
        self._provider = provider
        self._http_client = http_client
        self.on_submitted = on_submitted
        self.on_progress = on_progress

    def _resolve_provider(self) -> VideoProvider:
        if self._provider is not None:
            return self._provider
        provider = get_provider(self.settings)
        missing = validate_provider_config(self.settings)
        if missing:
            raise ConfigError(
                "Configuration missing! Please run the provisioning script first.",
                detail=", ".join(missing),
            )
        return provider

    async def generate(self, image_path: str | Path | None) -> GenerationOutcome:
        try:
            provider = self._resolve_provider()
            image = load_source_image(image_path)
        except VideoGenError as e:
            return _error_outcome(e)

        request = build_generation_request(self.settings, provider, image)

        client = self._http_client or httpx.AsyncClient(
            timeout=self.settings.HTTP_TIMEOUT, follow_redirects=True
        )
        own_client = self._http_client is None

        try:
            submission = await submit_job(client, provider, request)
            if submission.job is not None and self.on_submitted is not None:
                self.on_submitted(submission.job)
            return await poll_and_download(
                client,
                provider,
                submission,
                poll_interval=self.settings.POLL_INTERVAL_SECONDS,
                max_attempts=self.settings.MAX_POLL_ATTEMPTS,
                output_dir=self.settings.OUTPUT_DIR,
                prefix=self.settings.OUTPUT_PREFIX,
                on_progress=self.on_progress,
            )
        except VideoGenError as e:
            return _error_outcome(e)
        finally:
            if own_client:
                await client.aclose()


def _error_outcome(error: VideoGenError) -> GenerationOutcome:
    message = error.message
    if error.detail:
        message = f"{message}\nDetails: {error.detail}"
    return GenerationOutcome(ok=False, error_kind=error.kind, message=message)
