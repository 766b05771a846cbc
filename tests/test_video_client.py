import re

import httpx
import pytest

from santa_video.errors import ErrorKind
from santa_video.schemas import JobStatus
from santa_video.services.video_client import SantaVideoClient

from conftest import VIDEO_BYTES

OUTPUT_NAME = re.compile(r"santa_video_\d{8}_\d{6}\.mp4")


async def _run(settings, api, image_path, **kwargs):
    async with api.client() as http_client:
        client = SantaVideoClient(settings, http_client=http_client, **kwargs)
        return await client.generate(image_path)


@pytest.mark.asyncio
async def test_job_queue_end_to_end(make_settings, fake_api, image_file, tmp_path):
    api = fake_api(
        submit=(200, {"id": "job-123"}),
        polls=[
            {"status": "queued"},
            {"status": "running"},
            {"status": "succeeded", "generations": [{"id": "gen-9"}]},
        ],
    )
    progress = []
    submitted = []

    outcome = await _run(
        make_settings(),
        api,
        image_file,
        on_submitted=submitted.append,
        on_progress=lambda job, elapsed: progress.append(job.status),
    )

    assert outcome.ok, outcome.message
    assert outcome.job_id == "job-123"
    assert outcome.status is JobStatus.SUCCEEDED
    assert [j.id for j in submitted] == ["job-123"]
    assert progress == [JobStatus.QUEUED, JobStatus.RUNNING, JobStatus.SUCCEEDED]

    assert len(api.poll_requests) == 3
    assert len(api.download_requests) == 1
    assert api.download_requests[0].url.path == (
        "/openai/v1/video/generations/gen-9/content/video"
    )

    files = list((tmp_path / "out").iterdir())
    assert len(files) == 1
    assert OUTPUT_NAME.fullmatch(files[0].name)
    assert files[0].read_bytes() == VIDEO_BYTES
    assert outcome.output_path == files[0].resolve()
    assert outcome.size_bytes == len(VIDEO_BYTES)


@pytest.mark.asyncio
async def test_rejected_submission_stops_immediately(make_settings, fake_api, image_file):
    api = fake_api(submit=(400, {"error": "bad prompt"}))

    outcome = await _run(make_settings(), api, image_file)

    assert not outcome.ok
    assert outcome.error_kind is ErrorKind.SUBMISSION
    assert "400" in outcome.message
    assert "bad prompt" in outcome.message
    assert len(api.submit_requests) == 1
    assert api.poll_requests == []
    assert api.download_requests == []


@pytest.mark.asyncio
async def test_poll_ceiling_reports_timeout(make_settings, fake_api, image_file, tmp_path):
    api = fake_api(polls=[])  # every poll answers "running"

    outcome = await _run(make_settings(MAX_POLL_ATTEMPTS=4), api, image_file)

    assert not outcome.ok
    assert outcome.status is JobStatus.TIMED_OUT
    assert outcome.error_kind is ErrorKind.POLLING
    assert "Timeout" in outcome.message
    assert len(api.poll_requests) == 4
    assert api.download_requests == []
    assert not (tmp_path / "out").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["failed", "cancelled"])
async def test_failed_or_cancelled_skips_download(make_settings, fake_api, image_file, status):
    api = fake_api(
        polls=[{"status": "running"}, {"status": status, "error": {"code": "moderation"}}]
    )

    outcome = await _run(make_settings(), api, image_file)

    assert not outcome.ok
    assert outcome.status.value == status
    assert outcome.error_kind is ErrorKind.POLLING
    assert "moderation" in outcome.message
    assert len(api.poll_requests) == 2
    assert api.download_requests == []


@pytest.mark.asyncio
async def test_inline_result_skips_polling(make_settings, fake_api, image_file):
    api = fake_api(submit=(200, {"videoUrl": "https://cdn.example.com/santa.mp4"}))

    outcome = await _run(make_settings(VIDEO_PROVIDER="azure_inline"), api, image_file)

    assert outcome.ok, outcome.message
    assert outcome.job_id is None
    assert api.poll_requests == []
    assert [str(r.url) for r in api.download_requests] == ["https://cdn.example.com/santa.mp4"]


@pytest.mark.asyncio
async def test_azure_operation_polling(make_settings, fake_api, image_file):
    api = fake_api(
        submit=(202, {"id": "op-7"}),
        polls=[
            {"status": "running"},
            {"status": "succeeded", "result": {"videoUrl": "https://cdn.example.com/op-7.mp4"}},
        ],
    )

    outcome = await _run(make_settings(VIDEO_PROVIDER="azure_inline"), api, image_file)

    assert outcome.ok, outcome.message
    assert len(api.poll_requests) == 2
    assert str(api.download_requests[0].url) == "https://cdn.example.com/op-7.mp4"


@pytest.mark.asyncio
async def test_openai_completed_downloads_content(make_settings, fake_api, image_file):
    api = fake_api(
        submit=(200, {"id": "video_1", "status": "queued"}),
        polls=[{"status": "in_progress"}, {"status": "completed"}],
    )

    outcome = await _run(make_settings(VIDEO_PROVIDER="openai"), api, image_file)

    assert outcome.ok, outcome.message
    assert api.download_requests[0].url.path == "/v1/videos/video_1/content"
    assert api.download_requests[0].headers["authorization"] == "Bearer sk-test"


@pytest.mark.asyncio
async def test_download_error_is_reported(make_settings, fake_api, image_file, tmp_path):
    api = fake_api(
        polls=[{"status": "succeeded", "generations": [{"id": "gen-9"}]}],
        download_status=404,
    )

    outcome = await _run(make_settings(), api, image_file)

    assert not outcome.ok
    assert outcome.error_kind is ErrorKind.DOWNLOAD
    assert outcome.job_id == "job-123"
    assert len(api.download_requests) == 1
    assert not (tmp_path / "out").exists()


@pytest.mark.asyncio
async def test_missing_config_makes_no_requests(make_settings, fake_api, image_file):
    api = fake_api()

    outcome = await _run(make_settings(AZURE_AI_API_KEY=""), api, image_file)

    assert outcome.error_kind is ErrorKind.CONFIG
    assert "AZURE_AI_API_KEY" in outcome.message
    assert api.requests == []


@pytest.mark.asyncio
async def test_missing_image_makes_no_requests(make_settings, fake_api, tmp_path):
    api = fake_api()

    outcome = await _run(make_settings(), api, tmp_path / "missing.jpg")

    assert outcome.error_kind is ErrorKind.INPUT
    assert api.requests == []


@pytest.mark.asyncio
async def test_transport_failure_on_submit(make_settings, image_file):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = SantaVideoClient(make_settings(), http_client=http_client)
        outcome = await client.generate(image_file)

    assert outcome.error_kind is ErrorKind.SUBMISSION
    assert "connection refused" in outcome.message


@pytest.mark.asyncio
async def test_non_object_submission_is_reported(make_settings, fake_api, image_file):
    api = fake_api(submit=(200, ["unexpected"]))

    outcome = await _run(make_settings(), api, image_file)

    assert not outcome.ok
    assert outcome.error_kind is ErrorKind.SUBMISSION
    assert api.poll_requests == []
    assert api.download_requests == []


@pytest.mark.asyncio
async def test_non_object_status_is_reported(make_settings, fake_api, image_file):
    api = fake_api(polls=[["running"]])

    outcome = await _run(make_settings(), api, image_file)

    assert not outcome.ok
    assert outcome.error_kind is ErrorKind.POLLING
    assert len(api.poll_requests) == 1
    assert api.download_requests == []


@pytest.mark.asyncio
async def test_odd_status_and_numeric_generation_id(make_settings, fake_api, image_file):
    api = fake_api(
        polls=[
            {"status": {"code": "running"}},
            {"status": "succeeded", "generations": [{"id": 9}]},
        ]
    )

    outcome = await _run(make_settings(), api, image_file)

    assert outcome.ok, outcome.message
    assert len(api.poll_requests) == 2
    assert api.download_requests[0].url.path == "/openai/v1/video/generations/9/content/video"


@pytest.mark.asyncio
async def test_single_attempt_ceiling(make_settings, fake_api, image_file):
    api = fake_api(polls=[])

    outcome = await _run(make_settings(MAX_POLL_ATTEMPTS=1), api, image_file)

    assert outcome.status is JobStatus.TIMED_OUT
    assert len(api.poll_requests) == 1


@pytest.mark.asyncio
async def test_unknown_provider_is_named(make_settings, fake_api, image_file):
    api = fake_api()

    outcome = await _run(make_settings(VIDEO_PROVIDER="runway"), api, image_file)

    assert outcome.error_kind is ErrorKind.CONFIG
    assert "Unknown video provider" in outcome.message
    assert "provisioning" not in outcome.message
    assert api.requests == []
