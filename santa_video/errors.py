"""Error taxonomy for the submit → poll → download lifecycle."""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Where in the lifecycle a run stopped."""

    CONFIG = "config"
    INPUT = "input"
    SUBMISSION = "submission"
    POLLING = "polling"
    DOWNLOAD = "download"


class VideoGenError(Exception):
    """Base error carrying an ErrorKind."""

    kind: ErrorKind = ErrorKind.SUBMISSION

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConfigError(VideoGenError):
    kind = ErrorKind.CONFIG


class InputError(VideoGenError):
    kind = ErrorKind.INPUT


class SubmissionError(VideoGenError):
    """Submission POST was rejected or could not be sent."""

    kind = ErrorKind.SUBMISSION

    def __init__(
        self, message: str, *, status_code: int | None = None, detail: str | None = None
    ) -> None:
        super().__init__(message, detail=detail)
        self.status_code = status_code


class PollingError(VideoGenError):
    kind = ErrorKind.POLLING


class DownloadError(VideoGenError):
    kind = ErrorKind.DOWNLOAD
