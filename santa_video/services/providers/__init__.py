"""Video provider implementations.

Each provider adapts one endpoint shape to the same lifecycle:
  POST create job → poll status → resolve download URL
"""

from __future__ import annotations

from santa_video.config import (
    PROVIDER_AZURE_INLINE,
    PROVIDER_AZURE_JOBS,
    PROVIDER_OPENAI,
    Settings,
)
from santa_video.errors import ConfigError
from santa_video.services.providers.azure_inline import AzureInlineProvider
from santa_video.services.providers.azure_jobs import AzureJobsProvider
from santa_video.services.providers.base import VideoProvider
from santa_video.services.providers.openai_sora import OpenAISoraProvider

PROVIDERS: dict[str, type[VideoProvider]] = {
    PROVIDER_AZURE_INLINE: AzureInlineProvider,
    PROVIDER_AZURE_JOBS: AzureJobsProvider,
    PROVIDER_OPENAI: OpenAISoraProvider,
}


def get_provider(settings: Settings) -> VideoProvider:
    """Instantiate the provider selected by ``VIDEO_PROVIDER``."""
    key = settings.VIDEO_PROVIDER.strip().lower()
    provider_cls = PROVIDERS.get(key)
    if provider_cls is None:
        raise ConfigError(
            f"Unknown video provider: {settings.VIDEO_PROVIDER!r} "
            f"(expected one of {', '.join(PROVIDERS)})"
        )
    return provider_cls(settings)


__all__ = [
    "AzureInlineProvider",
    "AzureJobsProvider",
    "OpenAISoraProvider",
    "PROVIDERS",
    "VideoProvider",
    "get_provider",
]
