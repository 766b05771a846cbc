"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
)

PROVIDER_AZURE_INLINE = "azure_inline"
PROVIDER_AZURE_JOBS = "azure_jobs"
PROVIDER_OPENAI = "openai"

SUPPORTED_PROVIDERS = (PROVIDER_AZURE_INLINE, PROVIDER_AZURE_JOBS, PROVIDER_OPENAI)

# appsettings.json "AzureAI" section (as written by the provisioning script)
_AZURE_SECTION = "AzureAI"
_AZURE_SECTION_KEYS = {
    "Endpoint": "AZURE_AI_ENDPOINT",
    "ApiKey": "AZURE_AI_API_KEY",
    "DeploymentName": "AZURE_AI_DEPLOYMENT_NAME",
}


class AppSettingsJsonSource(JsonConfigSettingsSource):
    """appsettings.json reader that also understands the nested AzureAI section.

    Flat upper-case keys win over the nested section when both are present.
    """

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        data = super()._read_file(file_path)
        if not isinstance(data, dict):
            return {}
        section = data.pop(_AZURE_SECTION, None)
        if isinstance(section, dict):
            for key, setting in _AZURE_SECTION_KEYS.items():
                if section.get(key) and setting not in data:
                    data[setting] = section[key]
        return data


class Settings(BaseSettings):
    """Santa Video Generator settings.

    Loaded from environment variables, a .env file, or appsettings.json
    (flat keys) in the working directory. Environment wins.
    """

    DEBUG: bool = False

    # --- Provider selection ---
    VIDEO_PROVIDER: str = PROVIDER_AZURE_JOBS

    # --- Azure AI Foundry / Azure OpenAI ---
    AZURE_AI_ENDPOINT: str = ""
    AZURE_AI_API_KEY: str = ""
    AZURE_AI_DEPLOYMENT_NAME: str = ""
    AZURE_JOBS_API_VERSION: str = "preview"
    AZURE_OPERATIONS_API_VERSION: str = "2024-08-01-preview"

    # --- OpenAI ---
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_VIDEO_MODEL: str = "sora-2"
    OPENAI_RESOLUTION: str = "1280x720"

    # --- Generation parameters ---
    VIDEO_WIDTH: int = 1920
    VIDEO_HEIGHT: int = 1080
    VIDEO_DURATION: int = 10
    VIDEO_VARIANTS: int = 1
    VIDEO_ASPECT_RATIO: str = "16:9"
    VIDEO_QUALITY: str = "high"
    VIDEO_INCLUDE_AUDIO: bool = True
    VIDEO_PROMPT: str | None = None

    # --- Inpainting (job-queue shape only) ---
    INPAINT_ENABLED: bool = True
    INPAINT_FRAME_INDEX: int = 0

    # --- Polling ---
    POLL_INTERVAL_SECONDS: float = 5.0
    MAX_POLL_ATTEMPTS: int | None = Field(None, ge=1)  # None → provider default
    HTTP_TIMEOUT: float | None = None  # None → no per-request timeout

    # --- Output ---
    OUTPUT_DIR: str = "."
    OUTPUT_PREFIX: str = "santa_video"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "json_file": "appsettings.json",
        "json_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            AppSettingsJsonSource(settings_cls),
            file_secret_settings,
        )


def validate_provider_config(settings: Settings) -> list[str]:
    """Return the setting names the selected provider needs but lacks."""
    provider = settings.VIDEO_PROVIDER.strip().lower()
    if provider in (PROVIDER_AZURE_INLINE, PROVIDER_AZURE_JOBS):
        required = ("AZURE_AI_ENDPOINT", "AZURE_AI_API_KEY", "AZURE_AI_DEPLOYMENT_NAME")
    elif provider == PROVIDER_OPENAI:
        required = ("OPENAI_API_KEY",)
    else:
        return ["VIDEO_PROVIDER"]
    return [name for name in required if not getattr(settings, name)]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
