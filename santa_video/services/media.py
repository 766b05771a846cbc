"""Local file handling: source image loading and video persistence."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from santa_video.errors import InputError
from santa_video.schemas import SourceImage

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


def mime_type_for(path: str | Path) -> str:
    """Map a file extension to an image MIME type, defaulting to JPEG."""
    ext = Path(path).suffix.lstrip(".").lower()
    return _MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def load_source_image(path: str | Path | None) -> SourceImage:
    """Read an image file into a SourceImage.

    Raises:
        InputError: if no path was given or the file does not exist.
    """
    if not path or not str(path).strip():
        raise InputError("Image file not found!")
    image_path = Path(str(path).strip().strip('"'))
    if not image_path.is_file():
        raise InputError("Image file not found!", detail=str(image_path))

    data = image_path.read_bytes()
    logger.debug("Loaded %s (%d bytes)", image_path.name, len(data))
    return SourceImage(
        file_name=image_path.name,
        data=data,
        mime_type=mime_type_for(image_path),
    )


def build_output_path(
    output_dir: str | Path = ".",
    prefix: str = "santa_video",
    now: datetime | None = None,
) -> Path:
    """Timestamped output path: ``<dir>/<prefix>_YYYYMMDD_HHMMSS.mp4``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return Path(output_dir) / f"{prefix}_{stamp}.mp4"


def save_video(data: bytes, output_dir: str | Path = ".", prefix: str = "santa_video") -> Path:
    """Write video bytes in a single write and return the absolute path."""
    path = build_output_path(output_dir, prefix)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Saved video: %s (%d bytes)", path, len(data))
    return path.resolve()
