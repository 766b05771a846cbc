"""Santa Video Generator: command-line entry point.

Usage:
    santa-video path/to/christmas_scene.jpg
    santa-video --provider openai --max-attempts 60 scene.png
    python -m santa_video            # prompts for the image path
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

from santa_video import __version__
from santa_video.config import SUPPORTED_PROVIDERS, Settings, get_settings
from santa_video.prompts import SANTA_PROMPT_SUMMARY
from santa_video.schemas import GenerationOutcome, Job, JobStatus
from santa_video.services.video_client import SantaVideoClient

logger = logging.getLogger(__name__)

BANNER = "🎅 Santa Video Generator - Powered by Sora"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="santa-video",
        description="Turn a Christmas scene photo into a Santa video.",
    )
    parser.add_argument("image", nargs="?", help="Path to the Christmas scene image")
    parser.add_argument("--provider", choices=SUPPORTED_PROVIDERS, help="Endpoint shape to use")
    parser.add_argument("--output-dir", help="Directory for the downloaded video")
    parser.add_argument("--max-attempts", type=_positive_int, help="Poll attempt ceiling")
    parser.add_argument("--poll-interval", type=float, help="Seconds between status polls")
    parser.add_argument("--prompt", help="Replace the built-in Santa prompt")
    parser.add_argument("--no-inpaint", action="store_true", help="Do not anchor frame 0 to the image")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of ``settings`` with CLI flags applied."""
    update: dict[str, Any] = {}
    if args.provider:
        update["VIDEO_PROVIDER"] = args.provider
    if args.output_dir:
        update["OUTPUT_DIR"] = args.output_dir
    if args.max_attempts is not None:
        update["MAX_POLL_ATTEMPTS"] = args.max_attempts
    if args.poll_interval is not None:
        update["POLL_INTERVAL_SECONDS"] = args.poll_interval
    if args.prompt:
        update["VIDEO_PROMPT"] = args.prompt
    if args.no_inpaint:
        update["INPAINT_ENABLED"] = False
    if args.verbose:
        update["DEBUG"] = True
    return settings.model_copy(update=update) if update else settings


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    # Keep the progress line readable
    logging.getLogger("httpx").setLevel(logging.WARNING)


def print_prompt(settings: Settings) -> None:
    if settings.VIDEO_PROMPT:
        print(f"   Prompt: {settings.VIDEO_PROMPT}\n")
        return
    first, *rest = SANTA_PROMPT_SUMMARY
    print(f"   Prompt: {first}")
    for line in rest:
        print(f"           {line}")
    print()


def _print_submitted(job: Job) -> None:
    print(f"✓ Video generation started! Job ID: {job.id}")
    print("\n⏳ Generating video (this may take a few minutes)...")


def _print_progress(job: Job, elapsed: float) -> None:
    if not job.status.is_terminal:
        print(f"\r   Progress: {job.status.value} ({elapsed:.0f}s elapsed)", end="", flush=True)


def report(outcome: GenerationOutcome) -> None:
    if outcome.ok:
        print("\n✓ Video generation completed!")
        print(f"\n✅ SUCCESS! Video saved to: {outcome.output_path}")
        print(f"   File size: {outcome.size_mb:.2f} MB")
        print("\n🎄 Your magical Santa video is ready!")
        return

    icon = "⏰" if outcome.status is JobStatus.TIMED_OUT else "❌"
    print(f"\n{icon} {outcome.message}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    configure_logging(settings.DEBUG)

    print(BANNER)
    print("=" * len(BANNER) + "\n")

    image_path = args.image
    if not image_path:
        try:
            image_path = input("Enter the path to your Christmas scene image: ")
        except EOFError:
            image_path = ""

    if image_path:
        print(f"📸 Loading image: {os.path.basename(image_path.strip())}")

    print(f"🎬 Generating video with {settings.VIDEO_PROVIDER}...")
    print_prompt(settings)

    client = SantaVideoClient(
        settings,
        on_submitted=_print_submitted,
        on_progress=_print_progress,
    )
    outcome = asyncio.run(client.generate(image_path))
    report(outcome)

    if not outcome.ok:
        logger.debug("Run failed (%s): %s", outcome.error_kind, outcome.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
