"""Allow ``python -m santa_video``."""

from santa_video.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
