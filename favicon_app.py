"""Command line entrypoint for the favicon generator.

Defers to faviconpack.cli. Run with: python favicon_app.py SOURCE [-o DIR]
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

from faviconpack.cli import main


def _load_env() -> None:
    # Prefer .env next to the executable (frozen) or this file, then the CWD
    if getattr(sys, "frozen", False):
        env_dir = Path(sys.executable).resolve().parent
    else:
        env_dir = Path(__file__).resolve().parent
    dotenv_path = env_dir / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=str(dotenv_path))
    else:
        load_dotenv()


def run() -> int:
    _load_env()
    return main()


if __name__ == "__main__":
    raise SystemExit(run())
