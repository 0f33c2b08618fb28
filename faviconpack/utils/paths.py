from __future__ import annotations

import os
from typing import Tuple

from faviconpack.catalog import ICO_SIZES


def env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip().lower()
    if not v:
        return default
    return v in ("1", "true", "yes", "on")


def get_output_dir(base_dir: str) -> str:
    """Return the directory generated files are written to.

    Directory name is configurable via env `FAVICON_OUTPUT_DIR` (default: "favicons").
    Absolute values are used as-is.
    """
    name = (os.getenv("FAVICON_OUTPUT_DIR", "favicons") or "").strip() or "favicons"
    return os.path.join(base_dir, name)


def get_zip_name() -> str:
    """Return the archive file name (env `FAVICON_ZIP_NAME`, default "favicons.zip")."""
    name = (os.getenv("FAVICON_ZIP_NAME", "favicons.zip") or "").strip() or "favicons.zip"
    if not name.lower().endswith(".zip"):
        name += ".zip"
    return name


def get_ico_name() -> str:
    """Return the ICO file name (env `FAVICON_ICO_NAME`, default "favicon.ico")."""
    name = (os.getenv("FAVICON_ICO_NAME", "favicon.ico") or "").strip() or "favicon.ico"
    if not name.lower().endswith(".ico"):
        name += ".ico"
    return name


def get_ico_sizes() -> Tuple[int, ...]:
    """Return the sizes packed into the ICO file.

    Controlled by env `FAVICON_ICO_SIZES` as a comma separated list; values outside
    1..256 are dropped and an unusable list falls back to 16,32,48.
    """
    raw = os.getenv("FAVICON_ICO_SIZES", "") or ""
    out = []
    for part in raw.split(","):
        part = part.strip()
        if not part.isdigit():
            continue
        n = int(part)
        if 1 <= n <= 256 and n not in out:
            out.append(n)
    return tuple(out) if out else ICO_SIZES


def get_resample_name() -> str:
    """Return the Pillow resample filter name (env `FAVICON_RESAMPLE`).

    Accepts lanczos/bicubic; defaults to lanczos for unknown values.
    """
    v = (os.getenv("FAVICON_RESAMPLE", "lanczos") or "lanczos").strip().lower()
    if v in ("bicubic", "cubic"):
        return "bicubic"
    return "lanczos"


def get_resize_backend() -> str:
    """Return the resize backend (env `FAVICON_RESIZE_BACKEND`: pillow/opencv)."""
    v = (os.getenv("FAVICON_RESIZE_BACKEND", "pillow") or "pillow").strip().lower()
    if v in ("opencv", "cv2"):
        return "opencv"
    return "pillow"


def get_workers() -> int:
    """Return the resize worker count (env `FAVICON_WORKERS`, default 1)."""
    try:
        n = int((os.getenv("FAVICON_WORKERS", "1") or 1))
    except ValueError:
        return 1
    return max(1, n)
