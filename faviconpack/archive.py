from __future__ import annotations

import io
import zipfile
from typing import Mapping, Optional, Tuple

from faviconpack.errors import ArchiveError, PreconditionError
from faviconpack.utils.logging import RunLogger

MIME_TYPE = "application/zip"


def _as_bytes(name: str, value: object) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    data = getattr(value, "data", None)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise PreconditionError(f"No bytes for archive entry {name!r} ({type(value).__name__})")


def package_zip(
    assets: Mapping[str, object],
    extra: Optional[Tuple[str, bytes]] = None,
    logger: Optional[RunLogger] = None,
) -> bytes:
    """Return a ZIP holding one entry per `assets` key, plus `extra` if given.

    Entry names are the keys as-is (no folders). Values may be raw bytes or
    anything with a `.data` bytes attribute (GeneratedAsset). Any failure while
    writing raises ArchiveError and nothing is returned.
    """
    log = (logger or RunLogger(quiet=True)).child("ZIP")
    entries = [(str(name), _as_bytes(name, value)) for name, value in assets.items()]
    if extra is not None:
        extra_name, extra_data = extra
        if any(name == extra_name for name, _ in entries):
            raise PreconditionError(f"Archive already has an entry named {extra_name!r}")
        entries.append((str(extra_name), _as_bytes(extra_name, extra_data)))
    for name, _ in entries:
        if not name or name.startswith("/") or "\\" in name or "/" in name:
            raise PreconditionError(f"Invalid archive entry name: {name!r}")

    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, data in entries:
                zf.writestr(name, data)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, RuntimeError) as e:
        raise ArchiveError(f"Failed to build archive: {e}") from e
    out = buf.getvalue()
    log.log(f"{len(entries)} file(s), {len(out)} bytes")
    return out
