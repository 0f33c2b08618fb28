"""Multi-resolution ICO container with embedded PNG payloads.

Layout (little-endian throughout):

    header     6 bytes            reserved=0, type=1 (icon), count=N
    directory  16 bytes x N       width, height, colors=0, reserved=0,
                                  planes=1, bpp=32, payload size, payload offset
    payloads   concatenated PNG streams, same order as the directory

Width/height are one byte each; 256 is stored as 0.
"""

from __future__ import annotations

import numbers
import struct
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence

from faviconpack.catalog import FAVICON_SIZES, find_by_filename
from faviconpack.errors import IcoFormatError, PreconditionError
from faviconpack.utils.logging import RunLogger

MIME_TYPE = "image/x-icon"

ICO_TYPE_ICON = 1
HEADER_SIZE = 6
ENTRY_SIZE = 16
MAX_SIZE = 256

_HEADER = struct.Struct("<HHH")
_ENTRY = struct.Struct("<BBBBHHII")


class IcoImageEntry(NamedTuple):
    size: int
    data: bytes


def _dim_byte(size: int) -> int:
    return 0 if size == MAX_SIZE else size


def _validate(images: Sequence[IcoImageEntry]) -> None:
    if not images:
        raise PreconditionError("ICO needs at least one image")
    if len(images) > 0xFFFF:
        raise PreconditionError(f"Too many images for one ICO: {len(images)}")
    seen = set()
    for img in images:
        size = img.size
        if isinstance(size, bool) or not isinstance(size, numbers.Integral):
            raise PreconditionError(f"ICO image size must be an integer, got {size!r}")
        if not 1 <= size <= MAX_SIZE:
            raise PreconditionError(f"ICO image size must be within 1..{MAX_SIZE}, got {size}")
        if not img.data:
            raise PreconditionError(f"ICO image {size}x{size} has an empty payload")
        if size in seen:
            raise PreconditionError(f"Duplicate ICO image size: {size}x{size}")
        seen.add(size)


def serialize_ico(images: Iterable[IcoImageEntry]) -> bytes:
    """Pack PNG payloads into one ICO file, smallest size first.

    Payloads are embedded verbatim. The output is independent of input order.
    """
    entries = []
    for size, data in images:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise PreconditionError(f"ICO image payload must be bytes, got {type(data).__name__}")
        entries.append(IcoImageEntry(size, bytes(data)))
    _validate(entries)
    entries = [IcoImageEntry(int(e.size), e.data) for e in entries]
    entries.sort(key=lambda e: e.size)

    count = len(entries)
    header = _HEADER.pack(0, ICO_TYPE_ICON, count)
    offset = HEADER_SIZE + ENTRY_SIZE * count
    directory = []
    for e in entries:
        dim = _dim_byte(e.size)
        directory.append(_ENTRY.pack(dim, dim, 0, 0, 1, 32, len(e.data), offset))
        offset += len(e.data)
    return header + b"".join(directory) + b"".join(e.data for e in entries)


class IcoDirEntry(NamedTuple):
    width: int
    height: int
    color_count: int
    planes: int
    bit_count: int
    size: int
    offset: int


def read_directory(data: bytes) -> List[IcoDirEntry]:
    """Parse the header and directory; width/height 0 is returned as 256."""
    if len(data) < HEADER_SIZE:
        raise IcoFormatError("Truncated ICO header")
    reserved, kind, count = _HEADER.unpack_from(data, 0)
    if reserved != 0 or kind != ICO_TYPE_ICON:
        raise IcoFormatError(f"Not an icon file (reserved={reserved}, type={kind})")
    if count == 0:
        raise IcoFormatError("ICO contains no images")
    if len(data) < HEADER_SIZE + ENTRY_SIZE * count:
        raise IcoFormatError("Truncated ICO directory")
    out: List[IcoDirEntry] = []
    for i in range(count):
        w, h, colors, _res, planes, bpp, size, offset = _ENTRY.unpack_from(data, HEADER_SIZE + ENTRY_SIZE * i)
        if offset + size > len(data):
            raise IcoFormatError(f"Image {i} runs past end of file")
        out.append(IcoDirEntry(w or MAX_SIZE, h or MAX_SIZE, colors, planes, bpp, size, offset))
    return out


def parse_ico(data: bytes) -> List[IcoImageEntry]:
    """Return the images of an ICO file, in directory order."""
    data = bytes(data)
    return [IcoImageEntry(d.width, data[d.offset:d.offset + d.size]) for d in read_directory(data)]


def build_favicon_ico(
    assets: Mapping[str, object],
    sizes: Sequence[int] = (16, 32, 48),
    catalog: Optional[Iterable] = None,
    logger: Optional[RunLogger] = None,
) -> Optional[bytes]:
    """Build favicon.ico from the generated PNGs whose size is in `sizes`.

    `assets` maps filename to a GeneratedAsset (or raw PNG bytes for catalog
    filenames). Returns None when none of the sizes were generated.
    """
    log = (logger or RunLogger(quiet=True)).child("ICO")
    by_size: Dict[int, bytes] = {}
    for filename, asset in assets.items():
        size = _asset_square_size(filename, asset, catalog)
        if size is None or size not in sizes or size in by_size:
            continue
        by_size[size] = _asset_bytes(asset)
    if not by_size:
        log.log("no ICO sizes available; skipping favicon.ico")
        return None
    missing = [s for s in sizes if s not in by_size]
    if missing:
        log.log(f"sizes not generated, left out of favicon.ico: {missing}")
    data = serialize_ico([IcoImageEntry(s, d) for s, d in by_size.items()])
    log.log(f"favicon.ico with sizes {sorted(by_size)} ({len(data)} bytes)")
    return data


def _asset_bytes(asset: object) -> bytes:
    if isinstance(asset, (bytes, bytearray)):
        return bytes(asset)
    return bytes(getattr(asset, "data"))


def _asset_square_size(filename: str, asset: object, catalog: Optional[Iterable]) -> Optional[int]:
    w = getattr(asset, "width", None)
    h = getattr(asset, "height", None)
    if isinstance(w, int) and isinstance(h, int):
        return w if w == h else None
    # Raw bytes: fall back to the catalog entry for this filename
    spec = find_by_filename(filename, catalog if catalog is not None else FAVICON_SIZES)
    if spec is None or spec.width != spec.height:
        return None
    return spec.width

