from __future__ import annotations

import io
import os
import struct
from typing import Optional, Protocol, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from faviconpack.errors import PreconditionError, RenderError, SourceImageError
from faviconpack.utils import paths as paths_utils


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

SourceLike = Union[Image.Image, np.ndarray, bytes, bytearray, str, os.PathLike]

_RESAMPLE = {
    "lanczos": Image.Resampling.LANCZOS,
    "bicubic": Image.Resampling.BICUBIC,
}


class Resizer(Protocol):
    def resize(self, source: Image.Image, width: int, height: int) -> bytes: ...


def load_source(obj: SourceLike) -> Image.Image:
    """Decode `obj` into an RGBA Pillow image.

    Accepts a Pillow image, a uint8 numpy array (HxW, HxWx3 RGB, HxWx4 RGBA),
    raw encoded bytes, or a path. The caller's image/array is not modified.
    """
    if isinstance(obj, Image.Image):
        img = obj
    elif isinstance(obj, np.ndarray):
        img = _image_from_array(obj)
    elif isinstance(obj, (bytes, bytearray)):
        img = _open_image(io.BytesIO(bytes(obj)), "<bytes>")
    elif isinstance(obj, (str, os.PathLike)):
        path = os.fspath(obj)
        if not os.path.isfile(path):
            raise SourceImageError(f"Source image not found: {path}")
        with open(path, "rb") as f:
            img = _open_image(io.BytesIO(f.read()), path)
    else:
        raise SourceImageError(f"Unsupported source type: {type(obj).__name__}")
    if img.width <= 0 or img.height <= 0:
        raise SourceImageError("Source image has no pixels")
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return img


def _open_image(fp: io.BytesIO, label: str) -> Image.Image:
    try:
        img = Image.open(fp)
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise SourceImageError(f"Not a readable image: {label} ({e})") from e
    return img


def _image_from_array(arr: np.ndarray) -> Image.Image:
    if arr.dtype != np.uint8:
        raise SourceImageError(f"Unsupported array dtype: {arr.dtype}")
    # L, RGB or RGBA
    if arr.ndim == 2 or (arr.ndim == 3 and arr.shape[2] in (3, 4)):
        return Image.fromarray(arr)
    raise SourceImageError(f"Unsupported array shape: {arr.shape}")


def is_square(img: Image.Image) -> bool:
    return img.width == img.height


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_size(data: bytes) -> Optional[Tuple[int, int]]:
    """Return (width, height) from a PNG IHDR chunk, or None if not a PNG."""
    if len(data) < 24 or data[:8] != PNG_SIGNATURE:
        return None
    if data[12:16] != b"IHDR":
        return None
    width, height = struct.unpack(">II", data[16:24])
    return width, height


class PillowResizer:
    """Stretch-resize with a Pillow high quality filter (LANCZOS or BICUBIC)."""

    def __init__(self, resample: Optional[str] = None) -> None:
        name = (resample or paths_utils.get_resample_name()).lower()
        if name not in _RESAMPLE:
            raise PreconditionError(f"Unknown resample filter: {resample}")
        self.resample_name = name
        self._resample = _RESAMPLE[name]

    def resize(self, source: Image.Image, width: int, height: int) -> bytes:
        try:
            out = source.resize((width, height), self._resample)
            data = encode_png(out)
        except (OSError, ValueError, MemoryError) as e:
            raise RenderError(f"Resize to {width}x{height} failed: {e}", width, height) from e
        if not data:
            raise RenderError(f"Resize to {width}x{height} produced no data", width, height)
        return data


class OpenCvResizer:
    """Stretch-resize with OpenCV: INTER_AREA when shrinking, INTER_CUBIC when enlarging."""

    def resize(self, source: Image.Image, width: int, height: int) -> bytes:
        try:
            arr = np.array(source)
            shrinking = width <= source.width and height <= source.height
            interp = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
            resized = cv2.resize(arr, (width, height), interpolation=interp)
            data = encode_png(Image.fromarray(resized))
        except (cv2.error, OSError, ValueError, MemoryError) as e:
            raise RenderError(f"Resize to {width}x{height} failed: {e}", width, height) from e
        if not data:
            raise RenderError(f"Resize to {width}x{height} produced no data", width, height)
        return data


def get_default_resizer() -> Resizer:
    if paths_utils.get_resize_backend() == "opencv":
        return OpenCvResizer()
    return PillowResizer()


def resize(source: Image.Image, width: int, height: int, resizer: Optional[Resizer] = None) -> bytes:
    """Resize `source` to exactly width x height and return PNG bytes.

    Aspect ratio is not preserved; the image is stretched to fit.
    """
    for label, v in (("width", width), ("height", height)):
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise PreconditionError(f"{label} must be a positive integer, got {v!r}")
    if source.mode != "RGBA":
        source = source.convert("RGBA")
    r = resizer or get_default_resizer()
    return r.resize(source, width, height)
