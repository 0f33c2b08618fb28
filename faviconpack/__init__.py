"""Favicon set generator and packager.

This package contains:
- catalog: the fixed table of favicon sizes and output filenames
- utils: source loading and resizing, logging, env-driven paths/settings
- generator: runs the resizer across a catalog selection
- ico: ICO container writer/reader (PNG payloads)
- archive: ZIP packaging of the generated files
- bundle: the whole pipeline in one call, plus the HTML link snippet
- threads: background worker for running a bundle build off the caller's thread

Keep runtime dependencies minimal and avoid side effects on import.
"""

from faviconpack.catalog import FAVICON_SIZES, SizeSpec
from faviconpack.errors import (
    ArchiveError,
    FaviconError,
    IcoFormatError,
    PreconditionError,
    RenderError,
    SourceImageError,
)

__version__ = "0.1.0"

__all__ = [
    "FAVICON_SIZES",
    "SizeSpec",
    "ArchiveError",
    "FaviconError",
    "IcoFormatError",
    "PreconditionError",
    "RenderError",
    "SourceImageError",
]
