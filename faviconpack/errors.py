from __future__ import annotations


class FaviconError(Exception):
    """Base class for every error raised by the favicon pipeline."""


class RenderError(FaviconError):
    """A resize/encode produced no usable bitmap.

    Recoverable per entry: the generator records it and moves on.
    """

    def __init__(self, message: str, width: int = 0, height: int = 0) -> None:
        super().__init__(message)
        self.width = width
        self.height = height


class PreconditionError(FaviconError, ValueError):
    """Caller passed input the pipeline refuses to correct silently."""


class ArchiveError(FaviconError):
    """ZIP assembly failed; no partial archive is returned."""


class IcoFormatError(FaviconError, ValueError):
    """Bytes handed to the ICO reader are not a well-formed icon file."""


class SourceImageError(FaviconError):
    """The source could not be decoded as an image."""
