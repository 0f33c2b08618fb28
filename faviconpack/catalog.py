from __future__ import annotations

from typing import Iterable, NamedTuple, Tuple

from faviconpack.errors import PreconditionError


class SizeSpec(NamedTuple):
    name: str
    width: int
    height: int
    filename: str
    description: str
    default_selected: bool


# Filenames are referenced by the <link> tags users paste into their HTML;
# renaming any of them breaks that integration.
FAVICON_SIZES: Tuple[SizeSpec, ...] = (
    SizeSpec("16x16", 16, 16, "favicon-16x16.png", "Standard favicon", True),
    SizeSpec("32x32", 32, 32, "favicon-32x32.png", "High-DPI favicon", True),
    SizeSpec("48x48", 48, 48, "favicon-48x48.png", "Windows", True),
    SizeSpec("64x64", 64, 64, "favicon-64x64.png", "Zoomed display", False),
    SizeSpec("128x128", 128, 128, "favicon-128x128.png", "Chrome Web Store", False),
    SizeSpec("180x180", 180, 180, "apple-touch-icon.png", "Apple Touch Icon", True),
    SizeSpec("192x192", 192, 192, "android-chrome-192x192.png", "Android Chrome", True),
    SizeSpec("256x256", 256, 256, "favicon-256x256.png", "High resolution", False),
    SizeSpec("512x512", 512, 512, "android-chrome-512x512.png", "Android Chrome (large)", True),
)

# Sizes packed into favicon.ico by default
ICO_SIZES: Tuple[int, ...] = (16, 32, 48)


def default_specs(catalog: Iterable[SizeSpec] = FAVICON_SIZES) -> Tuple[SizeSpec, ...]:
    return tuple(s for s in catalog if s.default_selected)


def select_specs(names: Iterable[str], catalog: Iterable[SizeSpec] = FAVICON_SIZES) -> Tuple[SizeSpec, ...]:
    """Pick catalog entries by name ("32x32") or bare size ("32").

    Result follows catalog order; asking twice for one entry returns it once.
    Unknown names raise PreconditionError.
    """
    catalog = tuple(catalog)
    lookup = {}
    for s in catalog:
        lookup[s.name.lower()] = s
        lookup[str(s.width)] = s
        lookup[s.filename.lower()] = s
    wanted = set()
    unknown = []
    for raw in names:
        key = str(raw).strip().lower()
        if not key:
            continue
        spec = lookup.get(key)
        if spec is None:
            unknown.append(str(raw))
            continue
        wanted.add(spec)
    if unknown:
        raise PreconditionError(f"Unknown favicon size(s): {', '.join(unknown)}")
    return tuple(s for s in catalog if s in wanted)


def find_by_filename(filename: str, catalog: Iterable[SizeSpec] = FAVICON_SIZES):
    for s in catalog:
        if s.filename == filename:
            return s
    return None
