from __future__ import annotations

import concurrent.futures
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

from PIL import Image

from faviconpack.catalog import SizeSpec
from faviconpack.errors import PreconditionError, RenderError
from faviconpack.utils import image as image_utils
from faviconpack.utils import paths as paths_utils
from faviconpack.utils.logging import RunLogger


class GeneratedAsset(NamedTuple):
    filename: str
    data: bytes
    width: int
    height: int

    mime_type = "image/png"


class EntryResult(NamedTuple):
    """Outcome for one spec: exactly one of `asset` / `error` is set."""

    spec: SizeSpec
    asset: Optional[GeneratedAsset] = None
    error: Optional[RenderError] = None

    @property
    def ok(self) -> bool:
        return self.asset is not None


class GenerationResult:
    """Per-spec results of one generate() call, in the order specs were given."""

    def __init__(self, entries: Sequence[EntryResult]) -> None:
        self.entries: List[EntryResult] = list(entries)

    def assets(self) -> Dict[str, GeneratedAsset]:
        return {e.spec.filename: e.asset for e in self.entries if e.asset is not None}

    def failures(self) -> Dict[str, RenderError]:
        return {e.spec.filename: e.error for e in self.entries if e.error is not None}

    @property
    def ok(self) -> bool:
        return all(e.ok for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def _check_unique_filenames(specs: Iterable[SizeSpec]) -> None:
    seen = set()
    dupes = []
    for s in specs:
        if s.filename in seen and s.filename not in dupes:
            dupes.append(s.filename)
        seen.add(s.filename)
    if dupes:
        raise PreconditionError(f"Duplicate output filename(s): {', '.join(dupes)}")


def _render_one(source: Image.Image, spec: SizeSpec, resizer: image_utils.Resizer) -> EntryResult:
    try:
        data = image_utils.resize(source, spec.width, spec.height, resizer=resizer)
    except RenderError as e:
        return EntryResult(spec, error=e)
    except PreconditionError:
        raise
    except Exception as e:
        # Resizers outside this package may raise anything
        err = RenderError(f"Resize to {spec.width}x{spec.height} failed: {e}", spec.width, spec.height)
        err.__cause__ = e
        return EntryResult(spec, error=err)
    return EntryResult(spec, asset=GeneratedAsset(spec.filename, data, spec.width, spec.height))


def generate(
    source: Image.Image,
    specs: Sequence[SizeSpec],
    resizer: Optional[image_utils.Resizer] = None,
    workers: Optional[int] = None,
    logger: Optional[RunLogger] = None,
) -> GenerationResult:
    """Resize `source` once per spec, keyed by spec filename.

    A failing size is recorded as an error entry and the rest still run.
    With `workers` > 1 the resizes run on a thread pool; the result is the
    same as the sequential run.
    """
    specs = list(specs)
    _check_unique_filenames(specs)
    log = (logger or RunLogger(quiet=True)).child("Generate")
    if not specs:
        return GenerationResult([])

    r = resizer or image_utils.get_default_resizer()
    n_workers = paths_utils.get_workers() if workers is None else max(1, int(workers))
    n_workers = min(n_workers, len(specs))

    if n_workers <= 1:
        entries = [_render_one(source, s, r) for s in specs]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=n_workers) as ex:
            futures = [ex.submit(_render_one, source, s, r) for s in specs]
            entries = [f.result() for f in futures]

    for e in entries:
        if e.error is not None:
            log.log(f"{e.spec.filename}: {e.error}")
    ok = sum(1 for e in entries if e.ok)
    log.log(f"generated {ok}/{len(entries)} favicon(s)")
    return GenerationResult(entries)
