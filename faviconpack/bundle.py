from __future__ import annotations

import os
import re
from typing import Dict, Iterable, List, Optional, Sequence

from faviconpack import archive, ico
from faviconpack.catalog import FAVICON_SIZES, SizeSpec, default_specs
from faviconpack.errors import RenderError
from faviconpack.generator import GeneratedAsset, GenerationResult, generate
from faviconpack.utils import image as image_utils
from faviconpack.utils import paths as paths_utils
from faviconpack.utils.logging import RunLogger


class AssetBundle:
    """Everything one generate run produced. Replaced wholesale on the next run."""

    def __init__(
        self,
        result: GenerationResult,
        ico_data: Optional[bytes] = None,
        zip_data: Optional[bytes] = None,
        ico_name: str = "favicon.ico",
    ) -> None:
        self.result = result
        self.assets: Dict[str, GeneratedAsset] = result.assets()
        self.failures: Dict[str, RenderError] = result.failures()
        self.ico = ico_data
        self.zip = zip_data
        self.ico_name = ico_name

    @property
    def ok(self) -> bool:
        return not self.failures

    def files(self) -> Dict[str, bytes]:
        """Filename to bytes for every individual output (PNGs and ICO)."""
        out = {name: a.data for name, a in self.assets.items()}
        if self.ico is not None:
            out[self.ico_name] = self.ico
        return out

    def html(self) -> str:
        return html_snippet(self.files().keys(), ico_name=self.ico_name)


def build_bundle(
    source: image_utils.SourceLike,
    specs: Optional[Sequence[SizeSpec]] = None,
    include_ico: bool = True,
    include_zip: bool = True,
    ico_sizes: Optional[Sequence[int]] = None,
    resizer: Optional[image_utils.Resizer] = None,
    workers: Optional[int] = None,
    logger: Optional[RunLogger] = None,
) -> AssetBundle:
    """Run the whole pipeline: resize every spec, then ICO, then ZIP.

    `specs` defaults to the catalog entries selected by default. Failed sizes
    end up in `bundle.failures`; the ICO and ZIP are built from whatever
    succeeded.
    """
    log = logger or RunLogger()
    blog = log.child("Bundle")
    img = image_utils.load_source(source)
    if not image_utils.is_square(img):
        blog.log(f"source is {img.width}x{img.height}; non-square images are stretched")
    if specs is None:
        specs = default_specs()

    result = generate(img, specs, resizer=resizer, workers=workers, logger=log)
    assets = result.assets()

    ico_name = paths_utils.get_ico_name()
    ico_data = None
    if include_ico and assets:
        sizes = tuple(ico_sizes) if ico_sizes is not None else paths_utils.get_ico_sizes()
        ico_data = ico.build_favicon_ico(assets, sizes=sizes, catalog=specs, logger=log)

    zip_data = None
    if include_zip and assets:
        extra = (ico_name, ico_data) if ico_data is not None else None
        zip_data = archive.package_zip(assets, extra=extra, logger=log)

    blog.log(f"{len(assets)} image(s), {len(result.failures())} failure(s)")
    return AssetBundle(result, ico_data, zip_data, ico_name=ico_name)


def write_bundle(
    bundle: AssetBundle,
    out_dir: str,
    zip_name: Optional[str] = None,
    logger: Optional[RunLogger] = None,
) -> List[str]:
    """Write every file of the bundle (and the ZIP, if built) into `out_dir`.

    Returns the written paths in write order.
    """
    log = (logger or RunLogger(quiet=True)).child("Bundle")
    os.makedirs(out_dir, exist_ok=True)
    outputs = [(name, a.data, a.mime_type) for name, a in bundle.assets.items()]
    if bundle.ico is not None:
        outputs.append((bundle.ico_name, bundle.ico, ico.MIME_TYPE))
    if bundle.zip is not None:
        outputs.append((zip_name or paths_utils.get_zip_name(), bundle.zip, archive.MIME_TYPE))
    written: List[str] = []
    for name, data, mime in outputs:
        path = os.path.join(out_dir, name)
        with open(path, "wb") as f:
            f.write(data)
        written.append(path)
        log.log(f"wrote {path} ({mime}, {len(data)} bytes)")
    return written


_FAVICON_PNG_RE = re.compile(r"^favicon-(?P<w>\d+)x(?P<h>\d+)\.png$")


def html_snippet(filenames: Iterable[str], ico_name: str = "favicon.ico") -> str:
    """Return the <link> tags for the generated files, one per line."""
    names = set(filenames)
    lines: List[str] = []
    if ico_name in names:
        lines.append(f'<link rel="icon" type="image/x-icon" href="/{ico_name}">')
    for spec in FAVICON_SIZES:
        if spec.filename not in names:
            continue
        if _FAVICON_PNG_RE.match(spec.filename):
            lines.append(
                f'<link rel="icon" type="image/png" sizes="{spec.name}" href="/{spec.filename}">'
            )
        elif spec.filename == "apple-touch-icon.png":
            lines.append(f'<link rel="apple-touch-icon" sizes="{spec.name}" href="/{spec.filename}">')
    lines.append('<link rel="manifest" href="/site.webmanifest">')
    return "\n".join(lines)

