from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

from faviconpack.bundle import build_bundle, write_bundle
from faviconpack.catalog import FAVICON_SIZES, default_specs, select_specs
from faviconpack.errors import FaviconError
from faviconpack.utils import image as image_utils
from faviconpack.utils import paths as paths_utils
from faviconpack.utils.logging import RunLogger


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="faviconpack",
        description="Generate a favicon set (PNGs, favicon.ico, ZIP) from one image.",
    )
    p.add_argument("source", nargs="?", help="source image (PNG/JPEG/WEBP/...)")
    p.add_argument("-o", "--out", default=None, help="output directory (env FAVICON_OUTPUT_DIR)")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--sizes", default=None, help="comma separated sizes, e.g. 16,32,180 or 32x32")
    g.add_argument("--all", action="store_true", help="generate every catalog size")
    p.add_argument("--no-ico", action="store_true", help="skip favicon.ico")
    p.add_argument("--no-zip", action="store_true", help="skip the ZIP archive")
    p.add_argument("--backend", choices=("pillow", "opencv"), default=None, help="resize backend")
    p.add_argument("--resample", choices=("lanczos", "bicubic"), default=None, help="Pillow filter")
    p.add_argument("--workers", type=int, default=None, help="parallel resize workers")
    p.add_argument("--html", action="store_true", help="print the <link> tags to paste into <head>")
    p.add_argument("--list", action="store_true", help="list catalog sizes and exit")
    p.add_argument("-q", "--quiet", action="store_true")
    return p


def _make_resizer(backend: Optional[str], resample: Optional[str]) -> image_utils.Resizer:
    backend = backend or paths_utils.get_resize_backend()
    if backend == "opencv":
        return image_utils.OpenCvResizer()
    return image_utils.PillowResizer(resample)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    log = RunLogger(quiet=args.quiet)

    if args.list:
        for s in FAVICON_SIZES:
            mark = "*" if s.default_selected else " "
            print(f"{mark} {s.name:<8} {s.filename:<28} {s.description}")
        return 0
    if not args.source:
        parser.error("the following arguments are required: source")

    try:
        if args.all:
            specs = FAVICON_SIZES
        elif args.sizes:
            specs = select_specs(args.sizes.split(","))
        else:
            specs = default_specs()
        if not specs:
            log.log("no sizes selected", tag="App")
            return 2
        out_dir = args.out or paths_utils.get_output_dir(os.getcwd())
        bundle = build_bundle(
            args.source,
            specs,
            include_ico=not args.no_ico and paths_utils.env_bool("FAVICON_INCLUDE_ICO", True),
            include_zip=not args.no_zip and paths_utils.env_bool("FAVICON_INCLUDE_ZIP", True),
            resizer=_make_resizer(args.backend, args.resample),
            workers=args.workers,
            logger=log,
        )
        write_bundle(bundle, out_dir, logger=log)
    except FaviconError as e:
        log.log(f"error: {e}", tag="App")
        return 2
    except OSError as e:
        log.log(f"write failed: {e}", tag="App")
        return 2

    for name, err in bundle.failures.items():
        log.log(f"failed {name}: {err}", tag="App")
    if args.html:
        print(bundle.html())
    return 0 if bundle.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
