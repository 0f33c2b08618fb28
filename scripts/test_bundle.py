from __future__ import annotations

import io
import os
import zipfile

import pytest

from faviconpack.bundle import build_bundle, html_snippet, write_bundle
from faviconpack.catalog import FAVICON_SIZES, select_specs
from faviconpack.errors import RenderError, SourceImageError
from faviconpack.ico import parse_ico
from faviconpack.utils.image import PillowResizer, encode_png, png_size
from faviconpack.utils.logging import RunLogger


class Fail32(PillowResizer):
    def resize(self, source, width, height):
        if width == 32:
            raise RenderError("no surface", width, height)
        return super().resize(source, width, height)


def _quiet():
    return RunLogger(quiet=True)


def test_default_bundle(square_image):
    bundle = build_bundle(square_image, resizer=PillowResizer(), logger=_quiet())
    assert bundle.ok
    assert list(bundle.assets) == [
        "favicon-16x16.png",
        "favicon-32x32.png",
        "favicon-48x48.png",
        "apple-touch-icon.png",
        "android-chrome-192x192.png",
        "android-chrome-512x512.png",
    ]
    ico_entries = parse_ico(bundle.ico)
    assert [e.size for e in ico_entries] == [16, 32, 48]
    assert ico_entries[1].data == bundle.assets["favicon-32x32.png"].data

    with zipfile.ZipFile(io.BytesIO(bundle.zip)) as zf:
        names = zf.namelist()
        assert sorted(names) == sorted(list(bundle.assets) + ["favicon.ico"])
        assert zf.read("favicon.ico") == bundle.ico
        assert zf.read("apple-touch-icon.png") == bundle.assets["apple-touch-icon.png"].data


def test_bundle_from_encoded_bytes(wide_image):
    messages = []
    bundle = build_bundle(
        encode_png(wide_image), select_specs(["16", "180x180"]), resizer=PillowResizer(), logger=RunLogger(messages.append)
    )
    assert png_size(bundle.assets["apple-touch-icon.png"].data) == (180, 180)
    assert any("non-square" in m for m in messages)
    assert [e.size for e in parse_ico(bundle.ico)] == [16]


def test_partial_failure_still_packages(square_image):
    bundle = build_bundle(square_image, resizer=Fail32(), logger=_quiet())
    assert not bundle.ok
    assert list(bundle.failures) == ["favicon-32x32.png"]
    assert [e.size for e in parse_ico(bundle.ico)] == [16, 48]
    with zipfile.ZipFile(io.BytesIO(bundle.zip)) as zf:
        assert "favicon-32x32.png" not in zf.namelist()


def test_optional_outputs(square_image):
    bundle = build_bundle(square_image, include_ico=False, include_zip=False, resizer=PillowResizer(), logger=_quiet())
    assert bundle.ico is None
    assert bundle.zip is None
    assert "favicon.ico" not in bundle.files()


def test_no_ico_without_small_sizes(square_image):
    specs = select_specs(["192", "512"])
    bundle = build_bundle(square_image, specs, resizer=PillowResizer(), logger=_quiet())
    assert bundle.ico is None
    with zipfile.ZipFile(io.BytesIO(bundle.zip)) as zf:
        assert sorted(zf.namelist()) == ["android-chrome-192x192.png", "android-chrome-512x512.png"]


def test_empty_selection(square_image):
    bundle = build_bundle(square_image, [], resizer=PillowResizer(), logger=_quiet())
    assert bundle.assets == {}
    assert bundle.ico is None and bundle.zip is None


def test_env_names_and_ico_sizes(monkeypatch, square_image):
    monkeypatch.setenv("FAVICON_ICO_NAME", "site")
    monkeypatch.setenv("FAVICON_ICO_SIZES", "48,16,abc,999")
    bundle = build_bundle(square_image, FAVICON_SIZES, resizer=PillowResizer(), logger=_quiet())
    assert bundle.ico_name == "site.ico"
    assert [e.size for e in parse_ico(bundle.ico)] == [16, 48]
    assert "site.ico" in bundle.files()


def test_explicit_ico_sizes_include_256(square_image):
    bundle = build_bundle(square_image, FAVICON_SIZES, ico_sizes=(16, 256), resizer=PillowResizer(), logger=_quiet())
    entries = parse_ico(bundle.ico)
    assert [e.size for e in entries] == [16, 256]
    assert bundle.ico[6 + 16] == 0


def test_bad_source():
    with pytest.raises(SourceImageError):
        build_bundle(b"definitely not an image", logger=_quiet())


def test_write_bundle(tmp_path, square_image):
    bundle = build_bundle(square_image, resizer=PillowResizer(), logger=_quiet())
    written = write_bundle(bundle, str(tmp_path / "out"))
    names = [os.path.basename(p) for p in written]
    assert names[-1] == "favicons.zip"
    assert "favicon.ico" in names
    assert (tmp_path / "out" / "favicon-16x16.png").read_bytes() == bundle.assets["favicon-16x16.png"].data


def test_write_bundle_logs_mime_types(tmp_path, square_image):
    bundle = build_bundle(square_image, select_specs(["16"]), resizer=PillowResizer(), logger=_quiet())
    messages = []
    write_bundle(bundle, str(tmp_path), logger=RunLogger(messages.append))
    assert len(messages) == 3
    assert all(m.startswith("[Bundle] wrote ") for m in messages)
    assert "(image/png, " in messages[0]
    assert "(image/x-icon, " in messages[1]
    assert "(application/zip, " in messages[2]


def test_write_bundle_zip_name_from_env(monkeypatch, tmp_path, square_image):
    monkeypatch.setenv("FAVICON_ZIP_NAME", "icons")
    bundle = build_bundle(square_image, select_specs(["16"]), resizer=PillowResizer(), logger=_quiet())
    written = write_bundle(bundle, str(tmp_path))
    assert os.path.basename(written[-1]) == "icons.zip"


def test_html_snippet():
    html = html_snippet(["favicon-16x16.png", "favicon-32x32.png", "apple-touch-icon.png", "favicon.ico"])
    assert html.splitlines() == [
        '<link rel="icon" type="image/x-icon" href="/favicon.ico">',
        '<link rel="icon" type="image/png" sizes="16x16" href="/favicon-16x16.png">',
        '<link rel="icon" type="image/png" sizes="32x32" href="/favicon-32x32.png">',
        '<link rel="apple-touch-icon" sizes="180x180" href="/apple-touch-icon.png">',
        '<link rel="manifest" href="/site.webmanifest">',
    ]


def test_html_snippet_without_files():
    assert html_snippet([]) == '<link rel="manifest" href="/site.webmanifest">'


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__]))
