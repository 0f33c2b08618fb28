from __future__ import annotations

import pytest

from faviconpack.cli import main
from faviconpack.utils.image import encode_png


@pytest.fixture
def src_path(tmp_path, square_image):
    p = tmp_path / "logo.png"
    p.write_bytes(encode_png(square_image))
    return p


def test_default_run(tmp_path, src_path, capsys):
    out = tmp_path / "out"
    assert main([str(src_path), "-o", str(out), "--html"]) == 0
    files = sorted(p.name for p in out.iterdir())
    assert files == sorted(
        [
            "favicon-16x16.png",
            "favicon-32x32.png",
            "favicon-48x48.png",
            "apple-touch-icon.png",
            "android-chrome-192x192.png",
            "android-chrome-512x512.png",
            "favicon.ico",
            "favicons.zip",
        ]
    )
    printed = capsys.readouterr().out
    assert '<link rel="apple-touch-icon" sizes="180x180" href="/apple-touch-icon.png">' in printed
    assert "[Bundle] wrote" in printed
    assert "(image/x-icon," in printed
    assert "(application/zip," in printed


def test_selected_sizes_without_extras(tmp_path, src_path):
    out = tmp_path / "out"
    rc = main([str(src_path), "-o", str(out), "--sizes", "16,64x64", "--no-ico", "--no-zip", "-q", "--backend", "opencv"])
    assert rc == 0
    assert sorted(p.name for p in out.iterdir()) == ["favicon-16x16.png", "favicon-64x64.png"]


def test_all_sizes_parallel(tmp_path, src_path):
    out = tmp_path / "out"
    assert main([str(src_path), "-o", str(out), "--all", "--workers", "4", "-q"]) == 0
    assert (out / "favicon-256x256.png").exists()


def test_output_dir_from_env(monkeypatch, tmp_path, src_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FAVICON_OUTPUT_DIR", "public")
    assert main([str(src_path), "--sizes", "32", "-q"]) == 0
    assert (tmp_path / "public" / "favicon-32x32.png").exists()


def test_env_can_disable_zip(monkeypatch, tmp_path, src_path):
    monkeypatch.setenv("FAVICON_INCLUDE_ZIP", "0")
    out = tmp_path / "out"
    assert main([str(src_path), "-o", str(out), "--sizes", "16", "-q"]) == 0
    assert not (out / "favicons.zip").exists()
    assert (out / "favicon.ico").exists()


def test_bad_source_exit_code(tmp_path, capsys):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    assert main([str(bad), "-o", str(tmp_path / "out")]) == 2
    assert "[App] error:" in capsys.readouterr().out


def test_oversized_source_exit_code(monkeypatch, tmp_path, src_path, capsys):
    from PIL import Image

    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    assert main([str(src_path), "-o", str(tmp_path / "out"), "-q"]) == 2
    assert not (tmp_path / "out").exists()


def test_unknown_size_exit_code(tmp_path, src_path):
    assert main([str(src_path), "-o", str(tmp_path / "out"), "--sizes", "17", "-q"]) == 2


def test_partial_failure_exit_code(monkeypatch, tmp_path, src_path):
    from faviconpack.errors import RenderError
    from faviconpack.utils import image as image_utils

    original = image_utils.PillowResizer.resize

    def flaky(self, source, width, height):
        if width == 48:
            raise RenderError("no surface", width, height)
        return original(self, source, width, height)

    monkeypatch.setattr(image_utils.PillowResizer, "resize", flaky)
    out = tmp_path / "out"
    assert main([str(src_path), "-o", str(out), "-q"]) == 1
    assert not (out / "favicon-48x48.png").exists()
    assert (out / "favicon-16x16.png").exists()


def test_list(capsys):
    assert main(["--list"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 9
    assert lines[0].startswith("* 16x16")


def test_missing_source():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 2


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__]))
