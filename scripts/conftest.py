from __future__ import annotations

import numpy as np
import pytest
from PIL import Image


def make_image(w: int, h: int, color: tuple[int, int, int, int] = (200, 40, 40, 255)) -> Image.Image:
    img = np.full((h, w, 4), color, dtype=np.uint8)
    # diagonal stripe so resizes are not trivially uniform
    for d in range(0, min(w, h), 4):
        img[d, d] = (255, 255, 255, 128)
    return Image.fromarray(img)


@pytest.fixture
def square_image() -> Image.Image:
    return make_image(600, 600)


@pytest.fixture
def wide_image() -> Image.Image:
    return make_image(300, 120, (20, 120, 220, 255))


@pytest.fixture
def image_factory():
    return make_image
