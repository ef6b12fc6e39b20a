"""Shared test fixtures: synthetic RGBA buffers."""

import numpy as np
import pytest
from PIL import Image

from glitchtrip.core import PixelBuffer


@pytest.fixture
def gray_buf():
    """4x4 opaque mid-gray."""
    return PixelBuffer.filled(4, 4, (128, 128, 128, 255))


@pytest.fixture
def noisy_buf():
    """48x32 opaque buffer of random colors."""
    rng = np.random.default_rng(42)
    px = rng.integers(0, 256, size=(32, 48, 4), dtype=np.uint8)
    px[:, :, 3] = 255
    return PixelBuffer(px)


@pytest.fixture
def unique_buf():
    """24x16 buffer where every pixel has a distinct packed value."""
    idx = np.arange(24 * 16, dtype=np.uint32).reshape(16, 24)
    return PixelBuffer.from_packed(idx | np.uint32(0xFF000000))


@pytest.fixture
def gray_png(tmp_path):
    """A 16x12 mid-gray PNG on disk."""
    path = str(tmp_path / "gray.png")
    Image.new("RGBA", (16, 12), (128, 128, 128, 255)).save(path)
    return path
