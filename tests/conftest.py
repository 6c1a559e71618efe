import numpy as np
import pytest

from tga_image import TGAImage


@pytest.fixture
def make_image():
    """Factory for random images drawn from a small set of colors."""

    def _make(width, height, channels=3, colors=16, seed=0, quantize=1, gray=False):
        rng = np.random.default_rng(seed)
        palette = rng.integers(0, 256, size=(colors, channels), dtype=np.int64)
        if gray:
            palette[:, 1] = palette[:, 0]
            palette[:, 2] = palette[:, 0]
        palette = (palette // quantize) * quantize
        if channels == 4 and quantize > 1:
            # packed16 only keeps an on/off alpha bit
            palette[:, 3] = np.where(palette[:, 3] >= 128, 255, 0)
        idx = rng.integers(0, colors, size=(height, width))
        return TGAImage.from_array(palette[idx].astype(np.uint8))

    return _make


@pytest.fixture
def solid_image():
    def _make(width, height, color=(10, 20, 30)):
        arr = np.zeros((height, width, len(color)), dtype=np.uint8)
        arr[:, :] = color
        return TGAImage.from_array(arr)

    return _make
