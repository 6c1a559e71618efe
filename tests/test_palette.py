import numpy as np
import pytest

from palette import IndexedFormat, build_palette, entry_channels, palette_to_color_map, read_color_map
from tga_errors import InvalidPaletteIndex, TooManyColors


def test_first_seen_order():
    pixels = b"\x01\x01\x01" b"\x02\x02\x02" b"\x01\x01\x01" b"\x03\x03\x03"
    palette, indices = build_palette(pixels, 3)
    assert palette == [b"\x01\x01\x01", b"\x02\x02\x02", b"\x03\x03\x03"]
    assert list(indices) == [0, 1, 0, 2]


def test_alpha_distinguishes_colors():
    pixels = b"\x01\x02\x03\x00" b"\x01\x02\x03\xff"
    palette, indices = build_palette(pixels, 4)
    assert len(palette) == 2
    assert list(indices) == [0, 1]


def _distinct_pixels(n):
    values = np.arange(n, dtype=np.uint32)
    arr = np.stack([values & 0xFF, (values >> 8) & 0xFF, np.zeros_like(values)], axis=1)
    return arr.astype(np.uint8).tobytes()


def test_256_colors_fit():
    palette, indices = build_palette(_distinct_pixels(256), 3)
    assert len(palette) == 256
    assert indices[255] == 255


def test_257_colors_overflow():
    with pytest.raises(TooManyColors):
        build_palette(_distinct_pixels(257), 3)


def test_color_map_is_bgr_on_disk():
    assert palette_to_color_map([b"\x01\x02\x03", b"\x04\x05\x06"]) == b"\x03\x02\x01\x06\x05\x04"
    assert palette_to_color_map([b"\x01\x02\x03\x04"]) == b"\x03\x02\x01\x04"


def test_read_color_map_sizes():
    assert read_color_map(b"\x03\x02\x01\x06\x05\x04", 24) == [b"\x01\x02\x03", b"\x04\x05\x06"]
    assert read_color_map(b"\x03\x02\x01\x80", 32) == [b"\x01\x02\x03\x80"]
    assert read_color_map(b"\xff\xff", 16) == [b"\xf8\xf8\xf8\xff"]
    assert read_color_map(b"\xff\x7f", 15) == [b"\xf8\xf8\xf8"]
    with pytest.raises(ValueError):
        read_color_map(b"\x00", 8)


def test_indexed_format_first_entry_offset():
    fmt = IndexedFormat([b"\x0a\x0a\x0a", b"\x0b\x0b\x0b"], first_entry_index=10)
    assert fmt.decode(b"\x0b") == b"\x0b\x0b\x0b"
    assert fmt.decode_units(b"\x0a\x0b", 2) == b"\x0a\x0a\x0a\x0b\x0b\x0b"
    with pytest.raises(InvalidPaletteIndex):
        fmt.decode(b"\x0c")
    with pytest.raises(InvalidPaletteIndex):
        fmt.decode(b"\x00")


def test_indexed_format_channels_follow_entry_size():
    assert IndexedFormat([], channels=4).channels == 4
    assert IndexedFormat([b"\x01\x02\x03"]).channels == 3
    assert entry_channels(32) == 4 and entry_channels(16) == 4
    assert entry_channels(24) == 3 and entry_channels(15) == 3
