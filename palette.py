"""
palette.py — color maps for indexed (color-mapped) TGA images.

Writing: collect the distinct colors of an image in first-seen order (at most
256) and replace every pixel by its index. Reading: turn the on-disk color map
into RGB(A) entries once, then look indices up.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from pixel_formats import PixelFormat, bgr_to_rgb, packed16_to_rgb, rgb_to_bgr
from tga_errors import InvalidPaletteIndex, TooManyColors

MAX_COLORS = 256

Palette = List[bytes]


def build_palette(pixels: bytes, channels: int, limit: int = MAX_COLORS) -> Tuple[Palette, bytearray]:
    """Deduplicate pixel colors.

    Returns (palette, indices): palette entries are R,G,B[,A] byte strings in
    the order first seen, indices holds one palette index per pixel.
    Raises TooManyColors as soon as a (limit + 1)-th color turns up.
    """
    index_map: Dict[bytes, int] = {}
    palette: Palette = []
    indices = bytearray(len(pixels) // channels)
    for pixel_no, i in enumerate(range(0, len(pixels), channels)):
        color = bytes(pixels[i:i + channels])
        idx = index_map.get(color)
        if idx is None:
            if len(palette) >= limit:
                raise TooManyColors(limit)
            idx = index_map[color] = len(palette)
            palette.append(color)
        indices[pixel_no] = idx
    return palette, indices


def palette_to_color_map(palette: Sequence[bytes]) -> bytes:
    """On-disk color map bytes: entries in palette order, channels B,G,R[,A]."""
    return b"".join(rgb_to_bgr(color) for color in palette)


def read_color_map(data: bytes, entry_size: int) -> Palette:
    """Decode a color-map block into R,G,B[,A] entries.

    24/32-bit entries are B,G,R[,A] bytes; 15/16-bit entries are packed16
    words. Any other entry size raises ValueError.
    """
    if entry_size in (24, 32):
        step = entry_size // 8
        return [bgr_to_rgb(data[i:i + step]) for i in range(0, len(data) - step + 1, step)]
    if entry_size in (15, 16):
        channels = entry_channels(entry_size)
        return [packed16_to_rgb(data[i] | (data[i + 1] << 8), channels) for i in range(0, len(data) - 1, 2)]
    raise ValueError(f"Unsupported color-map entry size: {entry_size} bits")


def entry_channels(entry_size: int) -> int:
    """Channels a color-map entry decodes to: 4 for 16/32-bit entries, else 3."""
    return 4 if entry_size in (16, 32) else 3


class IndexedFormat(PixelFormat):
    """8-bit palette indices; `first_entry_index` is the index of palette[0].

    Decode only: writing indexed images goes through build_palette.
    """

    unit_size = 1
    bits = 8
    name = "indexed"

    def __init__(self, palette: Palette, first_entry_index: int = 0, channels: Optional[int] = None):
        self.palette = palette
        self.first_entry_index = first_entry_index
        if channels is None:
            channels = len(palette[0]) if palette else 3
        self.channels = channels

    def lookup(self, index: int) -> bytes:
        entry = index - self.first_entry_index
        if not 0 <= entry < len(self.palette):
            raise InvalidPaletteIndex(index, len(self.palette))
        return self.palette[entry]

    def decode(self, unit: bytes) -> bytes:
        return self.lookup(unit[0])

    def decode_units(self, data: bytes, count: int) -> bytearray:
        out = bytearray()
        for index in data[:count]:
            out += self.lookup(index)
        return out
