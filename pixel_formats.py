"""
pixel_formats.py — per-pixel conversions between TGA storage and RGB(A).

In memory a pixel is R,G,B[,A]. On disk it is one of:
- B,G,R[,A] bytes (24/32-bit true-color),
- a little-endian packed16 word: A|RRRRR|GGGGG|BBBBB (15/16-bit true-color),
- luma, or luma + alpha (8/16-bit grayscale),
- a palette index (see palette.py).

The single-pixel functions are pure. The *Format classes wrap them into the
strategy objects the codec dispatches on: each knows its stored unit size,
how many channels it decodes to, and how to convert one unit each way.
"""

from __future__ import annotations
from typing import Sequence


# ---------------------------------------------------------------------
# Channel order
# ---------------------------------------------------------------------
def bgr_to_rgb(unit: Sequence[int]) -> bytes:
    """Swap channels 0 and 2; a fourth (alpha) byte passes through.

    When converting in place into a buffer that also holds the source, the
    alpha byte must be written before the color bytes. These functions always
    return a fresh object, so callers never alias source and destination.
    """
    if len(unit) == 4:
        return bytes((unit[2], unit[1], unit[0], unit[3]))
    return bytes((unit[2], unit[1], unit[0]))


rgb_to_bgr = bgr_to_rgb


# ---------------------------------------------------------------------
# Packed 5-5-5 (+ alpha bit)
# ---------------------------------------------------------------------
def rgb_to_packed16(pixel: Sequence[int], channels: int) -> int:
    word = (pixel[0] >> 3) << 10
    word |= (pixel[1] >> 3) << 5
    word |= pixel[2] >> 3
    # alpha bit: always set without an alpha channel, else set for any non-zero alpha
    if channels != 4 or pixel[3]:
        word |= 0x8000
    return word


def packed16_to_rgb(word: int, channels: int) -> bytes:
    r = ((word >> 10) & 0x1F) << 3
    g = ((word >> 5) & 0x1F) << 3
    b = (word & 0x1F) << 3
    if channels == 4:
        return bytes((r, g, b, 255 if word & 0x8000 else 0))
    return bytes((r, g, b))


# ---------------------------------------------------------------------
# Grayscale
# ---------------------------------------------------------------------
def rgb_to_luma(pixel: Sequence[int], channels: int, with_alpha: bool) -> bytes:
    """s = (R + G + B) // 3, followed by alpha (255 when the source has none) if requested."""
    luma = (pixel[0] + pixel[1] + pixel[2]) // 3
    if not with_alpha:
        return bytes((luma,))
    alpha = pixel[3] if channels == 4 else 255
    return bytes((luma, alpha))


def luma_to_rgb(unit: Sequence[int]) -> bytes:
    luma = unit[0]
    if len(unit) == 2:
        return bytes((luma, luma, luma, unit[1]))
    return bytes((luma, luma, luma))


# ---------------------------------------------------------------------
# Format strategies
# ---------------------------------------------------------------------
class PixelFormat:
    """One stored pixel representation.

    unit_size: bytes per pixel on disk.
    channels:  channels per pixel after decoding.
    bits:      the header's bits-per-pixel value for this representation.
    """

    name = "abstract"
    unit_size = 0
    channels = 0
    bits = 0

    def decode(self, unit: bytes) -> bytes:
        raise NotImplementedError

    def encode(self, pixel: bytes) -> bytes:
        raise NotImplementedError

    def decode_units(self, data: bytes, count: int) -> bytearray:
        """Decode `count` consecutive units from `data` into an RGB(A) buffer."""
        size = self.unit_size
        out = bytearray()
        for i in range(0, count * size, size):
            out += self.decode(data[i:i + size])
        return out

    def __repr__(self):
        return f"<{type(self).__name__} {self.name} {self.bits}-bit>"


class TrueColorFormat(PixelFormat):
    def __init__(self, channels: int):
        self.channels = channels
        self.unit_size = channels
        self.bits = channels * 8
        self.name = "BGRA" if channels == 4 else "BGR"

    def decode(self, unit: bytes) -> bytes:
        return bgr_to_rgb(unit)

    def encode(self, pixel: bytes) -> bytes:
        return rgb_to_bgr(pixel)

    def decode_units(self, data: bytes, count: int) -> bytearray:
        # Whole-buffer swap of the first and third byte of every pixel
        n = count * self.unit_size
        out = bytearray(data[:n])
        out[0::self.unit_size] = data[2:n:self.unit_size]
        out[2::self.unit_size] = data[0:n:self.unit_size]
        return out


class Packed16Format(PixelFormat):
    unit_size = 2

    def __init__(self, channels: int):
        self.channels = channels
        self.bits = 16 if channels == 4 else 15
        self.name = "ARGB1555" if channels == 4 else "RGB555"

    def decode(self, unit: bytes) -> bytes:
        return packed16_to_rgb(unit[0] | (unit[1] << 8), self.channels)

    def encode(self, pixel: bytes) -> bytes:
        # channels of the *source* pixel decides the alpha bit
        return rgb_to_packed16(pixel, len(pixel)).to_bytes(2, "little")


class LumaFormat(PixelFormat):
    def __init__(self, with_alpha: bool):
        self.with_alpha = with_alpha
        self.unit_size = 2 if with_alpha else 1
        self.channels = 4 if with_alpha else 3
        self.bits = 16 if with_alpha else 8
        self.name = "LA" if with_alpha else "L"

    def decode(self, unit: bytes) -> bytes:
        return luma_to_rgb(unit)

    def encode(self, pixel: bytes) -> bytes:
        return rgb_to_luma(pixel, len(pixel), self.with_alpha)
