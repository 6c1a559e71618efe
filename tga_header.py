"""
tga_header.py — the fixed 18-byte TGA header.

Layout (little-endian):
    0   id_length            (B)
    1   color_map_type       (B)   0 = none, 1 = present
    2   image_type           (B)   see TYPE_* below
    3   first_entry_index    (H)
    5   color_map_length     (H)
    7   color_map_entry_size (B)   bits per color-map entry
    8   x_origin             (H)
    10  y_origin             (H)
    12  width                (H)
    14  height               (H)
    16  bits_per_pixel       (B)
    17  descriptor           (B)

An optional image-ID field of `id_length` bytes follows the header; it is
skipped, never kept.
"""

from __future__ import annotations
import enum
import io
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO

from tga_errors import InvalidHeader, TruncatedStream

log = logging.getLogger(__name__)

TGA_HEADER_FMT = "<BBBHHBHHHHBB"
TGA_HEADER_SIZE = struct.calcsize(TGA_HEADER_FMT)  # 18

TYPE_NO_IMAGE = 0
TYPE_MAPPED = 1
TYPE_RGB = 2
TYPE_BW = 3
TYPE_MAPPED_RLE = 9
TYPE_RGB_RLE = 10
TYPE_BW_RLE = 11

TYPE_NAMES = {
    TYPE_NO_IMAGE: "No image",
    TYPE_MAPPED: "Color-mapped",
    TYPE_RGB: "True-color",
    TYPE_BW: "Grayscale",
    TYPE_MAPPED_RLE: "Color-mapped, RLE",
    TYPE_RGB_RLE: "True-color, RLE",
    TYPE_BW_RLE: "Grayscale, RLE",
}

RLE_TYPES = (TYPE_MAPPED_RLE, TYPE_RGB_RLE, TYPE_BW_RLE)


class TGAType(enum.IntEnum):
    """The ten encodings an image can be written as."""

    MAPPED = 0
    RGB = 1
    RGB16 = 2
    BW = 3
    BW8 = 4
    MAPPED_RLE = 5
    RGB_RLE = 6
    RGB16_RLE = 7
    BW_RLE = 8
    BW8_RLE = 9

    @property
    def image_type(self) -> int:
        return _IMAGE_TYPE_CODES[self]

    @property
    def is_rle(self) -> bool:
        return self.image_type in RLE_TYPES

    @property
    def is_mapped(self) -> bool:
        return self in (TGAType.MAPPED, TGAType.MAPPED_RLE)

    @classmethod
    def from_name(cls, name: str) -> "TGAType":
        try:
            return cls[name.strip().upper().replace("-", "_")]
        except KeyError:
            raise ValueError(f"Unknown TGA encoding {name!r}; expected one of {', '.join(t.name for t in cls)}") from None


_IMAGE_TYPE_CODES = {
    TGAType.MAPPED: TYPE_MAPPED,
    TGAType.RGB: TYPE_RGB,
    TGAType.RGB16: TYPE_RGB,
    TGAType.BW: TYPE_BW,
    TGAType.BW8: TYPE_BW,
    TGAType.MAPPED_RLE: TYPE_MAPPED_RLE,
    TGAType.RGB_RLE: TYPE_RGB_RLE,
    TGAType.RGB16_RLE: TYPE_RGB_RLE,
    TGAType.BW_RLE: TYPE_BW_RLE,
    TGAType.BW8_RLE: TYPE_BW_RLE,
}


@dataclass
class TGAHeader:
    id_length: int
    color_map_type: int
    image_type: int
    first_entry_index: int
    color_map_length: int
    color_map_entry_size: int
    x_origin: int
    y_origin: int
    width: int
    height: int
    bits_per_pixel: int
    descriptor: int

    @property
    def has_color_map(self) -> bool:
        return self.color_map_type != 0

    @property
    def color_map_entry_bytes(self) -> int:
        # 15-bit entries occupy a full 16-bit word
        return (self.color_map_entry_size + 7) // 8

    @property
    def color_map_bytes(self) -> int:
        if not self.has_color_map:
            return 0
        return self.color_map_length * self.color_map_entry_bytes

    @property
    def is_rle(self) -> bool:
        return self.image_type in RLE_TYPES

    @property
    def type_name(self) -> str:
        return TYPE_NAMES.get(self.image_type, f"Unknown ({self.image_type})")

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pack(self) -> bytes:
        return struct.pack(
            TGA_HEADER_FMT,
            self.id_length,
            self.color_map_type,
            self.image_type,
            self.first_entry_index,
            self.color_map_length,
            self.color_map_entry_size,
            self.x_origin,
            self.y_origin,
            self.width,
            self.height,
            self.bits_per_pixel,
            self.descriptor,
        )


def parse_header(data: bytes) -> TGAHeader:
    """Decode the 18 header bytes.

    Raises InvalidHeader when fewer than 18 bytes are given, when the image
    type is "no image", or when the type code is not one TGA defines.
    """
    if len(data) < TGA_HEADER_SIZE:
        raise InvalidHeader(f"Incomplete TGA header: {len(data)} of {TGA_HEADER_SIZE} bytes")
    header = TGAHeader(*struct.unpack(TGA_HEADER_FMT, bytes(data[:TGA_HEADER_SIZE])))
    if header.image_type == TYPE_NO_IMAGE:
        raise InvalidHeader("TGA file contains no image data")
    if header.image_type not in TYPE_NAMES:
        raise InvalidHeader(f"Unknown TGA image type {header.image_type}")
    log.debug("TGA header: %s", header)
    return header


def read_exact(fp: BinaryIO, n: int, what: str) -> bytes:
    """Read exactly `n` bytes or raise TruncatedStream."""
    data = fp.read(n) if n else b""
    if len(data) != n:
        raise TruncatedStream(what, n, len(data))
    return data


def read_tga_header(fp: BinaryIO) -> TGAHeader:
    """Read the header from `fp` and leave it positioned after the image-ID field."""
    header = parse_header(fp.read(TGA_HEADER_SIZE))
    if header.id_length:
        fp.seek(header.id_length, io.SEEK_CUR)
    return header


def serialize_header(width: int, height: int, bits_per_pixel: int, image_type: int,
                     color_map_length: int = 0, color_map_entry_size: int = 0,
                     first_entry_index: int = 0) -> bytes:
    """Build the header the writer emits: no image ID, zero origin, zero descriptor."""
    header = TGAHeader(
        id_length=0,
        color_map_type=1 if color_map_entry_size else 0,
        image_type=image_type,
        first_entry_index=first_entry_index,
        color_map_length=color_map_length,
        color_map_entry_size=color_map_entry_size,
        x_origin=0,
        y_origin=0,
        width=width,
        height=height,
        bits_per_pixel=bits_per_pixel,
        descriptor=0,
    )
    return header.pack()
