#!/usr/bin/env python3
"""
tgacodec.py — read and write Truevision TGA images.

Reads:
- Header (18 bytes) and skips the optional image-ID field
- Optional color map (palette)
- Pixel data in any supported (image type, bits per pixel) combination,
  raw or run-length encoded
Writes an image back as any of the ten TGAType encodings.

Decoded images are always R,G,B[,A], row-major, top row first.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from contextlib import closing
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, Tuple, Union

from orientation import flip_horizontally, flip_vertically
from palette import IndexedFormat, Palette, build_palette, entry_channels, palette_to_color_map, read_color_map
from pixel_formats import LumaFormat, Packed16Format, PixelFormat, TrueColorFormat
from tga_errors import (
    InvalidHeader,
    IoOpenFailed,
    OutOfMemory,
    TGAError,
    UnsupportedDepth,
    WriteFailed,
)
from tga_header import (
    TYPE_BW,
    TYPE_BW_RLE,
    TYPE_MAPPED,
    TYPE_MAPPED_RLE,
    TYPE_RGB,
    TYPE_RGB_RLE,
    TGAHeader,
    TGAType,
    read_exact,
    read_tga_header,
    serialize_header,
)
from tga_image import TGAImage
from tga_rle import decode_rle, encode_rle

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]
Opener = Callable[[PathLike, str], BinaryIO]

# (image type, bits per pixel) -> stored pixel format. Indexed formats need the
# file's color map, so they are built per call.
DECODE_FORMATS: Dict[Tuple[int, int], PixelFormat] = {
    (TYPE_RGB, 24): TrueColorFormat(3),
    (TYPE_RGB, 32): TrueColorFormat(4),
    (TYPE_RGB, 15): Packed16Format(3),
    (TYPE_RGB, 16): Packed16Format(4),
    (TYPE_BW, 8): LumaFormat(with_alpha=False),
    (TYPE_BW, 16): LumaFormat(with_alpha=True),
    (TYPE_RGB_RLE, 24): TrueColorFormat(3),
    (TYPE_RGB_RLE, 32): TrueColorFormat(4),
    (TYPE_RGB_RLE, 15): Packed16Format(3),
    (TYPE_RGB_RLE, 16): Packed16Format(4),
    (TYPE_BW_RLE, 8): LumaFormat(with_alpha=False),
    (TYPE_BW_RLE, 16): LumaFormat(with_alpha=True),
}
INDEXED_KEYS = ((TYPE_MAPPED, 8), (TYPE_MAPPED_RLE, 8))
INDEXED_TYPES = (TYPE_MAPPED, TYPE_MAPPED_RLE)


# ==== Reading ====
def read_palette(fp: BinaryIO, header: TGAHeader) -> Optional[Palette]:
    """Consume the color-map block; decode it only for indexed images."""
    if not header.has_color_map:
        return None
    data = read_exact(fp, header.color_map_bytes, "color map")
    if header.image_type not in INDEXED_TYPES:
        log.debug("Ignoring %d-entry color map on %s image", header.color_map_length, header.type_name)
        return None
    try:
        return read_color_map(data, header.color_map_entry_size)
    except ValueError:
        raise UnsupportedDepth(header.image_type, header.color_map_entry_size, "bit color-map entries") from None


def select_format(header: TGAHeader, palette: Optional[Palette]) -> PixelFormat:
    key = (header.image_type, header.bits_per_pixel)
    if key in INDEXED_KEYS:
        if palette is None:
            raise InvalidHeader("Color-mapped TGA image has no color map")
        return IndexedFormat(palette, header.first_entry_index, entry_channels(header.color_map_entry_size))
    fmt = DECODE_FORMATS.get(key)
    if fmt is None:
        raise UnsupportedDepth(header.image_type, header.bits_per_pixel)
    return fmt


def decode(fp: BinaryIO) -> TGAImage:
    """Decode one TGA image from an open binary stream.

    The stream stays open; it is the caller's to close. On any error nothing
    is returned, so a half-decoded image never escapes.
    """
    header = read_tga_header(fp)
    palette = read_palette(fp, header)
    fmt = select_format(header, palette)
    log.debug("Decoding %dx%d %s image with %r", header.width, header.height, header.type_name, fmt)

    count = header.pixel_count
    try:
        if header.is_rle:
            data = decode_rle(fp, fmt, count)
        else:
            raw = read_exact(fp, count * fmt.unit_size, "pixel data")
            data = fmt.decode_units(raw, count)
    except MemoryError as e:
        raise OutOfMemory(f"Not enough memory for a {header.width}x{header.height} image") from e

    image = TGAImage(header.width, header.height, fmt.channels, data)
    if header.x_origin:
        flip_horizontally(image)
    if header.y_origin:
        flip_vertically(image)
    return image


def load_tga(path: PathLike, opener: Opener = open) -> TGAImage:
    """Open `path` with `opener`, decode it, and close it again on every exit path."""
    with _open(path, "rb", opener) as fp:
        return decode(fp)


def read_header(path: PathLike, opener: Opener = open) -> TGAHeader:
    with _open(path, "rb", opener) as fp:
        return read_tga_header(fp)


# ==== Writing ====
def encoder_format(tga_type: TGAType, channels: int) -> PixelFormat:
    """Stored pixel format for the non-indexed encodings."""
    if tga_type in (TGAType.RGB, TGAType.RGB_RLE):
        return TrueColorFormat(channels)
    if tga_type in (TGAType.RGB16, TGAType.RGB16_RLE):
        return Packed16Format(channels)
    if tga_type in (TGAType.BW, TGAType.BW_RLE):
        return LumaFormat(with_alpha=True)
    if tga_type in (TGAType.BW8, TGAType.BW8_RLE):
        return LumaFormat(with_alpha=False)
    raise ValueError(f"{tga_type.name} has no direct pixel format")


def encode_bytes(image: TGAImage, tga_type: TGAType) -> bytes:
    """Serialize `image` as a complete TGA file held in memory.

    Raises TooManyColors for indexed encodings of images with more than 256
    colors, ValueError for images that cannot be encoded at all.
    """
    tga_type = TGAType(tga_type)
    image.validate()
    width, height, channels = image.width, image.height, image.channels
    pixels = bytes(image.data)

    try:
        if tga_type.is_mapped:
            palette, indices = build_palette(pixels, channels)
            header = serialize_header(width, height, 8, tga_type.image_type,
                                      color_map_length=len(palette),
                                      color_map_entry_size=channels * 8)
            if tga_type.is_rle:
                body = encode_rle([bytes((i,)) for i in indices], width)
            else:
                body = bytes(indices)
            log.debug("Encoded %dx%d as %s with %d-color palette", width, height, tga_type.name, len(palette))
            return header + palette_to_color_map(palette) + body

        fmt = encoder_format(tga_type, channels)
        header = serialize_header(width, height, fmt.bits, tga_type.image_type)
        sources = [pixels[i:i + channels] for i in range(0, len(pixels), channels)]
        units: List[bytes] = [fmt.encode(p) for p in sources]
        if tga_type.is_rle:
            # packed16 runs are found on the full-depth source pixels, not the packed words
            keys = sources if isinstance(fmt, Packed16Format) else None
            body = encode_rle(units, width, keys)
        else:
            body = b"".join(units)
    except MemoryError as e:
        raise OutOfMemory(f"Not enough memory to encode a {width}x{height} image") from e

    log.debug("Encoded %dx%d as %s (%d bytes of pixel data)", width, height, tga_type.name, len(body))
    return header + body


def encode(image: TGAImage, tga_type: TGAType, fp: BinaryIO) -> None:
    """Write `image` to an open binary stream. The stream is left open."""
    _write_all(fp, encode_bytes(image, tga_type))


def save_tga(path: PathLike, image: TGAImage, tga_type: TGAType, opener: Opener = open) -> None:
    """Encode first, then open `path` and write; a failed encode never creates the file."""
    data = encode_bytes(image, tga_type)
    with _open(path, "wb", opener) as fp:
        _write_all(fp, data)


# ==== Stream helpers ====
def _open(path: PathLike, mode: str, opener: Opener) -> "closing[BinaryIO]":
    try:
        fp = opener(path, mode)
    except OSError as e:
        raise IoOpenFailed(f"Cannot open {os.fspath(path)!r}: {e.strerror or e}") from e
    if fp is None:
        raise IoOpenFailed(f"Cannot open {os.fspath(path)!r}")
    return closing(fp)


def _write_all(fp: BinaryIO, data: bytes) -> None:
    try:
        written = fp.write(data)
    except OSError as e:
        raise WriteFailed(f"Write failed: {e}") from e
    # Raw streams report short writes; buffered ones return None or the full length
    if written is not None and written < len(data):
        raise WriteFailed(f"Short write: {written} of {len(data)} bytes")


# ==== Command line ====
def load_any(path: PathLike) -> TGAImage:
    """Load a TGA with this codec, anything else through Pillow."""
    if Path(path).suffix.lower() == ".tga":
        return load_tga(path)
    from PIL import Image
    with Image.open(path) as img:
        img.load()
        return TGAImage.from_pil(img)


def save_any(path: PathLike, image: TGAImage, tga_type: TGAType = TGAType.RGB_RLE) -> None:
    if Path(path).suffix.lower() == ".tga":
        save_tga(path, image, tga_type)
    else:
        image.to_pil().save(path)


def _cmd_info(args) -> int:
    from tga_info import header_info
    for name in args.files:
        path = Path(name)
        info = header_info(path, read_header(path))
        print(f"== {path}")
        for k, v in info.items():
            print(f"{k}: {v}")
    return 0


def _cmd_convert(args) -> int:
    image = load_any(args.source)
    save_any(args.dest, image, TGAType.from_name(args.type))
    print(f"Wrote {args.dest} ({image.width}x{image.height}, {image.channels} channels, {args.type.upper()})")
    return 0


def _cmd_flip(args) -> int:
    image = load_tga(args.file)
    if args.horizontal:
        flip_horizontally(image)
    if args.vertical:
        flip_vertically(image)
    save_tga(args.output or args.file, image, TGAType.from_name(args.type))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tgacodec", description="Inspect and convert TGA images")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("info", help="print TGA header fields")
    p.add_argument("files", nargs="+")
    p.set_defaults(func=_cmd_info)

    types = [t.name for t in TGAType]
    p = sub.add_parser("convert", help="convert between TGA encodings or to/from other formats")
    p.add_argument("source")
    p.add_argument("dest")
    p.add_argument("--type", default="RGB_RLE", choices=types, type=str.upper)
    p.set_defaults(func=_cmd_convert)

    p = sub.add_parser("flip", help="mirror a TGA image")
    p.add_argument("file")
    p.add_argument("--horizontal", action="store_true")
    p.add_argument("--vertical", action="store_true")
    p.add_argument("-o", "--output")
    p.add_argument("--type", default="RGB", choices=types, type=str.upper)
    p.set_defaults(func=_cmd_flip)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (TGAError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
