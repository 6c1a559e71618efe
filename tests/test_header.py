import io
import struct

import pytest

from tga_errors import InvalidHeader, TruncatedStream
from tga_header import (
    TGA_HEADER_SIZE,
    TYPE_MAPPED,
    TYPE_RGB,
    TYPE_RGB_RLE,
    TGAType,
    parse_header,
    read_exact,
    read_tga_header,
    serialize_header,
)


def test_serialize_layout_is_little_endian():
    data = serialize_header(300, 2, 24, TYPE_RGB)
    assert len(data) == TGA_HEADER_SIZE
    assert data == bytes([0, 0, 2, 0, 0, 0, 0, 0, 0, 0, 0, 0,
                          300 % 256, 300 // 256, 2, 0, 24, 0])


def test_serialize_color_map_fields():
    data = serialize_header(4, 4, 8, TYPE_MAPPED, color_map_length=256, color_map_entry_size=32)
    assert data[1] == 1
    assert data[2] == TYPE_MAPPED
    assert data[3:5] == b"\x00\x00"
    assert data[5:7] == struct.pack("<H", 256)
    assert data[7] == 32


def test_parse_roundtrip_fields():
    header = parse_header(serialize_header(640, 480, 32, TYPE_RGB_RLE))
    assert (header.width, header.height) == (640, 480)
    assert header.bits_per_pixel == 32
    assert header.image_type == TYPE_RGB_RLE
    assert header.is_rle
    assert not header.has_color_map
    assert header.x_origin == header.y_origin == header.descriptor == 0


def test_parse_short_header():
    with pytest.raises(InvalidHeader):
        parse_header(b"\x00" * 17)


def test_parse_no_image_type():
    data = bytearray(serialize_header(1, 1, 24, TYPE_RGB))
    data[2] = 0
    with pytest.raises(InvalidHeader):
        parse_header(bytes(data))


def test_parse_unknown_type_code():
    data = bytearray(serialize_header(1, 1, 24, TYPE_RGB))
    data[2] = 33
    with pytest.raises(InvalidHeader):
        parse_header(bytes(data))


def test_read_header_skips_image_id():
    data = bytearray(serialize_header(1, 1, 24, TYPE_RGB))
    data[0] = 5
    fp = io.BytesIO(bytes(data) + b"hello" + b"\x01\x02\x03")
    header = read_tga_header(fp)
    assert header.id_length == 5
    assert fp.read() == b"\x01\x02\x03"


def test_color_map_size_for_15_bit_entries():
    header = parse_header(serialize_header(1, 1, 8, TYPE_MAPPED, color_map_length=3, color_map_entry_size=15))
    assert header.color_map_entry_bytes == 2
    assert header.color_map_bytes == 6


def test_read_exact_short():
    with pytest.raises(TruncatedStream) as exc:
        read_exact(io.BytesIO(b"ab"), 4, "pixel data")
    assert exc.value.expected == 4
    assert exc.value.got == 2
    assert isinstance(exc.value, ValueError)


def test_tga_type_codes():
    assert TGAType.RGB16.image_type == TYPE_RGB
    assert TGAType.RGB16_RLE.is_rle
    assert not TGAType.BW8.is_rle
    assert TGAType.MAPPED_RLE.is_mapped
    assert TGAType.from_name("rgb-rle") is TGAType.RGB_RLE
    with pytest.raises(ValueError):
        TGAType.from_name("jpeg")
    assert len(TGAType) == 10
