import io

import pytest

from palette import IndexedFormat
from pixel_formats import LumaFormat, TrueColorFormat
from tga_errors import TruncatedStream
from tga_rle import decode_rle, encode_rle, encode_scanline, iter_packets

A, B, C, D = b"A", b"B", b"C", b"D"


def units(s):
    return [c.encode() for c in s]


def test_raw_then_run_backs_up_one_pixel():
    data, packets = encode_scanline(units("ABCCCD"))
    assert data == b"\x01AB" + b"\x82C" + b"\x00D"
    assert packets == 3


def test_alternating_pairs_are_runs():
    data, _ = encode_scanline(units("AABB"))
    assert data == b"\x81A\x81B"


def test_all_different_is_one_raw_packet():
    data, packets = encode_scanline(units("ABAB"))
    assert data == b"\x03ABAB"
    assert packets == 1


def test_single_pixel_row():
    assert encode_scanline([A]) == (b"\x00A", 1)


def test_raw_packet_capped_at_128():
    row = units("AB" * 65)
    data, packets = encode_scanline(row)
    assert packets == 2
    assert data[0] == 127
    assert data[1:129] == b"AB" * 64
    assert data[129:] == b"\x01AB"


def test_run_packet_capped_at_128():
    data, packets = encode_scanline([C] * 200)
    assert data == b"\xffC" + bytes([0x80 | 71]) + b"C"
    assert packets == 2


def test_keys_decide_runs():
    # two units that compare unequal by key stay literal even if the units match
    data, _ = encode_scanline([A, A], keys=[1, 2])
    assert data == b"\x01AA"


def test_solid_rows_give_one_packet_per_row():
    width, height = 64, 64
    data = encode_rle([b"\x01\x02\x03"] * (width * height), width)
    packets = list(iter_packets(data, 3))
    assert len(packets) == height
    assert all(is_run and count == width for is_run, count, _ in packets)


def test_packets_never_cross_rows():
    width, height = 200, 3
    row = [bytes((x // 7 % 3,)) for x in range(width)]
    data = encode_rle(row * height, width)
    pos = 0
    for _, count, _ in iter_packets(data, 1):
        assert pos // width == (pos + count - 1) // width
        pos += count
    assert pos == width * height


def test_decode_run_and_raw():
    fmt = TrueColorFormat(3)
    stream = io.BytesIO(b"\x82\x03\x02\x01" + b"\x01\x06\x05\x04\x09\x08\x07")
    out = decode_rle(stream, fmt, 5)
    assert out == b"\x01\x02\x03" * 3 + b"\x04\x05\x06\x07\x08\x09"


def test_decode_stops_at_pixel_count():
    stream = io.BytesIO(b"\x80\x10" + b"trailing junk")
    out = decode_rle(stream, LumaFormat(with_alpha=False), 1)
    assert out == b"\x10\x10\x10"
    assert stream.read() == b"trailing junk"


def test_decode_clamps_overrunning_packet():
    out = decode_rle(io.BytesIO(b"\x84\x10"), LumaFormat(with_alpha=False), 3)
    assert out == b"\x10" * 9


def test_decode_raw_packet_overrun_reads_only_needed_units():
    stream = io.BytesIO(b"\x03\x01\x02")
    out = decode_rle(stream, LumaFormat(with_alpha=False), 2)
    assert out == b"\x01\x01\x01\x02\x02\x02"
    assert stream.read() == b""


def test_decode_truncated_payload():
    with pytest.raises(TruncatedStream):
        decode_rle(io.BytesIO(b"\x02\x01\x02\x03"), TrueColorFormat(3), 3)


def test_decode_missing_packet():
    with pytest.raises(TruncatedStream):
        decode_rle(io.BytesIO(b"\x80\x10"), LumaFormat(with_alpha=False), 2)


def test_decode_indexed_packets():
    fmt = IndexedFormat([b"\x01\x01\x01", b"\x02\x02\x02"])
    out = decode_rle(io.BytesIO(b"\x81\x01\x01\x00\x01"), fmt, 4)
    assert out == b"\x02\x02\x02" * 2 + b"\x01\x01\x01" + b"\x02\x02\x02"


def test_encode_then_decode_matches():
    row = units("AAAABCDDDEFGGGGGGH")
    fmt = LumaFormat(with_alpha=False)
    data = encode_rle(row * 2, len(row))
    out = decode_rle(io.BytesIO(data), fmt, len(row) * 2)
    assert out == b"".join(fmt.decode(u) for u in row * 2)
