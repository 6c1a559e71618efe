"""
tga_rle.py — TGA run-length packets.

Each packet starts with one control byte:
- high bit set:   run packet, one stored pixel repeated (id & 0x7F) + 1 times
- high bit clear: raw packet, id + 1 literal stored pixels follow

The writer never lets a packet cross a scanline, and never makes one longer
than 128 pixels.
"""

from __future__ import annotations
import logging
from typing import BinaryIO, Iterator, List, Optional, Sequence, Tuple

from pixel_formats import PixelFormat
from tga_header import read_exact

log = logging.getLogger(__name__)

MAX_PACKET_PIXELS = 128
RUN_FLAG = 0x80


def decode_rle(fp: BinaryIO, fmt: PixelFormat, pixel_count: int) -> bytearray:
    """Read packets from `fp` until `pixel_count` pixels have been produced.

    Returns the decoded RGB(A) buffer. Bytes after the last needed packet are
    not read. A packet reaching past the end of the image is cut short.
    """
    out = bytearray()
    unit_size = fmt.unit_size
    produced = 0
    while produced < pixel_count:
        control = read_exact(fp, 1, "RLE packet header")[0]
        count = (control & 0x7F) + 1
        take = min(count, pixel_count - produced)
        if control & RUN_FLAG:
            pixel = fmt.decode(read_exact(fp, unit_size, "RLE run packet"))
            out += pixel * take
        else:
            # units past the image end are trailing bytes and stay unread
            raw = read_exact(fp, take * unit_size, "RLE raw packet")
            out += fmt.decode_units(raw, take)
        if take < count:
            log.warning("RLE packet of %d pixels overruns image by %d; extra pixels dropped", count, count - take)
        produced += take
    return out


def encode_scanline(units: Sequence[bytes], keys: Optional[Sequence] = None) -> Tuple[bytes, int]:
    """Packetize one scanline of already-encoded pixel units.

    `keys` are what neighbouring pixels are compared by (defaults to the units
    themselves). Returns (packet bytes, packet count).

    Walks the row keeping a duplicate counter and a "different" counter. While
    collecting a raw packet, meeting two equal neighbours ends the raw packet
    one pixel early (the counter steps back) so the equal pair opens the next
    run packet. Packet boundaries, and so the output bytes, depend on this
    exact tie-break.
    """
    if keys is None:
        keys = units
    width = len(units)
    out = bytearray()
    packets = 0
    duplicates = 0
    different = 0
    j = 0
    while j < width:
        same_as_next = j + 1 < width and keys[j] == keys[j + 1]

        if not different and same_as_next and duplicates + 1 < MAX_PACKET_PIXELS:
            duplicates += 1
            j += 1
            continue

        if duplicates:
            out.append(RUN_FLAG | duplicates)
            out += units[j]
            packets += 1
            duplicates = 0
            j += 1
            continue

        if different + 1 < MAX_PACKET_PIXELS and j + 1 < width:
            if not same_as_next:
                different += 1
                j += 1
                continue
            different -= 1
            j -= 1

        out.append(different)
        for k in range(j - different, j + 1):
            out += units[k]
        packets += 1
        different = 0
        j += 1
    return bytes(out), packets


def encode_rle(units: Sequence[bytes], width: int, keys: Optional[Sequence] = None) -> bytes:
    """Packetize a whole image, one scanline at a time."""
    if not width:
        return b""
    chunks: List[bytes] = []
    total = 0
    for start in range(0, len(units), width):
        row_keys = keys[start:start + width] if keys is not None else None
        data, packets = encode_scanline(units[start:start + width], row_keys)
        chunks.append(data)
        total += packets
    log.debug("RLE: %d pixels in %d packets", len(units), total)
    return b"".join(chunks)


def iter_packets(data: bytes, unit_size: int) -> Iterator[Tuple[bool, int, bytes]]:
    """Walk an encoded packet stream, yielding (is_run, pixel_count, payload)."""
    pos = 0
    while pos < len(data):
        control = data[pos]
        count = (control & 0x7F) + 1
        is_run = bool(control & RUN_FLAG)
        size = unit_size if is_run else count * unit_size
        payload = data[pos + 1:pos + 1 + size]
        if len(payload) != size:
            raise ValueError(f"Truncated RLE packet at offset {pos}")
        yield is_run, count, payload
        pos += 1 + size
