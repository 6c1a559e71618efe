"""
tga_image.py — the in-memory image the codec reads into and writes from.

Pixels are a flat, row-major bytearray, R,G,B[,A] per pixel, top row first.
An image whose `data` is None is empty (nothing loaded).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from PIL import Image


@dataclass
class TGAImage:
    width: int = 0
    height: int = 0
    channels: int = 0
    data: Optional[bytearray] = field(default=None, repr=False)

    @property
    def is_empty(self) -> bool:
        return self.data is None

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def mode(self) -> str:
        return "RGBA" if self.channels == 4 else "RGB"

    def validate(self):
        """Raise ValueError unless the image can be encoded."""
        if self.data is None:
            raise ValueError("Cannot encode an empty image")
        if self.channels not in (3, 4):
            raise ValueError(f"Image must have 3 or 4 channels, not {self.channels}")
        if not (0 <= self.width <= 0xFFFF and 0 <= self.height <= 0xFFFF):
            raise ValueError(f"Image dimensions {self.width}x{self.height} do not fit a TGA header")
        expected = self.width * self.height * self.channels
        if len(self.data) != expected:
            raise ValueError(f"Pixel buffer holds {len(self.data)} bytes, expected {expected}")

    def pixel(self, x: int, y: int) -> Tuple[int, ...]:
        if self.data is None or not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside image")
        i = (y * self.width + x) * self.channels
        return tuple(self.data[i:i + self.channels])

    def copy(self) -> "TGAImage":
        return TGAImage(self.width, self.height, self.channels,
                        None if self.data is None else bytearray(self.data))

    # ==== numpy / Pillow interop ====
    def view(self) -> np.ndarray:
        """Writable (height, width, channels) uint8 view sharing this image's buffer."""
        if self.data is None:
            raise ValueError("Empty image has no pixels")
        if not isinstance(self.data, bytearray):
            # read-only buffers (bytes, memoryview of bytes) cannot back a writable view
            self.data = bytearray(self.data)
        if not self.data:
            return np.zeros((self.height, self.width, self.channels), dtype=np.uint8)
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, self.channels)

    def to_array(self) -> np.ndarray:
        return self.view().copy()

    @classmethod
    def from_array(cls, arr) -> "TGAImage":
        arr = np.asarray(arr, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (height, width, 3|4) array, got shape {arr.shape}")
        height, width, channels = arr.shape
        return cls(width, height, channels, bytearray(np.ascontiguousarray(arr).tobytes()))

    def to_pil(self) -> Image.Image:
        if self.data is None:
            raise ValueError("Empty image has no pixels")
        return Image.frombytes(self.mode, (self.width, self.height), bytes(self.data))

    @classmethod
    def from_pil(cls, img: Image.Image) -> "TGAImage":
        if img.mode not in ("RGB", "RGBA"):
            has_alpha = "A" in img.getbands() or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")
        channels = 4 if img.mode == "RGBA" else 3
        return cls(img.width, img.height, channels, bytearray(img.tobytes()))
