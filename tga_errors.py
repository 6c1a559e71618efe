"""
tga_errors.py — exceptions raised by the TGA codec.

Every failure is terminal for the call that raised it; nothing is retried.
Each class also derives from the built-in exception a caller would naturally
catch (ValueError for bad data, OSError for I/O, NotImplementedError for
valid-but-unsupported files).
"""


class TGAError(Exception):
    """Base class for all codec failures."""


class IoOpenFailed(TGAError, OSError):
    pass


class TruncatedStream(TGAError, ValueError):
    """The stream returned fewer bytes than the file layout requires."""

    def __init__(self, what: str, expected: int, got: int):
        super().__init__(f"Truncated TGA stream while reading {what}: expected {expected} bytes, got {got}")
        self.what = what
        self.expected = expected
        self.got = got


class WriteFailed(TGAError, OSError):
    pass


class InvalidHeader(TGAError, ValueError):
    pass


class UnsupportedDepth(TGAError, NotImplementedError):
    """A recognised image type stored at a bit depth this codec does not handle."""

    def __init__(self, image_type: int, bits: int, detail: str = "bits per pixel"):
        super().__init__(f"Unsupported TGA format: image type {image_type}, {bits} {detail}")
        self.image_type = image_type
        self.bits = bits


class TooManyColors(TGAError, ValueError):
    def __init__(self, limit: int = 256):
        super().__init__(f"Image has more than {limit} distinct colors; cannot build a color map")
        self.limit = limit


class InvalidPaletteIndex(TGAError, ValueError):
    def __init__(self, index: int, length: int):
        super().__init__(f"Color index {index} outside color map of {length} entries")
        self.index = index
        self.length = length


class OutOfMemory(TGAError, MemoryError):
    pass
