"""
orientation.py — mirror an image in place.

The decoder calls these when the header's x or y origin is non-zero, turning
a right-to-left or bottom-to-top file into the top-left-origin layout used in
memory. Empty images are left alone.
"""

from tga_image import TGAImage


def flip_horizontally(image: TGAImage) -> None:
    if image.is_empty or image.width < 2:
        return
    view = image.view()
    view[:] = view[:, ::-1].copy()


def flip_vertically(image: TGAImage) -> None:
    if image.is_empty or image.height < 2:
        return
    view = image.view()
    view[:] = view[::-1].copy()
