"""
tga_info.py — human-readable TGA header summaries and channel histograms.

Used by the viewer's side panels and by `tgacodec.py info`.
"""

from __future__ import annotations
import os
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

from tga_header import TGAHeader
from tga_image import TGAImage


def header_info(path: Optional[Path], header: TGAHeader, image: Optional[TGAImage] = None) -> Dict[str, object]:
    info: Dict[str, object] = {}
    if path is not None:
        path = Path(path)
        info["Filename"] = os.path.basename(path)
        if path.exists():
            info["File Size"] = f"{path.stat().st_size} bytes"
    info["Image Type"] = f"{header.type_name} ({header.image_type})"
    info["Bits per Pixel"] = header.bits_per_pixel
    info["Image Dimensions"] = f"{header.width}x{header.height}"
    info["Origin"] = f"({header.x_origin}, {header.y_origin})"
    info["Image ID Length"] = header.id_length
    if header.has_color_map:
        info["Color Map"] = (f"{header.color_map_length} entries x {header.color_map_entry_size} bits, "
                             f"first index {header.first_entry_index}")
    else:
        info["Color Map"] = "None"
    info["Descriptor"] = f"0x{header.descriptor:02x}"
    if image is not None and not image.is_empty:
        info["Decoded Channels"] = f"{image.channels} ({image.mode})"
    return info


def channel_histograms(image: TGAImage) -> Dict[str, List[int]]:
    """256-bin counts per channel, plus "Gray" using s = (R + G + B) // 3."""
    arr = image.view().reshape(-1, image.channels).astype(np.int32)
    names = ["R", "G", "B", "A"][:image.channels]
    hists = {name: np.bincount(arr[:, i], minlength=256).tolist() for i, name in enumerate(names)}
    gray = (arr[:, 0] + arr[:, 1] + arr[:, 2]) // 3
    hists["Gray"] = np.bincount(gray, minlength=256).tolist()
    return hists


def plot_histogram_image(hist, color="gray", width=128, height=128) -> Image.Image:
    fig, ax = plt.subplots(figsize=(width/100, height/100), dpi=100)
    ax.bar(range(256), hist, color=color)
    ax.set_xlim(0, 255)
    ax.set_ylim(0, max(hist)*1.1 if hist and max(hist) else 1)
    ax.axis('off')
    buf = BytesIO()
    plt.savefig(buf, format='png', bbox_inches='tight', pad_inches=0)
    plt.close(fig)
    buf.seek(0)
    return Image.open(buf)
