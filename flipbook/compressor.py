"""Raster page -> WebP compression via Pillow."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from PIL import Image


class Compressor(Protocol):
    """Writes a compressed copy of a raster image; raises on any failure."""

    extension: str

    def compress(self, src: Path, dst: Path, quality: int) -> None: ...


class WebpCompressor:
    """Lossy WebP encoder.

    ``method`` trades encoding speed for size (0 fastest, 6 smallest).
    """

    extension = "webp"

    def __init__(self, method: int = 4) -> None:
        self.method = method

    def compress(self, src: Path, dst: Path, quality: int) -> None:
        with Image.open(src) as img:
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGB")
            img.save(dst, "WEBP", quality=quality, method=self.method)
