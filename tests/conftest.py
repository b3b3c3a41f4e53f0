"""Shared fixtures for the flipbook test suite.

Most tests drive the pipeline through in-process fakes of the rasterizer and
compressor capabilities; the end-to-end tests need ``pdftoppm`` on PATH.
"""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

import pytest
from PIL import Image

from flipbook import RenderError

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)
log = logging.getLogger("conftest")

HAS_PDFTOPPM = shutil.which("pdftoppm") is not None

requires_pdftoppm = pytest.mark.skipif(
    not HAS_PDFTOPPM, reason="pdftoppm (poppler-utils) not installed"
)


def pdftoppm_padding(page_count: int) -> int:
    return len(str(page_count))


class FakeRasterizer:
    """Writes one small PNG per page the way pdftoppm names them.

    Args:
        page_count: Pages "in" the document.
        padding: Width of the numeric suffix; pdftoppm's rule when ``None``.
        missing: Page numbers that are never written.
        missing_at_dpi: Only drop the ``missing`` pages on renders at this
            resolution; every resolution when ``None``.
        returncode: Non-zero makes :meth:`render` raise ``RenderError``
            after writing the files.
        spawn_error: Raise ``RenderError`` before writing anything.
    """

    extension = "png"

    def __init__(
        self,
        page_count: int = 3,
        *,
        padding: int | None = None,
        missing: set[int] | None = None,
        missing_at_dpi: int | None = None,
        returncode: int = 0,
        spawn_error: bool = False,
    ) -> None:
        self.page_count = page_count
        self.padding = padding
        self.missing = missing or set()
        self.missing_at_dpi = missing_at_dpi
        self.returncode = returncode
        self.spawn_error = spawn_error
        self.calls: list[dict] = []

    def render(self, pdf_path, output_prefix, dpi, *, timeout=None):
        output_prefix = Path(output_prefix)
        self.calls.append(
            {
                "pdf_path": Path(pdf_path),
                "output_prefix": output_prefix,
                "dpi": dpi,
                "timeout": timeout,
                "existing": sorted(p.name for p in output_prefix.parent.iterdir()),
            }
        )
        if self.spawn_error:
            raise RenderError("Failed to execute fake-rasterizer: not found")

        width = self.padding or pdftoppm_padding(self.page_count)
        for page in range(1, self.page_count + 1):
            if page in self.missing and self.missing_at_dpi in (None, dpi):
                continue
            target = output_prefix.parent / f"{output_prefix.name}-{page:0{width}d}.png"
            Image.new("RGB", (8, 8), (page % 256, 40, 90)).save(target, "PNG")

        if self.returncode != 0:
            raise RenderError(
                f"fake-rasterizer failed with code {self.returncode}: Syntax Error",
                returncode=self.returncode,
                output="Syntax Error",
            )


class FakeCompressor:
    """Copies the raster file byte for byte; can be told to fail on a page."""

    extension = "webp"

    def __init__(self, fail_on: int | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[Path, Path, int]] = []

    def compress(self, src, dst, quality):
        self.calls.append((Path(src), Path(dst), quality))
        if self.fail_on is not None and Path(dst).stem == f"{self.fail_on:03d}":
            raise OSError(f"cannot identify image file {src}")
        shutil.copyfile(src, dst)


@pytest.fixture
def fake_pdf(tmp_path: Path) -> Path:
    """A file that exists; only the fakes ever read it."""
    pdf = tmp_path / "book.pdf"
    pdf.write_bytes(b"%PDF-sample")
    return pdf


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    """A real three-page PDF written by Pillow."""
    pdf = tmp_path / "sample.pdf"
    colors = [(200, 30, 30), (30, 200, 30), (30, 30, 200)]
    pages = [Image.new("RGB", (300, 400), color) for color in colors]
    pages[0].save(pdf, "PDF", resolution=72.0, save_all=True, append_images=pages[1:])
    return pdf


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Return a temporary output directory for a single test."""
    return tmp_path / "output"


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer(page_count=3)


@pytest.fixture
def compressor() -> FakeCompressor:
    return FakeCompressor()
