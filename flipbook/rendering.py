"""Full-resolution render of a PDF and per-page WebP conversion."""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from .compressor import Compressor
from .models import PageRecord
from .rasterizer import Rasterizer
from .utils import (
    DEFAULT_DPI,
    DEFAULT_QUALITY,
    RENDER_DIR_NAME,
    RENDER_PREFIX,
    ensure_pages_dir,
    fresh_dir,
    page_filename,
    remove_dir_quietly,
    validate_settings,
)

log = logging.getLogger(__name__)


class ConversionError(RuntimeError):
    """Compressing one rendered page failed; the whole run is aborted."""

    def __init__(self, message: str, *, page_number: int) -> None:
        super().__init__(message)
        self.page_number = page_number


# ---------------------------------------------------------------------------
# Raster file naming
# ---------------------------------------------------------------------------


def fallback_padding(page_count: int) -> int:
    """Padding width pdftoppm uses for *page_count* pages when none is observed."""
    return 3 if page_count > 99 else 2


def detect_padding(
    render_dir: Path,
    page_count: int,
    *,
    prefix: str = RENDER_PREFIX,
    ext: str = "png",
) -> int:
    """Infer the zero-padding width of the rasterizer's page suffix.

    The first (sorted) ``<prefix>-<digits>.<ext>`` file whose number lies in
    ``1..page_count`` decides. Anything else falls back to
    :func:`fallback_padding`.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)\.{re.escape(ext)}$")
    try:
        names = sorted(path.name for path in render_dir.iterdir())
    except OSError as exc:
        log.warning("detect_padding: cannot list %s (%s)", render_dir, exc)
        names = []

    for name in names:
        match = pattern.match(name)
        if match and 1 <= int(match.group(1)) <= page_count:
            return len(match.group(1))

    padding = fallback_padding(page_count)
    log.debug(
        "detect_padding: no usable %s-*.%s file in %s; using %s digits",
        prefix,
        ext,
        render_dir,
        padding,
    )
    return padding


def raster_filename(
    page_number: int,
    padding: int,
    *,
    prefix: str = RENDER_PREFIX,
    ext: str = "png",
) -> str:
    return f"{prefix}-{page_number:0{padding}d}.{ext}"


# ---------------------------------------------------------------------------
# Per-page conversion
# ---------------------------------------------------------------------------


def convert_page(
    compressor: Compressor,
    src: Path,
    dst: Path,
    page_number: int,
    quality: int,
) -> PageRecord:
    """Compress *src* into *dst* and describe the result."""
    try:
        compressor.compress(src, dst, quality)
        size = dst.stat().st_size
    except Exception as exc:
        raise ConversionError(
            f"Failed to convert page {page_number} ({src.name}): {exc}",
            page_number=page_number,
        ) from exc
    return PageRecord(
        page_number=page_number,
        file_size=size,
        file_path=str(dst.resolve()),
    )


def _log_page(record: PageRecord, page_count: int) -> None:
    log.info(
        "  Page %s/%s (%.1f%%) - %.1f KB",
        record.page_number,
        page_count,
        record.page_number / page_count * 100,
        record.file_size / 1024,
    )


class _PageJobs:
    """Maps page numbers to raster inputs and final outputs for one run."""

    def __init__(
        self,
        render_dir: Path,
        pages_dir: Path,
        page_count: int,
        padding: int,
        raster_ext: str,
        output_ext: str,
    ) -> None:
        self.render_dir = render_dir
        self.pages_dir = pages_dir
        self.page_count = page_count
        self.padding = padding
        self.raster_ext = raster_ext
        self.output_ext = output_ext

    def source(self, page_number: int) -> Optional[Path]:
        """Raster file for *page_number*, or ``None`` (with a warning) if absent."""
        src = self.render_dir / raster_filename(
            page_number, self.padding, ext=self.raster_ext
        )
        if src.exists():
            return src
        log.warning(
            "Raster file not found for page %s/%s: %s",
            page_number,
            self.page_count,
            src,
        )
        return None

    def target(self, page_number: int) -> Path:
        return self.pages_dir / page_filename(page_number, self.output_ext)


def _convert_sequential(
    jobs: _PageJobs,
    compressor: Compressor,
    quality: int,
    progress: bool,
) -> list[PageRecord]:
    from tqdm import tqdm

    pages: list[PageRecord] = []
    for page_number in tqdm(
        range(1, jobs.page_count + 1),
        desc="Converting pages",
        unit="page",
        disable=not progress,
    ):
        src = jobs.source(page_number)
        if src is None:
            continue
        record = convert_page(
            compressor, src, jobs.target(page_number), page_number, quality
        )
        _log_page(record, jobs.page_count)
        pages.append(record)
    return pages


def _convert_parallel(
    jobs: _PageJobs,
    compressor: Compressor,
    quality: int,
    progress: bool,
    max_workers: int,
) -> list[PageRecord]:
    from tqdm import tqdm

    present: list[tuple[int, Path]] = []
    for page_number in range(1, jobs.page_count + 1):
        src = jobs.source(page_number)
        if src is not None:
            present.append((page_number, src))

    pages: list[PageRecord] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(
                convert_page,
                compressor,
                src,
                jobs.target(page_number),
                page_number,
                quality,
            )
            for page_number, src in present
        ]
        try:
            # Futures are consumed in submission order so records stay sorted.
            for future in tqdm(
                futures,
                desc="Converting pages",
                unit="page",
                disable=not progress,
            ):
                record = future.result()
                _log_page(record, jobs.page_count)
                pages.append(record)
        except ConversionError:
            for future in futures:
                future.cancel()
            raise
    return pages


def render_pages(
    pdf_path: Path,
    output_dir: Path,
    page_count: int,
    *,
    rasterizer: Rasterizer,
    compressor: Compressor,
    dpi: int = DEFAULT_DPI,
    quality: int = DEFAULT_QUALITY,
    max_workers: int = 1,
    timeout: Optional[float] = None,
    progress: bool = True,
) -> list[PageRecord]:
    """Render every page of *pdf_path* and convert it for the flipbook.

    Pages land in ``<output_dir>/files/page/NNN.<ext>``. Missing raster
    files are skipped with a warning; a rasterizer failure (``RenderError``)
    or a compression failure (``ConversionError``) aborts the run. The
    temporary render directory is removed in every case.

    Args:
        pdf_path: Source PDF.
        output_dir: Flipbook root directory.
        page_count: Page count reported by :func:`probe_page_count`.
        rasterizer: Capability producing one raster file per page.
        compressor: Capability writing the final compressed images.
        dpi: Render resolution.
        quality: Compression quality, 0..100.
        max_workers: Threads used for page conversion (1 = sequential).
        timeout: Seconds to wait for the rasterizer; ``None`` waits forever.
        progress: Show a tqdm progress bar.

    Returns:
        Page records in ascending page order, one per converted page.
    """
    validate_settings(dpi, quality)
    if page_count < 1:
        raise ValueError(f"page_count must be at least 1, got {page_count}")

    pages_dir = ensure_pages_dir(output_dir)
    render_dir = output_dir / RENDER_DIR_NAME

    log.info("Converting PDF to %s format ...", compressor.extension.upper())
    log.info("Output directory: %s", pages_dir)

    try:
        fresh_dir(render_dir)

        t0 = time.perf_counter()
        rasterizer.render(pdf_path, render_dir / RENDER_PREFIX, dpi, timeout=timeout)
        log.info(
            "Rendered %s at %s dpi in %.2fs",
            Path(pdf_path).name,
            dpi,
            time.perf_counter() - t0,
        )

        padding = detect_padding(render_dir, page_count, ext=rasterizer.extension)
        log.debug("Raster page suffix padding: %s digits", padding)

        jobs = _PageJobs(
            render_dir,
            pages_dir,
            page_count,
            padding,
            rasterizer.extension,
            compressor.extension,
        )
        if max_workers <= 1:
            pages = _convert_sequential(jobs, compressor, quality, progress)
        else:
            pages = _convert_parallel(jobs, compressor, quality, progress, max_workers)
    finally:
        remove_dir_quietly(render_dir)

    log.info("Converted %s of %s page(s)", len(pages), page_count)
    return pages
