"""PDF -> flipbook conversion: probe, render, manifest."""

from __future__ import annotations

import logging
import shutil
import time
import traceback
from pathlib import Path
from typing import Optional

from .compressor import Compressor, WebpCompressor
from .models import ConversionOptions, ConversionResult, PageRecord
from .probe import probe_page_count
from .rasterizer import PdftoppmRasterizer, Rasterizer
from .rendering import render_pages
from .utils import (
    PROBE_DIR_NAME,
    calculate_total_size,
    save_page_manifest,
    validate_settings,
)

log = logging.getLogger(__name__)


def _log_summary(result: ConversionResult, manifest_path: Path) -> None:
    log.info("=" * 60)
    log.info("FLIPBOOK CREATED")
    log.info("  Total pages:      %s", result.total_pages)
    log.info("  Pages converted:  %s", result.pages_converted)
    log.info("  Total size:       %.1f MB", result.total_size / (1024 * 1024))
    log.info("  Output directory: %s", result.output_path)
    log.info("  Manifest:         %s", manifest_path)
    log.info("  Duration:         %.2fs", result.duration)
    log.info("=" * 60)


def convert_pdf(
    options: ConversionOptions,
    *,
    rasterizer: Optional[Rasterizer] = None,
    compressor: Optional[Compressor] = None,
) -> ConversionResult:
    """Convert one PDF into the page images and manifest of a flipbook.

    Never raises; errors are captured inside the returned result.
    """
    rasterizer = rasterizer or PdftoppmRasterizer()
    compressor = compressor or WebpCompressor()
    pdf_path = Path(options.pdf_path)
    output_dir = Path(options.output_dir)

    log.info("convert_pdf: START - %s -> %s", pdf_path, output_dir)
    t0 = time.perf_counter()

    try:
        validate_settings(options.dpi, options.quality)
        if not pdf_path.exists():
            raise FileNotFoundError(f"PDF file not found: {pdf_path}")
        if output_dir.resolve() in pdf_path.resolve().parents:
            raise ValueError(
                f"Output directory {output_dir} contains the input PDF and "
                "would be wiped; choose another output directory"
            )

        page_count = probe_page_count(
            pdf_path,
            output_dir / PROBE_DIR_NAME,
            rasterizer,
            timeout=options.timeout,
        )

        if output_dir.exists():
            log.info("Removing existing output directory %s", output_dir)
            shutil.rmtree(output_dir)

        pages: list[PageRecord] = render_pages(
            pdf_path,
            output_dir,
            page_count,
            rasterizer=rasterizer,
            compressor=compressor,
            dpi=options.dpi,
            quality=options.quality,
            max_workers=max(1, options.max_workers),
            timeout=options.timeout,
            progress=options.progress,
        )

        manifest_path = save_page_manifest(
            output_dir,
            pages,
            title=options.title,
            subtitle=options.subtitle,
            total_pages=page_count,
        )
    except Exception as exc:
        duration = round(time.perf_counter() - t0, 2)
        log.error("Conversion failed: %s", exc)
        log.debug("convert_pdf: traceback\n%s", traceback.format_exc())
        return ConversionResult(
            success=False,
            total_pages=0,
            output_path=str(output_dir),
            duration=duration,
            message=f"Conversion failed: {exc}",
            error=traceback.format_exc(),
        )

    result = ConversionResult(
        success=True,
        total_pages=page_count,
        output_path=str(output_dir),
        total_size=calculate_total_size(pages),
        duration=round(time.perf_counter() - t0, 2),
        message=f"Successfully converted PDF to flipbook with {page_count} pages",
        pages_converted=len(pages),
        pages=pages,
    )
    _log_summary(result, manifest_path)
    return result
