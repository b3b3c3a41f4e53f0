"""Page counting by a throwaway low-resolution render."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from .rasterizer import Rasterizer
from .utils import PROBE_DPI, PROBE_PREFIX, fresh_dir, remove_dir_quietly

log = logging.getLogger(__name__)


def count_rendered_files(directory: Path, prefix: str, ext: str) -> int:
    """Number of ``<prefix>-*.<ext>`` files in *directory*."""
    return sum(
        1
        for path in directory.iterdir()
        if path.name.startswith(f"{prefix}-") and path.name.endswith(f".{ext}")
    )


def probe_page_count(
    pdf_path: Path,
    scratch_dir: Path,
    rasterizer: Rasterizer,
    *,
    timeout: Optional[float] = None,
) -> int:
    """Return the number of pages in *pdf_path*.

    Renders the document at ``PROBE_DPI`` into *scratch_dir* and counts the
    files produced. Never raises: when the rasterizer fails or produces
    nothing the count falls back to 1. *scratch_dir* is removed on exit.
    """
    t0 = time.perf_counter()
    count = 0
    try:
        fresh_dir(scratch_dir)
        try:
            rasterizer.render(
                pdf_path,
                scratch_dir / PROBE_PREFIX,
                PROBE_DPI,
                timeout=timeout,
            )
        except Exception as exc:
            log.warning("probe_page_count: rasterizer failed (%s)", exc)
        count = count_rendered_files(scratch_dir, PROBE_PREFIX, rasterizer.extension)
    except OSError as exc:
        log.warning("probe_page_count: could not inspect %s (%s)", scratch_dir, exc)
    finally:
        remove_dir_quietly(scratch_dir)

    if count == 0:
        log.warning("probe_page_count: no pages rendered for %s; assuming 1", pdf_path)
        count = 1

    log.info(
        "PDF validated: %s has %s page(s) (%.2fs)",
        Path(pdf_path).name,
        count,
        time.perf_counter() - t0,
    )
    return count
