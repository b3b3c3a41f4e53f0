"""Cross-cutting helpers: constants, path utilities, manifest I/O."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Iterable

from .models import PAGES_SUBDIR, PageRecord

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_DPI = 150
DEFAULT_QUALITY = 85
PROBE_DPI = 72
PROBE_PREFIX = "test"
RENDER_PREFIX = "page"
RENDER_DIR_NAME = ".temp"
PROBE_DIR_NAME = ".temp-validate"
OUTPUT_NAME_WIDTH = 3
MANIFEST_FILE_NAME = "pages.json"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_settings(dpi: int, quality: int) -> None:
    """Raise ``ValueError`` for a non-positive *dpi* or *quality* outside 0..100."""
    if dpi <= 0:
        raise ValueError(f"dpi must be a positive integer, got {dpi}")
    if not 0 <= quality <= 100:
        raise ValueError(f"quality must be between 0 and 100, got {quality}")


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def ensure_pages_dir(output_dir: Path) -> Path:
    """Create and return ``<output_dir>/files/page``."""
    pages_dir = output_dir / PAGES_SUBDIR
    pages_dir.mkdir(parents=True, exist_ok=True)
    return pages_dir


def page_filename(page_number: int, ext: str) -> str:
    """Final image name for *page_number*, e.g. ``007.webp``."""
    return f"{page_number:0{OUTPUT_NAME_WIDTH}d}.{ext}"


def fresh_dir(path: Path) -> Path:
    """Remove *path* if it exists and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_dir_quietly(path: Path) -> None:
    """Best-effort recursive delete; errors are logged at DEBUG and dropped."""
    try:
        if path.exists():
            shutil.rmtree(path)
    except OSError as exc:
        log.debug("Could not remove %s: %s", path, exc)


def calculate_total_size(pages: Iterable[PageRecord]) -> int:
    """Sum of ``file_size`` over *pages*."""
    return sum(page.file_size for page in pages)


# ---------------------------------------------------------------------------
# Manifest I/O
# ---------------------------------------------------------------------------


def save_page_manifest(
    output_dir: Path,
    pages: list[PageRecord],
    *,
    title: str,
    subtitle: str,
    total_pages: int,
) -> Path:
    """Write ``pages.json`` for the viewer and return its path."""
    manifest_path = output_dir / MANIFEST_FILE_NAME
    manifest: dict[str, Any] = {
        "title": title,
        "subtitle": subtitle,
        "total_pages": total_pages,
        "total_size": calculate_total_size(pages),
        "pages": [
            {
                "page_number": page.page_number,
                "file_size": page.file_size,
                "file_path": page.file_path,
                "src": page.image_ref,
            }
            for page in sorted(pages, key=lambda p: p.page_number)
        ],
    }
    output_dir.mkdir(parents=True, exist_ok=True)
    with open(manifest_path, "w", encoding="utf-8") as fh:
        json.dump(manifest, fh, indent=2, ensure_ascii=False)
    return manifest_path


def load_page_manifest(output_dir: Path) -> dict[str, Any] | None:
    """Read ``pages.json`` back; ``None`` if it is missing or unreadable."""
    path = output_dir / MANIFEST_FILE_NAME
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as fh:
            manifest = json.load(fh)
    except (json.JSONDecodeError, OSError, ValueError):
        return None

    if not isinstance(manifest, dict):
        return None
    if not isinstance(manifest.get("pages"), list):
        manifest["pages"] = []
    return manifest
