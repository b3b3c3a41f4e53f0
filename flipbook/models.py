"""Shared data models for the flipbook converter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

PAGES_SUBDIR = Path("files") / "page"


@dataclass(frozen=True)
class PageRecord:
    """Result of converting a single PDF page to its final image."""

    page_number: int
    file_size: int
    file_path: str

    @property
    def image_ref(self) -> str:
        """Relative reference used by the viewer, e.g. ``files/page/007.webp``."""
        suffix = Path(self.file_path).suffix
        return (PAGES_SUBDIR / f"{self.page_number:03d}{suffix}").as_posix()


@dataclass
class ConversionOptions:
    """Inputs for a single PDF -> flipbook conversion."""

    pdf_path: Path
    output_dir: Path
    dpi: int = 150
    quality: int = 85
    title: str = "Flipbook"
    subtitle: str = "Interactive Flipbook Viewer"
    max_workers: int = 1
    timeout: Optional[float] = None
    progress: bool = True


@dataclass
class ConversionResult:
    """Outcome of a conversion run, successful or not."""

    success: bool
    total_pages: int
    output_path: str
    total_size: int = 0
    duration: float = 0.0
    message: str = ""
    pages_converted: int = 0
    pages: list[PageRecord] = field(default_factory=list)
    error: Optional[str] = None
