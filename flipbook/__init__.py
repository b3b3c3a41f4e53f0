"""PDF -> offline HTML flipbook converter.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from flipbook import X`` works.
"""

from .compressor import Compressor, WebpCompressor
from .conversion import convert_pdf
from .models import ConversionOptions, ConversionResult, PageRecord
from .probe import count_rendered_files, probe_page_count
from .rasterizer import PdftoppmRasterizer, Rasterizer, RenderError
from .rendering import (
    ConversionError,
    convert_page,
    detect_padding,
    fallback_padding,
    raster_filename,
    render_pages,
)
from .utils import (
    DEFAULT_DPI,
    DEFAULT_QUALITY,
    MANIFEST_FILE_NAME,
    PROBE_DPI,
    calculate_total_size,
    ensure_pages_dir,
    load_page_manifest,
    page_filename,
    save_page_manifest,
    validate_settings,
)

__all__ = [
    # Models
    "PageRecord",
    "ConversionOptions",
    "ConversionResult",
    # Constants
    "DEFAULT_DPI",
    "DEFAULT_QUALITY",
    "PROBE_DPI",
    "MANIFEST_FILE_NAME",
    # Utils
    "validate_settings",
    "ensure_pages_dir",
    "page_filename",
    "calculate_total_size",
    "save_page_manifest",
    "load_page_manifest",
    # Capabilities
    "Rasterizer",
    "PdftoppmRasterizer",
    "RenderError",
    "Compressor",
    "WebpCompressor",
    # Probing
    "count_rendered_files",
    "probe_page_count",
    # Rendering
    "ConversionError",
    "fallback_padding",
    "detect_padding",
    "raster_filename",
    "convert_page",
    "render_pages",
    # Orchestration
    "convert_pdf",
]
