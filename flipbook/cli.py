"""CLI entrypoint for the PDF -> flipbook converter.

Usage:
    python -m flipbook book.pdf
    python -m flipbook book.pdf ./output
    python -m flipbook book.pdf ./output --quality 90 --dpi 200
    python -m flipbook book.pdf --max-workers 4 --timeout 600
    python -m flipbook book.pdf --detailed-logging
"""

from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

from .utils import DEFAULT_DPI, DEFAULT_QUALITY

log = logging.getLogger(__name__)

CONSOLE_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DETAILED_FMT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(threadName)s | %(filename)s:%(lineno)d | %(message)s"
)
DATE_FMT = "%Y-%m-%d %H:%M:%S"


def _default_log_file(output_dir: Path) -> Path:
    # The output directory is wiped before rendering, so the log sits beside it.
    return output_dir.parent / f"{output_dir.name}.log"


def _setup_logging(
    *,
    verbose: bool,
    detailed_logging: bool,
    output_dir: Path,
    log_file: Path | None,
) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)
    detailed = logging.Formatter(DETAILED_FMT, DATE_FMT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(
        detailed if detailed_logging else logging.Formatter(CONSOLE_FMT, DATE_FMT)
    )
    root_logger.addHandler(console_handler)

    if log_file is None and detailed_logging:
        log_file = _default_log_file(output_dir)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed)
        root_logger.addHandler(file_handler)

    logging.getLogger("PIL").setLevel(logging.WARNING)


def _quality(value: str) -> int:
    quality = int(value)
    if not 0 <= quality <= 100:
        raise argparse.ArgumentTypeError(f"quality must be 0-100, got {quality}")
    return quality


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {number}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="pdf-to-flipbook",
        description="Convert a PDF into an offline HTML flipbook (WebP page images)",
    )
    parser.add_argument("pdf_path", type=Path, help="PDF file to convert")
    parser.add_argument(
        "output_dir",
        type=Path,
        nargs="?",
        default=None,
        help="Output directory (default: ./<pdf name>_flipbook)",
    )
    parser.add_argument(
        "--dpi",
        type=_positive_int,
        default=DEFAULT_DPI,
        help=f"Render resolution (default: {DEFAULT_DPI})",
    )
    parser.add_argument(
        "--quality",
        "-q",
        type=_quality,
        default=DEFAULT_QUALITY,
        help=f"WebP quality 0-100 (default: {DEFAULT_QUALITY})",
    )
    parser.add_argument("--title", "-t", default="Flipbook", help="Flipbook title")
    parser.add_argument(
        "--subtitle",
        "-s",
        default="Interactive Flipbook Viewer",
        help="Flipbook subtitle",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=1,
        help="Worker threads for page conversion (default: 1)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Seconds to wait for each pdftoppm run (default: no limit)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--detailed-logging",
        action="store_true",
        help="Enable detailed logging (thread, file/line, rotating log file)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path (default: <output-dir>.log in detailed mode)",
    )
    args = parser.parse_args(argv)
    if args.output_dir is None:
        args.output_dir = Path.cwd() / f"{args.pdf_path.stem}_flipbook"
    return args


def main(argv: list[str] | None = None) -> None:
    """Run one conversion and exit with 0 on success, 1 on failure."""
    from .conversion import convert_pdf
    from .models import ConversionOptions

    args = parse_args(argv)
    pdf_path = args.pdf_path.resolve()
    output_dir = args.output_dir.resolve()

    _setup_logging(
        verbose=args.verbose,
        detailed_logging=args.detailed_logging,
        output_dir=output_dir,
        log_file=args.log_file,
    )
    log.debug(
        "Settings: dpi=%s quality=%s max_workers=%s timeout=%s",
        args.dpi,
        args.quality,
        args.max_workers,
        args.timeout,
    )

    result = convert_pdf(
        ConversionOptions(
            pdf_path=pdf_path,
            output_dir=output_dir,
            dpi=args.dpi,
            quality=args.quality,
            title=args.title,
            subtitle=args.subtitle,
            max_workers=args.max_workers,
            timeout=args.timeout,
            progress=not args.no_progress,
        )
    )
    if not result.success:
        log.error(result.message)
        sys.exit(1)
    log.info(result.message)
    sys.exit(0)
