"""CLI shim -- delegates to flipbook.cli.main().

Usage:
    python pdf_to_flipbook.py book.pdf
    python pdf_to_flipbook.py book.pdf ./output --quality 90
"""

from flipbook.cli import main

if __name__ == "__main__":
    main()
