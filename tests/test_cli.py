from __future__ import annotations

from pathlib import Path

import pytest

from flipbook.cli import main, parse_args
from flipbook.models import ConversionResult


def test_parse_args_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    args = parse_args(["docs/book.pdf"])
    assert args.pdf_path == Path("docs/book.pdf")
    assert args.output_dir == tmp_path / "book_flipbook"
    assert args.dpi == 150
    assert args.quality == 85
    assert args.title == "Flipbook"
    assert args.max_workers == 1
    assert args.timeout is None
    assert args.no_progress is False


def test_parse_args_options():
    args = parse_args(
        [
            "book.pdf",
            "out",
            "-q",
            "90",
            "--dpi",
            "200",
            "-t",
            "My Book",
            "-s",
            "Sub",
            "--max-workers",
            "4",
            "--timeout",
            "60",
            "--no-progress",
        ]
    )
    assert args.output_dir == Path("out")
    assert args.quality == 90
    assert args.dpi == 200
    assert args.title == "My Book"
    assert args.subtitle == "Sub"
    assert args.max_workers == 4
    assert args.timeout == 60.0
    assert args.no_progress is True


@pytest.mark.parametrize(
    "argv",
    [
        ["a.pdf", "-q", "101"],
        ["a.pdf", "--dpi", "0"],
        ["a.pdf", "--timeout", "0"],
        ["a.pdf", "--timeout", "-5"],
    ],
)
def test_parse_args_rejects_invalid_values(argv):
    with pytest.raises(SystemExit):
        parse_args(argv)


def _run_main(monkeypatch, tmp_path, success: bool) -> tuple[int, dict]:
    seen = {}

    def _convert_pdf(options, **kwargs):
        seen["options"] = options
        return ConversionResult(
            success=success,
            total_pages=2 if success else 0,
            output_path=str(options.output_dir),
            message="ok" if success else "Conversion failed: boom",
        )

    monkeypatch.setattr("flipbook.conversion.convert_pdf", _convert_pdf)
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "book.pdf"), str(tmp_path / "out"), "--no-progress"])
    return excinfo.value.code, seen


def test_main_exit_code_success(monkeypatch, tmp_path):
    code, seen = _run_main(monkeypatch, tmp_path, success=True)
    assert code == 0
    options = seen["options"]
    assert options.pdf_path == (tmp_path / "book.pdf").resolve()
    assert options.output_dir == (tmp_path / "out").resolve()
    assert options.progress is False


def test_main_exit_code_failure(monkeypatch, tmp_path):
    code, _ = _run_main(monkeypatch, tmp_path, success=False)
    assert code == 1
