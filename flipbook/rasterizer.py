"""External PDF rasterizer (poppler's ``pdftoppm``)."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional, Protocol

log = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """The rasterizer could not be started or exited with a non-zero code."""

    def __init__(
        self,
        message: str,
        *,
        returncode: Optional[int] = None,
        output: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class Rasterizer(Protocol):
    """Renders every page of a PDF to ``<prefix>-<n>.<extension>`` files."""

    extension: str

    def render(
        self,
        pdf_path: Path,
        output_prefix: Path,
        dpi: int,
        *,
        timeout: Optional[float] = None,
    ) -> None: ...


class PdftoppmRasterizer:
    """Run ``pdftoppm -png`` once for the whole document.

    ``pdftoppm`` picks the zero padding of the page suffix itself, based on
    the document's page count.
    """

    extension = "png"

    def __init__(self, binary: str = "pdftoppm") -> None:
        self.binary = binary

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def build_command(self, pdf_path: Path, output_prefix: Path, dpi: int) -> list[str]:
        return [
            self.binary,
            "-png",
            "-r",
            str(dpi),
            str(pdf_path),
            str(output_prefix),
        ]

    def render(
        self,
        pdf_path: Path,
        output_prefix: Path,
        dpi: int,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        cmd = self.build_command(pdf_path, output_prefix, dpi)
        log.debug("render: %s", " ".join(cmd))
        t0 = time.perf_counter()
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise RenderError(
                f"{self.binary} timed out after {timeout}s",
                output=_decode(exc.stderr) or _decode(exc.stdout),
            ) from exc
        except OSError as exc:
            raise RenderError(
                f"Failed to execute {self.binary}. Make sure it's installed: {exc}"
            ) from exc

        stderr = _decode(completed.stderr)
        if stderr.strip():
            log.debug("render: %s stderr: %s", self.binary, stderr.strip())
        if completed.returncode != 0:
            output = stderr or _decode(completed.stdout)
            raise RenderError(
                f"{self.binary} failed with code {completed.returncode}: {output.strip()}",
                returncode=completed.returncode,
                output=output,
            )
        log.debug("render: %s finished in %.2fs", self.binary, time.perf_counter() - t0)


def _decode(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
