from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for failures while exporting a presentation."""


class ExportConfigError(ExportError):
    """Misconfiguration detected before any slide is rendered."""


class EncoderError(ExportError):
    """ffmpeg exited with a non-zero status."""

    def __init__(self, message: str, *, returncode: int, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
