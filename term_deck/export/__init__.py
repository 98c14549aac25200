"""Export of presentations to video (MP4/GIF) and asciicast recordings.

Modules:
- exporter: frame capture loop and the export state machine
- encoder: ffmpeg preflight, format detection, MP4/GIF encoding
- recording_session: temp frame directory lifecycle
- virtual_terminal: off-screen character grid and PNG rasterizer
- ansi_recorder: asciicast v2 writer
"""
from __future__ import annotations

__all__ = [
    "AnsiRecordOptions",
    "ExportOptions",
    "export_presentation",
    "record_ansi",
]

from .ansi_recorder import AnsiRecordOptions, record_ansi
from .exporter import export_presentation
from .recording_session import ExportOptions
