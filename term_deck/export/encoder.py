"""ffmpeg encoding of captured frame sequences into MP4 or GIF."""
from __future__ import annotations

import math
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from logging_utils import get_logger

from .errors import ExportConfigError
from .runner import run_ffmpeg, run_ffmpeg_stream

logger = get_logger(__name__)

FORMAT_MP4 = "mp4"
FORMAT_GIF = "gif"
DEFAULT_QUALITY = 80

INSTALL_HINT = (
    "ffmpeg not found. Install it with:\n"
    "  macOS: brew install ffmpeg\n"
    "  Ubuntu: sudo apt install ffmpeg"
)


def check_ffmpeg() -> str:
    """Return the resolved ffmpeg path or raise with install instructions."""
    path = shutil.which("ffmpeg")
    if not path:
        raise ExportConfigError(INSTALL_HINT)
    return path


def detect_format(output: Path | str) -> str:
    """Export format from the output extension (``.mp4`` or ``.gif`` only)."""
    name = str(output)
    if name.endswith(".gif"):
        return FORMAT_GIF
    if name.endswith(".mp4"):
        return FORMAT_MP4
    raise ExportConfigError(f"Unknown output format for {name}. Use .mp4 or .gif extension.")


def quality_to_crf(quality: Optional[int]) -> int:
    """Map quality 1..100 onto x264 CRF (51 worst .. 18 at quality 100)."""
    q = DEFAULT_QUALITY if quality is None else min(max(int(quality), 1), 100)
    return int(math.floor(51 - (q / 100) * 33 + 0.5))


def mp4_args(input_pattern: str, output: str, fps: int, crf: int) -> List[str]:
    return [
        "-y",
        "-framerate", str(fps),
        "-i", input_pattern,
        "-c:v", "libx264",
        "-crf", str(crf),
        "-pix_fmt", "yuv420p",
        output,
    ]


def palettegen_args(input_pattern: str, palette: str, fps: int) -> List[str]:
    return [
        "-y",
        "-framerate", str(fps),
        "-i", input_pattern,
        "-vf", f"fps={fps},scale=-1:-1:flags=lanczos,palettegen=stats_mode=diff",
        palette,
    ]


def paletteuse_args(input_pattern: str, palette: str, output: str, fps: int) -> List[str]:
    return [
        "-y",
        "-framerate", str(fps),
        "-i", input_pattern,
        "-i", palette,
        "-lavfi",
        f"fps={fps},scale=-1:-1:flags=lanczos[x];[x][1:v]paletteuse=dither=bayer:bayer_scale=5:diff_mode=rectangle",
        output,
    ]


def encode_mp4(
    input_pattern: str,
    output: str,
    fps: int,
    quality: Optional[int],
    *,
    frame_count: int = 0,
    show_progress: bool = True,
) -> None:
    crf = quality_to_crf(quality)
    logger.info("Encoding MP4 (crf=%d) -> %s", crf, output)
    run_ffmpeg_stream(
        mp4_args(input_pattern, output, fps, crf),
        expected_duration_sec=frame_count / fps if fps else 0.0,
        label="Encoding mp4",
        show_progress=show_progress,
    )


def encode_gif(input_pattern: str, output: str, fps: int) -> None:
    """Two-pass GIF: adaptive palette, then palette application with dithering."""
    fd, palette = tempfile.mkstemp(prefix="palette-", suffix=".png")
    os.close(fd)
    logger.info("Encoding GIF (two-pass palette) -> %s", output)
    try:
        run_ffmpeg(palettegen_args(input_pattern, palette, fps))
        run_ffmpeg(paletteuse_args(input_pattern, palette, output, fps))
    finally:
        try:
            os.unlink(palette)
        except OSError:
            logger.warning("Failed to delete temporary palette file: %s", palette)


def encode_video(
    input_pattern: str,
    output: str,
    fmt: str,
    fps: int,
    quality: Optional[int] = None,
    *,
    frame_count: int = 0,
    show_progress: bool = True,
) -> None:
    if fmt == FORMAT_MP4:
        encode_mp4(
            input_pattern,
            output,
            fps,
            quality,
            frame_count=frame_count,
            show_progress=show_progress,
        )
    else:
        encode_gif(input_pattern, output, fps)
