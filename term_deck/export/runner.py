from __future__ import annotations

import subprocess
from typing import List, Sequence

from logging_utils import get_logger

from .errors import EncoderError

logger = get_logger(__name__)

STDERR_TAIL_LINES = 50


def _raise_for_status(returncode: int, stderr: str) -> None:
    if returncode == 0:
        return
    tail = (stderr or "").splitlines()[-STDERR_TAIL_LINES:]
    for line in tail:
        logger.error("ffmpeg: %s", line)
    raise EncoderError(
        f"ffmpeg failed with exit code {returncode}: {tail[-1] if tail else 'no output'}",
        returncode=returncode,
        stderr=stderr or "",
    )


def run_ffmpeg(args: Sequence[str]) -> None:
    """Run ffmpeg with the given arguments, raising on non-zero exit.

    Logs the full command for debuggability.
    """
    # Keep ffmpeg quiet: only errors; no stats; no banner
    cmd: List[str] = ["ffmpeg", "-hide_banner", "-loglevel", "error", "-nostats"] + list(args)
    pretty = " ".join(a if " " not in a else f"'{a}'" for a in cmd)
    logger.debug("FFmpeg: %s", pretty)
    proc = subprocess.run(
        cmd,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        text=True,
    )
    _raise_for_status(proc.returncode, proc.stderr)


def run_ffmpeg_stream(
    args: Sequence[str],
    *,
    expected_duration_sec: float,
    label: str,
    show_progress: bool = True,
) -> None:
    """Run ffmpeg with `-progress pipe:1` and stream progress.

    The console bar follows the parsed `out_time_ms` against `expected_duration_sec`.
    """
    from .progress import ConsoleBar, ProgressParser

    full_args: List[str] = [
        "ffmpeg",
        "-hide_banner",
        "-loglevel",
        "error",
        "-nostats",
        "-progress",
        "pipe:1",
    ] + list(args)
    pretty = " ".join(a if " " not in a else f"'{a}'" for a in full_args)
    logger.debug("FFmpeg(stream): %s", pretty)

    bar = ConsoleBar(total_seconds=expected_duration_sec, label=label) if show_progress else None

    def _on_time(seconds: float) -> None:
        if bar is not None:
            bar.update(seconds)

    parser = ProgressParser(on_time=_on_time)
    proc = subprocess.Popen(
        full_args,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        bufsize=1,
    )
    assert proc.stdout is not None
    try:
        for line in proc.stdout:
            parser.feed_line(line)
    finally:
        proc.wait()
        if bar is not None:
            bar.finish()
    err = proc.stderr.read() if proc.stderr else ""
    _raise_for_status(proc.returncode, err)
