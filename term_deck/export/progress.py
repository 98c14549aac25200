from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Callable, TextIO


def format_clock(seconds: float) -> str:
    seconds = int(round(max(seconds, 0.0)))
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


@dataclass
class ConsoleBar:
    """Single-line progress bar over a timeline measured in seconds."""

    total_seconds: float
    label: str = "Export"
    width: int = 24
    stream: TextIO = field(default_factory=lambda: sys.stderr)

    def __post_init__(self) -> None:
        self.started = time.time()
        self.last_draw = 0.0
        self._draw(0.0)

    def update(self, current_seconds: float, *, force: bool = False) -> None:
        now = time.time()
        # 10 redraws per second at most
        if not force and now - self.last_draw < 0.1:
            return
        self.last_draw = now
        self._draw(current_seconds)

    def finish(self) -> None:
        self._draw(self.total_seconds)
        self.stream.write("\n")
        self.stream.flush()

    def _draw(self, current_seconds: float) -> None:
        total = max(self.total_seconds, 0.001)
        frac = min(max(current_seconds, 0.0), total) / total
        filled = int(round(self.width * frac))
        elapsed = time.time() - self.started
        eta = elapsed * (1.0 / frac - 1.0) if frac > 0.0001 else 0.0
        self.stream.write(
            f"\r[{'█' * filled}{'·' * (self.width - filled)}] {int(frac * 100):3d}% | "
            f"{format_clock(current_seconds)} / {format_clock(total)} | "
            f"ETA {format_clock(eta)} | {self.label}"
        )
        self.stream.flush()


class ProgressParser:
    """Parse ffmpeg `-progress pipe:1` key=value lines into output seconds."""

    def __init__(self, on_time: Callable[[float], None]) -> None:
        self.on_time = on_time

    def feed_line(self, line: str) -> None:
        key, sep, value = line.strip().partition("=")
        if not sep or key != "out_time_ms":
            return
        try:
            self.on_time(int(value) / 1_000_000.0)
        except ValueError:
            return
