"""Asciicast v2 recording: one frame per slide, no ffmpeg required.

Play the result with ``asciinema play output.cast``.
"""
from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Tuple

from logging_utils import get_logger

from ..deck_loader import load_deck
from ..models import Deck
from ..screen import Screen
from ..slide_renderer import render_slide
from ..transitions import Sleep
from .capture import capture_screen_as_ansi
from .errors import ExportConfigError
from .recording_session import DEFAULT_HEIGHT, DEFAULT_SLIDE_TIME, DEFAULT_WIDTH

logger = get_logger(__name__)

AsciicastFrame = Tuple[float, str, str]


@dataclass
class AnsiRecordOptions:
    slide_time: float = DEFAULT_SLIDE_TIME
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT


def asciicast_header(width: int, height: int, timestamp: int | None = None) -> dict:
    return {
        "version": 2,
        "width": width,
        "height": height,
        "timestamp": int(time.time()) if timestamp is None else timestamp,
        "env": {"TERM": "xterm-256color"},
    }


def write_asciicast(path: Path, header: dict, frames: List[AsciicastFrame]) -> None:
    lines = [json.dumps(header, ensure_ascii=False)]
    lines.extend(json.dumps(list(frame), ensure_ascii=False) for frame in frames)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


async def record_ansi(
    slides_dir: Path | str,
    output: Path | str,
    options: AnsiRecordOptions | None = None,
    *,
    loader: Callable[[Path | str], Deck] = load_deck,
    sleep: Sleep = asyncio.sleep,
) -> Path:
    options = options or AnsiRecordOptions()
    deck = loader(slides_dir)
    if not deck.slides:
        raise ExportConfigError(f"No slides found in {slides_dir}")

    screen = Screen(deck.theme, width=options.width, height=options.height)
    frames: List[AsciicastFrame] = []
    current = 0.0
    try:
        for idx, slide in enumerate(deck.slides, start=1):
            logger.info("Recording slide %d/%d: %s", idx, len(deck.slides), slide.title)
            await render_slide(screen, slide, sleep=sleep)
            screen.tick_background()
            screen.render()
            frames.append((current, "o", capture_screen_as_ansi(screen)))
            current += options.slide_time
    finally:
        screen.destroy()

    out_path = Path(output)
    write_asciicast(out_path, asciicast_header(options.width, options.height), frames)
    logger.info("Recorded to %s (play with: asciinema play %s)", out_path, out_path)
    return out_path
