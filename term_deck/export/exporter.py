"""Presentation -> MP4/GIF export.

Preflight (ffmpeg + output format) -> load slides -> per-slide frame capture
-> encode -> cleanup. Cleanup runs whatever happened before it.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

from logging_utils import get_logger

from ..deck_loader import load_deck
from ..models import Deck
from ..screen import Screen
from ..slide_renderer import render_slide
from ..transitions import Sleep
from .capture import capture_screen
from .encoder import check_ffmpeg, detect_format, encode_video
from .errors import ExportConfigError
from .progress import ConsoleBar
from .recording_session import (
    DEFAULT_SLIDE_TIME,
    ExportOptions,
    RecordingSession,
    cleanup_session,
    create_recording_session,
    save_frame,
)
from .virtual_terminal import VirtualTerminalBuffer

logger = get_logger(__name__)

DeckLoader = Callable[[Path | str], Deck]


def _apply_deck_defaults(options: ExportOptions, deck: Deck) -> ExportOptions:
    return ExportOptions(
        output=options.output,
        width=options.width or deck.export.width,
        height=options.height or deck.export.height,
        fps=options.fps or deck.export.fps,
        slide_time=options.slide_time,
        quality=options.quality,
        show_progress=options.show_progress,
    )


def frames_per_slide(session: RecordingSession, slide_time: Optional[float]) -> int:
    seconds = DEFAULT_SLIDE_TIME if slide_time is None else slide_time
    return max(1, int(round(session.fps * seconds)))


async def export_presentation(
    slides_dir: Path | str,
    options: ExportOptions,
    *,
    loader: DeckLoader = load_deck,
    sleep: Sleep = asyncio.sleep,
    screen_factory: Callable[..., Screen] = Screen,
) -> Path:
    """Render every slide of ``slides_dir`` and encode the frames to ``options.output``."""
    check_ffmpeg()
    fmt = detect_format(options.output)

    deck = loader(slides_dir)
    if not deck.slides:
        raise ExportConfigError(f"No slides found in {slides_dir}")

    options = _apply_deck_defaults(options, deck)
    session = create_recording_session(options)
    screen: Optional[Screen] = None
    try:
        buffer = VirtualTerminalBuffer(session.width, session.height)
        screen = screen_factory(deck.theme, width=session.width, height=session.height)
        per_slide = frames_per_slide(session, options.slide_time)
        total = len(deck.slides)
        bar = (
            ConsoleBar(total_seconds=total * per_slide / session.fps, label="Capturing")
            if options.show_progress
            else None
        )
        logger.info("Exporting %d slides (%d frames each) -> %s", total, per_slide, options.output)

        for idx, slide in enumerate(deck.slides, start=1):
            logger.info("Slide %d/%d: %s", idx, total, slide.title)
            if bar is not None:
                bar.label = f"Slide {idx}/{total}"
            await render_slide(screen, slide, sleep=sleep)
            for _ in range(per_slide):
                screen.tick_background()
                screen.render()
                capture_screen(screen, buffer)
                save_frame(session, buffer.to_png())
                if bar is not None:
                    bar.update(session.frame_count / session.fps)
        if bar is not None:
            bar.finish()

        encode_video(
            session.input_pattern,
            str(options.output),
            fmt,
            session.fps,
            options.quality,
            frame_count=session.frame_count,
            show_progress=options.show_progress,
        )
        logger.info("Exported to %s", options.output)
        return Path(options.output)
    finally:
        if screen is not None:
            try:
                screen.destroy()
            except Exception as exc:  # pragma: no cover - best-effort cleanup
                logger.warning("Failed to destroy screen: %s", exc)
        cleanup_session(session)
