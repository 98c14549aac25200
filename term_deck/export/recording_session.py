from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_WIDTH = 120
DEFAULT_HEIGHT = 40
DEFAULT_FPS = 30
DEFAULT_SLIDE_TIME = 3.0
FRAME_PATTERN = "frame_%06d.png"


@dataclass
class ExportOptions:
    output: str
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[int] = None
    slide_time: Optional[float] = None
    quality: Optional[int] = None
    show_progress: bool = True


@dataclass
class RecordingSession:
    temp_dir: Path
    width: int
    height: int
    fps: int
    frame_count: int = 0
    closed: bool = False

    @property
    def input_pattern(self) -> str:
        return str(self.temp_dir / FRAME_PATTERN)


def create_recording_session(options: ExportOptions) -> RecordingSession:
    """Allocate a private temp directory for this export's frames."""
    temp_dir = Path(tempfile.mkdtemp(prefix="term-deck-export-"))
    session = RecordingSession(
        temp_dir=temp_dir,
        width=options.width or DEFAULT_WIDTH,
        height=options.height or DEFAULT_HEIGHT,
        fps=options.fps or DEFAULT_FPS,
    )
    logger.debug("Recording session %s (%dx%d @ %dfps)", temp_dir, session.width, session.height, session.fps)
    return session


def save_frame(session: RecordingSession, png: bytes) -> Path:
    frame_path = session.temp_dir / f"frame_{session.frame_count:06d}.png"
    frame_path.write_bytes(png)
    session.frame_count += 1
    return frame_path


def cleanup_session(session: RecordingSession) -> None:
    """Remove the session directory; failures are logged, never raised."""
    if session.closed:
        return
    session.closed = True
    try:
        shutil.rmtree(session.temp_dir)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Failed to remove recording directory %s: %s", session.temp_dir, exc)
