from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Dict, List

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from term_deck.export import exporter
from term_deck.export.errors import EncoderError, ExportConfigError
from term_deck.export.recording_session import ExportOptions
from term_deck.models import Deck, Slide


async def no_sleep(_: float) -> None:
    return None


def _deck(count: int = 2) -> Deck:
    return Deck(
        slides=tuple(
            Slide(title=f"Slide {i}", body=f"body {i}", transition="instant", index=i) for i in range(count)
        )
    )


def _options(output: str = "out.mp4", **overrides) -> ExportOptions:
    values = dict(output=output, width=24, height=10, fps=2, slide_time=1.0, show_progress=False)
    values.update(overrides)
    return ExportOptions(**values)


@pytest.fixture
def ffmpeg_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(exporter, "check_ffmpeg", lambda: "/usr/bin/ffmpeg")


def test_unknown_format_fails_before_loading(ffmpeg_ok) -> None:
    calls: List[str] = []

    def loader(path):
        calls.append(path)
        return _deck()

    with pytest.raises(ExportConfigError):
        asyncio.run(exporter.export_presentation("slides", _options("out.avi"), loader=loader, sleep=no_sleep))
    assert calls == []


def test_missing_ffmpeg_fails_before_loading(monkeypatch: pytest.MonkeyPatch) -> None:
    def missing() -> str:
        raise ExportConfigError("ffmpeg not found")

    monkeypatch.setattr(exporter, "check_ffmpeg", missing)
    with pytest.raises(ExportConfigError):
        asyncio.run(
            exporter.export_presentation(
                "slides", _options(), loader=lambda p: pytest.fail("loaded"), sleep=no_sleep
            )
        )


def test_empty_deck_is_rejected(ffmpeg_ok) -> None:
    with pytest.raises(ExportConfigError, match="No slides found"):
        asyncio.run(exporter.export_presentation("slides", _options(), loader=lambda p: _deck(0), sleep=no_sleep))


def test_frame_count_is_slides_times_fps_times_slide_time(
    ffmpeg_ok, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: Dict[str, object] = {}

    def fake_encode(input_pattern, output, fmt, fps, quality=None, *, frame_count=0, show_progress=True):
        frames_dir = Path(input_pattern).parent
        seen["dir"] = frames_dir
        seen["files"] = sorted(p.name for p in frames_dir.glob("frame_*.png"))
        seen["frame_count"] = frame_count
        seen["fmt"] = fmt
        seen["fps"] = fps

    monkeypatch.setattr(exporter, "encode_video", fake_encode)
    result = asyncio.run(
        exporter.export_presentation("slides", _options(), loader=lambda p: _deck(3), sleep=no_sleep)
    )

    assert result == Path("out.mp4")
    assert seen["frame_count"] == 3 * 2 * 1
    assert seen["files"][0] == "frame_000000.png"
    assert len(seen["files"]) == 6
    assert seen["fmt"] == "mp4"
    assert seen["fps"] == 2
    assert not Path(seen["dir"]).exists()


def test_temp_dir_removed_when_encoding_fails(ffmpeg_ok, monkeypatch: pytest.MonkeyPatch) -> None:
    dirs: List[Path] = []

    def failing_encode(input_pattern, *args, **kwargs):
        dirs.append(Path(input_pattern).parent)
        raise EncoderError("ffmpeg failed", returncode=1, stderr="bad")

    monkeypatch.setattr(exporter, "encode_video", failing_encode)
    with pytest.raises(EncoderError):
        asyncio.run(
            exporter.export_presentation("slides", _options("out.gif"), loader=lambda p: _deck(1), sleep=no_sleep)
        )
    assert dirs and not dirs[0].exists()


def test_deck_export_settings_fill_missing_options(ffmpeg_ok, monkeypatch: pytest.MonkeyPatch) -> None:
    from term_deck.models import ExportSettings

    seen: Dict[str, int] = {}
    monkeypatch.setattr(
        exporter,
        "encode_video",
        lambda pattern, output, fmt, fps, quality=None, **kw: seen.update(fps=fps, frames=kw["frame_count"]),
    )
    deck = Deck(slides=_deck(1).slides, export=ExportSettings(width=20, height=10, fps=3))
    options = ExportOptions(output="out.mp4", slide_time=1.0, show_progress=False)
    asyncio.run(exporter.export_presentation("slides", options, loader=lambda p: deck, sleep=no_sleep))
    assert seen == {"fps": 3, "frames": 3}
