from __future__ import annotations

import asyncio
import random
import sys
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from animation_config import AnimationTimings
from term_deck.transitions import (
    FADE_STEPS,
    PROTECTED_CHARS,
    apply_transition,
    glitch_line,
    scramble_line,
)


async def no_sleep(_: float) -> None:
    return None


class RecordingWindow:
    def __init__(self) -> None:
        self.content = ""

    def set_content(self, content: str) -> None:
        self.content = content


class RecordingScreen:
    def __init__(self, window: RecordingWindow) -> None:
        self.window = window
        self.frames: List[str] = []

    def render(self) -> None:
        self.frames.append(self.window.content)


def _setup():
    window = RecordingWindow()
    return window, RecordingScreen(window)


def test_glitch_line_renders_iterations_plus_one_and_ends_verbatim() -> None:
    window, screen = _setup()
    timings = AnimationTimings(glitch_iterations=5)
    line = "def run(x): return {x: [1, 2]}"
    asyncio.run(
        glitch_line(window, screen, ["header"], line, 5, timings, sleep=no_sleep, rng=random.Random(1))
    )
    assert len(screen.frames) == 6
    assert screen.frames[-1] == "header\n" + line
    for frame in screen.frames:
        scrambled = frame.split("\n")[1]
        assert len(scrambled) == len(line)
        for expected, shown in zip(line, scrambled):
            if expected in PROTECTED_CHARS:
                assert shown == expected


def test_scramble_ratio_zero_is_identity() -> None:
    assert scramble_line("Hello, world", 0.0, random.Random(0)) == "Hello, world"


def test_glitch_reveal_render_count_per_line() -> None:
    window, screen = _setup()
    timings = AnimationTimings(glitch_iterations=3)
    content = "alpha\n\nbeta"
    asyncio.run(
        apply_transition(window, screen, content, "glitch", timings, sleep=no_sleep, rng=random.Random(2))
    )
    assert len(screen.frames) == 3 * (3 + 1)
    assert window.content == content


def test_fade_renders_steps_plus_final_exact_content() -> None:
    window, screen = _setup()
    content = "[bold]Title[/bold]\nsome body text"
    asyncio.run(
        apply_transition(window, screen, content, "fade", AnimationTimings(), sleep=no_sleep, rng=random.Random(4))
    )
    assert len(screen.frames) == FADE_STEPS + 1
    assert screen.frames[-1] == content
    # step 0 keeps only newlines and protected characters
    assert all(ch == " " or ch == "\n" or ch in PROTECTED_CHARS for ch in screen.frames[0])


def test_typewriter_renders_one_frame_per_character() -> None:
    window, screen = _setup()
    content = "ab c\nd"
    asyncio.run(apply_transition(window, screen, content, "typewriter", AnimationTimings(), sleep=no_sleep))
    assert screen.frames == ["a", "ab", "ab ", "ab c", "ab c\n", "ab c\nd"]


def test_typewriter_with_empty_content_does_not_render() -> None:
    window, screen = _setup()
    asyncio.run(apply_transition(window, screen, "", "typewriter", AnimationTimings(), sleep=no_sleep))
    assert screen.frames == []


def test_instant_and_unknown_transitions_render_once() -> None:
    for name in ("instant", "sparkle"):
        window, screen = _setup()
        asyncio.run(apply_transition(window, screen, "x\ny", name, AnimationTimings(), sleep=no_sleep))
        assert screen.frames == ["x\ny"]


def test_reveal_speed_scales_delays() -> None:
    delays: List[float] = []

    async def record_sleep(seconds: float) -> None:
        delays.append(seconds)

    window, screen = _setup()
    timings = AnimationTimings(reveal_speed=2.0, glitch_iterations=1, line_delay=30.0)
    asyncio.run(apply_transition(window, screen, "hi", "glitch", timings, sleep=record_sleep))
    assert delays == pytest.approx([0.01, 0.01, 0.015])
