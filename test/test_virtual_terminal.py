from __future__ import annotations

import io
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from PIL import Image

from term_deck.export.capture import capture_screen, capture_screen_as_ansi
from term_deck.export.virtual_terminal import CHAR_HEIGHT, CHAR_WIDTH, VirtualTerminalBuffer
from term_deck.models import DEFAULT_THEME
from term_deck.screen import Screen


def test_out_of_bounds_writes_are_ignored() -> None:
    buffer = VirtualTerminalBuffer(4, 2)
    before = buffer.get_buffer()
    for x, y in [(-1, 0), (0, -1), (4, 0), (0, 2), (99, 99)]:
        buffer.set_char(x, y, "X", "#ff0000")
    assert buffer.get_buffer() == before


def test_set_char_and_clear() -> None:
    buffer = VirtualTerminalBuffer(3, 2)
    buffer.set_char(1, 1, "Q", "#00ff00")
    assert buffer.get_buffer()[1][1] == "Q"
    assert buffer.get_colors()[1][1] == "#00ff00"
    assert buffer.to_string() == "   \n Q "

    buffer.clear()
    assert all(ch == " " for row in buffer.get_buffer() for ch in row)
    assert all(color == "#ffffff" for row in buffer.get_colors() for color in row)


def test_png_dimensions_follow_cell_size() -> None:
    buffer = VirtualTerminalBuffer(6, 3)
    buffer.set_char(0, 0, "A")
    image = Image.open(io.BytesIO(buffer.to_png()))
    assert image.size == (6 * CHAR_WIDTH, 3 * CHAR_HEIGHT)


def _instant_screen() -> Screen:
    screen = Screen(DEFAULT_THEME, width=30, height=12, rng=random.Random(3))
    window = screen.create_window("demo", width=20, height=8, top=1, left=2)
    window.set_content("hello")
    screen.render()
    return screen


def test_capture_copies_window_text_into_buffer() -> None:
    screen = _instant_screen()
    buffer = VirtualTerminalBuffer(screen.width, screen.height)
    capture_screen(screen, buffer)
    rows = buffer.to_string().split("\n")
    # border (1) + padding top (1) -> row 3; border (1) + padding left (2) -> col 5
    assert rows[3][5:10] == "hello"
    assert buffer.get_colors()[3][5] == DEFAULT_THEME.colors.text


def test_capture_as_ansi_starts_with_clear_and_home() -> None:
    screen = _instant_screen()
    ansi = capture_screen_as_ansi(screen)
    assert ansi.startswith("\x1b[2J\x1b[H")
    assert "\x1b[38;5;" in ansi
    assert ansi.count("\n") == screen.height - 1
