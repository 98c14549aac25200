from __future__ import annotations

from typing import List, Optional

from ..colors import DEFAULT_FOREGROUND, hex_to_ansi256
from ..screen import Screen
from .virtual_terminal import VirtualTerminalBuffer

CLEAR_AND_HOME = "\x1b[2J\x1b[H"
RESET = "\x1b[0m"


def capture_screen(screen: Screen, buffer: VirtualTerminalBuffer) -> None:
    """Copy the compositor's last composed cells into ``buffer``."""
    lines = screen.lines
    for y in range(min(len(lines), buffer.height)):
        row = lines[y]
        for x in range(min(len(row), buffer.width)):
            cell = row[x]
            buffer.set_char(x, y, cell.char or " ", cell.color.to_hex(DEFAULT_FOREGROUND))


def capture_screen_as_ansi(screen: Screen) -> str:
    """Composed screen as an ANSI string (256-color escapes on color change)."""
    output: List[str] = [CLEAR_AND_HOME]
    lines = screen.lines
    for y, row in enumerate(lines):
        parts: List[str] = []
        last: Optional[str] = None
        for cell in row:
            color = cell.color.to_hex(None)
            if color and color != last:
                parts.append(hex_to_ansi256(color))
                last = color
            parts.append(cell.char or " ")
        if last:
            parts.append(RESET)
        output.append("".join(parts))
        if y < len(lines) - 1:
            output.append("\n")
    return "".join(output)
