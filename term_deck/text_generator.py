"""Big ASCII-art text (figlet) with a horizontal color gradient."""
from __future__ import annotations

from typing import List, Sequence

import pyfiglet
from rich.markup import escape

from .colors import interpolate_hex

DEFAULT_FONT = "standard"


def apply_gradient(art: str, colors: Sequence[str]) -> str:
    """Color every non-space glyph by its column across ``colors``."""
    stops = tuple(colors)
    lines = art.split("\n")
    span = max((len(line) for line in lines), default=1) - 1
    out: List[str] = []
    for line in lines:
        parts: List[str] = []
        for x, char in enumerate(line):
            if char == " ":
                parts.append(char)
                continue
            color = interpolate_hex(stops, x / span if span > 0 else 0.0)
            parts.append(f"[{color}]{escape(char)}[/]")
        out.append("".join(parts))
    return "\n".join(out)


def generate_big_text(text: str, colors: Sequence[str], font: str = DEFAULT_FONT) -> str:
    art = pyfiglet.figlet_format(text, font=font).rstrip("\n")
    return apply_gradient(art, colors)


def generate_multi_line_big_text(
    lines: Sequence[str], colors: Sequence[str], font: str = DEFAULT_FONT
) -> str:
    return "\n".join(generate_big_text(line, colors, font) for line in lines)
