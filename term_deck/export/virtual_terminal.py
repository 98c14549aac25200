"""Off-screen character + color grid, rasterized to PNG for video export."""
from __future__ import annotations

import io
from functools import lru_cache
from typing import List, Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..colors import DEFAULT_FOREGROUND, hex_to_rgb

CHAR_WIDTH = 10
CHAR_HEIGHT = 20
BACKGROUND = "#0a0a0a"
FONT_CANDIDATES = ("DejaVuSansMono.ttf", "Menlo.ttc", "Consolas.ttf", "LiberationMono-Regular.ttf")


@lru_cache(maxsize=8)
def load_font(size: int, path: Optional[str] = None) -> ImageFont.ImageFont:
    candidates = ((path,) if path else ()) + FONT_CANDIDATES
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    return ImageFont.load_default()


class VirtualTerminalBuffer:
    """``width x height`` grid of ``(char, '#rrggbb')`` cells."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self._chars = np.full((self.height, self.width), " ", dtype="<U1")
        self._colors = np.full((self.height, self.width), DEFAULT_FOREGROUND, dtype="<U7")

    def set_char(self, x: int, y: int, char: str, color: str = DEFAULT_FOREGROUND) -> None:
        # out-of-range writes are ignored so capture can be sloppy at the edges
        if 0 <= x < self.width and 0 <= y < self.height:
            self._chars[y, x] = char[:1] or " "
            self._colors[y, x] = color

    def clear(self) -> None:
        self._chars.fill(" ")
        self._colors.fill(DEFAULT_FOREGROUND)

    def get_buffer(self) -> List[List[str]]:
        return self._chars.tolist()

    def get_colors(self) -> List[List[str]]:
        return self._colors.tolist()

    def to_string(self) -> str:
        return "\n".join("".join(row) for row in self._chars.tolist())

    def __str__(self) -> str:
        return self.to_string()

    def to_image(self) -> Image.Image:
        image = Image.new("RGB", (self.width * CHAR_WIDTH, self.height * CHAR_HEIGHT), hex_to_rgb(BACKGROUND))
        draw = ImageDraw.Draw(image)
        font = load_font(CHAR_HEIGHT - 4)
        ys, xs = np.nonzero(self._chars != " ")
        for y, x in zip(ys.tolist(), xs.tolist()):
            draw.text(
                (x * CHAR_WIDTH, y * CHAR_HEIGHT + 2),
                str(self._chars[y, x]),
                fill=hex_to_rgb(str(self._colors[y, x])),
                font=font,
            )
        return image

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.to_image().save(buffer, format="PNG")
        return buffer.getvalue()
