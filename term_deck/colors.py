"""Color conversion between the ANSI 256-color palette and RGB hex.

Cells on the compositor carry a tagged :class:`CellColor` so that the capture
path never has to guess what kind of color attribute it is looking at.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from rich.color import Color, ColorType

STANDARD_16: Tuple[str, ...] = (
    "#000000", "#800000", "#008000", "#808000",
    "#000080", "#800080", "#008080", "#c0c0c0",
    "#808080", "#ff0000", "#00ff00", "#ffff00",
    "#0000ff", "#ff00ff", "#00ffff", "#ffffff",
)

DEFAULT_FOREGROUND = "#ffffff"


def ansi256_to_hex(code: int) -> str:
    """Convert an ANSI 256-color index to ``#rrggbb``."""
    if code < 0 or code > 255:
        raise ValueError(f"ANSI 256 color index out of range: {code}")
    if code < 16:
        return STANDARD_16[code]
    if code < 232:
        n = code - 16
        r = (n // 36) * 51
        g = ((n % 36) // 6) * 51
        b = (n % 6) * 51
        return f"#{r:02x}{g:02x}{b:02x}"
    gray = (code - 232) * 10 + 8
    return f"#{gray:02x}{gray:02x}{gray:02x}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hex_to_ansi256_code(value: str) -> int:
    text = value.strip().lstrip("#")
    r = int(text[0:2], 16)
    g = int(text[2:4], 16)
    b = int(text[4:6], 16)
    return 16 + _round_half_up(r / 51) * 36 + _round_half_up(g / 51) * 6 + _round_half_up(b / 51)


def hex_to_ansi256(value: str) -> str:
    """Foreground escape sequence for the nearest 6x6x6 cube color."""
    return f"\x1b[38;5;{hex_to_ansi256_code(value)}m"


def hex_to_rgb(value: str | None, fallback: Tuple[int, int, int] = (255, 255, 255)) -> Tuple[int, int, int]:
    if not value:
        return fallback
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        return fallback
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return fallback


def interpolate_hex(stops: Tuple[str, ...], position: float) -> str:
    """Linear interpolation across gradient stops, ``position`` in [0, 1]."""
    if len(stops) == 1:
        return stops[0]
    position = min(max(position, 0.0), 1.0)
    scaled = position * (len(stops) - 1)
    index = min(int(scaled), len(stops) - 2)
    frac = scaled - index
    start = hex_to_rgb(stops[index])
    end = hex_to_rgb(stops[index + 1])
    r, g, b = (_round_half_up(s + (e - s) * frac) for s, e in zip(start, end))
    return f"#{r:02x}{g:02x}{b:02x}"


@dataclass(frozen=True)
class CellColor:
    """Tagged cell color: ``hex``, ``indexed`` or ``default``."""

    kind: str
    value: Any = None

    @classmethod
    def hex(cls, value: str) -> "CellColor":
        return cls("hex", value.lower())

    @classmethod
    def indexed(cls, code: int) -> "CellColor":
        if code < 0 or code > 255:
            raise ValueError(f"ANSI 256 color index out of range: {code}")
        return cls("indexed", int(code))

    @classmethod
    def default(cls) -> "CellColor":
        return _DEFAULT

    @classmethod
    def from_attr(cls, attr: Any) -> "CellColor":
        """Resolve a raw color attribute once, at the compositor boundary."""
        if attr is None:
            return _DEFAULT
        if isinstance(attr, CellColor):
            return attr
        if isinstance(attr, Color):
            if attr.type == ColorType.DEFAULT:
                return _DEFAULT
            if attr.type == ColorType.TRUECOLOR and attr.triplet is not None:
                return cls.hex(attr.triplet.hex)
            if attr.number is not None:
                return cls.indexed(attr.number)
            return _DEFAULT
        if isinstance(attr, bool):
            return _DEFAULT
        if isinstance(attr, int):
            return cls.indexed(attr)
        if isinstance(attr, str) and attr.startswith("#"):
            return cls.hex(attr)
        return _DEFAULT

    @property
    def is_default(self) -> bool:
        return self.kind == "default"

    def to_hex(self, fallback: Optional[str] = DEFAULT_FOREGROUND) -> Optional[str]:
        if self.kind == "hex":
            return self.value
        if self.kind == "indexed":
            return ansi256_to_hex(self.value)
        return fallback


_DEFAULT = CellColor("default")
