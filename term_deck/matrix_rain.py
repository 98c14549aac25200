"""Matrix rain background: falling glyph trails behind the slide windows."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rich.markup import escape

from .models import Theme

MIN_WIDTH = 20
MIN_HEIGHT = 10
BOLD_PROBABILITY = 0.3


@dataclass
class Drop:
    x: int
    y: float
    speed: float
    trail: List[str]


@dataclass
class MatrixRainState:
    theme: Theme
    drops: List[Drop] = field(default_factory=list)
    content: str = ""
    rng: random.Random = field(default_factory=random.Random)


def generate_trail(glyphs: str, length: int, rng: random.Random) -> List[str]:
    return [rng.choice(glyphs) for _ in range(length)]


def init_matrix_rain(state: MatrixRainState, width: int, height: int) -> None:
    """Create ``matrixDensity`` drops; the set never grows or shrinks afterwards."""
    rng = state.rng
    glyphs = state.theme.glyphs
    state.drops = [
        Drop(
            x=rng.randrange(max(1, width)),
            y=float(rng.randrange(max(1, height))),
            speed=0.3 + rng.random() * 0.7,
            trail=generate_trail(glyphs, 5 + rng.randrange(10), rng),
        )
        for _ in range(state.theme.animations.matrix_density)
    ]


def advance_drop(drop: Drop, width: int, height: int, rng: random.Random) -> None:
    drop.y += drop.speed
    if drop.y > height + len(drop.trail):
        drop.y = float(-len(drop.trail))
        drop.x = rng.randrange(width)


def _near_head(index: int, trail_length: int) -> bool:
    """Trail segments in the half closest to the drop head may render bold."""
    return index < (trail_length + 1) // 2


def render_matrix_rain(state: MatrixRainState, width: int, height: int) -> str:
    """Advance every drop one tick and return the layer as rich markup."""
    width = max(MIN_WIDTH, width or 80)
    height = max(MIN_HEIGHT, height or 24)
    rng = state.rng
    # each cell holds (glyph, eligible for bold)
    grid: List[List[Optional[Tuple[str, bool]]]] = [[None] * width for _ in range(height)]

    for drop in state.drops:
        advance_drop(drop, width, height, rng)
        head = int(drop.y // 1)
        for i, glyph in enumerate(drop.trail):
            y = head - i
            if 0 <= y < height and drop.x < width:
                grid[y][drop.x] = (glyph, _near_head(i, len(drop.trail)))

    color = state.theme.colors.primary
    rows: List[str] = []
    for row in grid:
        parts: List[str] = []
        for cell in row:
            if cell is None or cell[0] == " ":
                parts.append(" ")
                continue
            glyph, near_head = cell
            bold = near_head and rng.random() < BOLD_PROBABILITY
            style = f"bold {color}" if bold else color
            parts.append(f"[{style}]{escape(glyph)}[/]")
        rows.append("".join(parts))

    state.content = "\n".join(rows)
    return state.content
