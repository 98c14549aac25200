"""Screen compositor: matrix-rain background plus a stack of bordered windows.

The compositor keeps its own cell grid (``Screen.lines``) so that the same
composition feeds both the live terminal (through a rich ``Live`` display on
the alternate screen) and headless frame capture during export.
"""
from __future__ import annotations

import asyncio
import random
import shutil
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Tuple

from rich.console import Console
from rich.errors import MarkupError, StyleSyntaxError
from rich.live import Live
from rich.style import Style
from rich.text import Text

from logging_utils import get_logger

from .colors import CellColor
from .matrix_rain import MatrixRainState, init_matrix_rain, render_matrix_rain
from .models import Theme

logger = get_logger(__name__)

EXTRA_WINDOW_COLORS: Tuple[str, ...] = ("#ff0066", "#9966ff", "#ffcc00")
SHADOW_COLOR = "#1a1a1a"

# (top-left, top-right, bottom-left, bottom-right, horizontal, vertical)
BORDER_GLYPHS: Dict[str, Tuple[str, str, str, str, str, str]] = {
    "line": ("┌", "┐", "└", "┘", "─", "│"),
    "double": ("╔", "╗", "╚", "╝", "═", "║"),
    "rounded": ("╭", "╮", "╰", "╯", "─", "│"),
}


class Cell(NamedTuple):
    char: str
    color: CellColor
    bold: bool = False


BLANK = Cell(" ", CellColor.default(), False)


@dataclass
class Window:
    title: str
    border_color: str
    top: int
    left: int
    width: int
    height: int
    content: str = ""
    destroyed: bool = False

    def set_content(self, content: str) -> None:
        self.content = content

    def destroy(self) -> None:
        self.destroyed = True


def window_color(index: int, theme: Theme) -> str:
    """Border color for the ``index``-th window of the stack."""
    colors = (
        theme.colors.primary,
        theme.colors.accent,
        theme.colors.secondary or theme.colors.primary,
    ) + EXTRA_WINDOW_COLORS
    return colors[index % len(colors)]


def _resolve_style(style: object) -> Style:
    if isinstance(style, Style):
        return style
    try:
        return Style.parse(str(style))
    except StyleSyntaxError:
        # half-scrambled tags during a glitch reveal
        return Style.null()


def parse_markup(content: str, default_color: CellColor) -> List[List[Cell]]:
    """Split rich-markup ``content`` into rows of cells."""
    try:
        text = Text.from_markup(content)
    except MarkupError:
        text = Text(content)
    plain = text.plain
    styles: List[Style] = [Style.null()] * len(plain)
    for span in text.spans:
        style = _resolve_style(span.style)
        for offset in range(span.start, min(span.end, len(plain))):
            styles[offset] = styles[offset] + style

    rows: List[List[Cell]] = [[]]
    for char, style in zip(plain, styles):
        if char == "\n":
            rows.append([])
            continue
        color = CellColor.from_attr(style.color)
        if color.is_default:
            color = default_color
        rows[-1].append(Cell(" " if char == "\t" else char, color, bool(style.bold)))
    return rows


def _wrap(row: List[Cell], width: int) -> List[List[Cell]]:
    if not row:
        return [row]
    return [row[i:i + width] for i in range(0, len(row), width)]


class Screen:
    """Owns the terminal surface, the background animation and the window stack."""

    def __init__(
        self,
        theme: Theme,
        *,
        width: Optional[int] = None,
        height: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        fallback = shutil.get_terminal_size((120, 40))
        self.theme = theme
        self.width = int(width or fallback.columns)
        self.height = int(height or fallback.lines)
        self.rng = rng or random.Random()
        self.windows: List[Window] = []
        self.lines: List[List[Cell]] = []
        self.render_count = 0
        self.progress: Optional[float] = None
        self.rain = MatrixRainState(theme=theme, rng=self.rng)
        init_matrix_rain(self.rain, self.width, self.height)
        self.console: Optional[Console] = None
        self._live: Optional[Live] = None
        self._rain_task: Optional[asyncio.Task] = None
        self.destroyed = False

    # ------------------------------------------------------------------
    # terminal lifecycle

    def attach(self, console: Optional[Console] = None) -> None:
        """Take over the terminal (alternate screen) and size to it."""
        self.console = console or Console()
        size = self.console.size
        self.resize(size.width, size.height)
        self._live = Live(
            console=self.console,
            screen=True,
            auto_refresh=False,
            transient=True,
        )
        self._live.start()
        logger.debug("Screen attached: %dx%d", self.width, self.height)

    def resize(self, width: int, height: int) -> None:
        self.width, self.height = int(width), int(height)
        init_matrix_rain(self.rain, self.width, self.height)

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.stop_background()
        self.clear_windows()
        if self._live is not None:
            self._live.stop()
            self._live = None
        self.destroyed = True

    # ------------------------------------------------------------------
    # window stack

    def create_window(
        self,
        title: str,
        *,
        color: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        top: Optional[int] = None,
        left: Optional[int] = None,
    ) -> Window:
        """Append a window at a random position (scattered stacking)."""
        index = len(self.windows)
        border_color = color or window_color(index, self.theme)
        win_width = width if width is not None else int(self.width * 0.75)
        win_height = height if height is not None else int(self.height * 0.7)

        max_top = max(1, self.height - win_height - 2)
        max_left = max(1, self.width - win_width - 2)
        window = Window(
            title=title,
            border_color=border_color,
            top=top if top is not None else self.rng.randrange(max_top),
            left=left if left is not None else self.rng.randrange(max_left),
            width=win_width,
            height=win_height,
        )
        self.windows.append(window)
        return window

    def clear_windows(self) -> None:
        for window in self.windows:
            window.destroy()
        self.windows.clear()

    # ------------------------------------------------------------------
    # background animation

    def tick_background(self) -> None:
        render_matrix_rain(self.rain, self.width, self.height)

    def start_background(self) -> None:
        if self._rain_task is None:
            self._rain_task = asyncio.get_running_loop().create_task(self._rain_loop())

    def stop_background(self) -> None:
        if self._rain_task is not None:
            self._rain_task.cancel()
            self._rain_task = None

    async def _rain_loop(self) -> None:
        interval = self.theme.animations.matrix_interval / 1000.0
        while True:
            await asyncio.sleep(interval)
            self.tick_background()
            self.render()

    # ------------------------------------------------------------------
    # composition

    def render(self) -> None:
        self.compose()
        self.render_count += 1
        if self._live is not None:
            self._live.update(self.to_text(), refresh=True)

    def compose(self) -> List[List[Cell]]:
        grid = [[BLANK] * self.width for _ in range(self.height)]
        for y, row in enumerate(parse_markup(self.rain.content, CellColor.default())):
            if y >= self.height:
                break
            for x, cell in enumerate(row[: self.width]):
                grid[y][x] = cell
        for window in self.windows:
            self._draw_window(grid, window)
        if self.progress is not None:
            self._draw_progress(grid, self.progress)
        self.lines = grid
        return grid

    def _put(self, grid: List[List[Cell]], x: int, y: int, cell: Cell) -> None:
        if 0 <= y < self.height and 0 <= x < self.width:
            grid[y][x] = cell

    def _draw_window(self, grid: List[List[Cell]], window: Window) -> None:
        style = self.theme.window
        text_color = CellColor.hex(self.theme.colors.text)
        border = CellColor.hex(window.border_color)
        top, left, width, height = window.top, window.left, window.width, window.height
        right, bottom = left + width - 1, top + height - 1

        for y in range(top, bottom + 1):
            for x in range(left, right + 1):
                self._put(grid, x, y, Cell(" ", text_color))

        edge = 0
        glyphs = BORDER_GLYPHS.get(style.border_style)
        if glyphs is not None and width >= 2 and height >= 2:
            edge = 1
            tl, tr, bl, br, horizontal, vertical = glyphs
            for x in range(left + 1, right):
                self._put(grid, x, top, Cell(horizontal, border))
                self._put(grid, x, bottom, Cell(horizontal, border))
            for y in range(top + 1, bottom):
                self._put(grid, left, y, Cell(vertical, border))
                self._put(grid, right, y, Cell(vertical, border))
            self._put(grid, left, top, Cell(tl, border))
            self._put(grid, right, top, Cell(tr, border))
            self._put(grid, left, bottom, Cell(bl, border))
            self._put(grid, right, bottom, Cell(br, border))

        label = f" {window.title} "[: max(0, width - 4)]
        for offset, char in enumerate(label):
            self._put(grid, left + 2 + offset, top, Cell(char, border, True))

        if style.shadow:
            shade = CellColor.hex(SHADOW_COLOR)
            for y in range(top + 1, bottom + 2):
                if 0 <= y < self.height and 0 <= right + 1 < self.width:
                    grid[y][right + 1] = Cell(grid[y][right + 1].char, shade)
            for x in range(left + 1, right + 2):
                if 0 <= bottom + 1 < self.height and 0 <= x < self.width:
                    grid[bottom + 1][x] = Cell(grid[bottom + 1][x].char, shade)

        pad = style.padding
        inner_left = left + edge + pad.left
        inner_top = top + edge + pad.top
        inner_width = width - 2 * edge - pad.left - pad.right
        inner_height = height - 2 * edge - pad.top - pad.bottom
        if inner_width <= 0 or inner_height <= 0:
            return

        rows: List[List[Cell]] = []
        for row in parse_markup(window.content, text_color):
            rows.extend(_wrap(row, inner_width))
        for dy, row in enumerate(rows[:inner_height]):
            for dx, cell in enumerate(row):
                self._put(grid, inner_left + dx, inner_top + dy, cell)

    def _draw_progress(self, grid: List[List[Cell]], fraction: float) -> None:
        y = self.height - 1
        filled = int(round(self.width * min(max(fraction, 0.0), 1.0)))
        done = CellColor.hex(self.theme.colors.accent)
        rest = CellColor.hex(self.theme.colors.muted)
        for x in range(self.width):
            grid[y][x] = Cell("█", done) if x < filled else Cell("─", rest)

    def to_text(self) -> Text:
        """Rich renderable of the composed grid, one style run per color change."""
        text = Text(style=Style(bgcolor=self.theme.colors.background), no_wrap=True, end="")
        for y, row in enumerate(self.lines):
            run: List[str] = []
            run_key: Optional[Tuple[CellColor, bool]] = None
            for cell in row:
                key = (cell.color, cell.bold)
                if key != run_key and run:
                    text.append("".join(run), style=self._cell_style(*run_key))
                    run = []
                run_key = key
                run.append(cell.char)
            if run and run_key is not None:
                text.append("".join(run), style=self._cell_style(*run_key))
            if y < len(self.lines) - 1:
                text.append("\n")
        return text

    @staticmethod
    def _cell_style(color: CellColor, bold: bool) -> Style:
        return Style(color=color.to_hex(None), bold=bold or None)
