from __future__ import annotations

import asyncio
import random
import re
from typing import Dict, List, Optional

from rich.markup import escape

from logging_utils import get_logger

from .models import Slide, Theme
from .screen import Screen, Window
from .text_generator import generate_multi_line_big_text
from .transitions import Sleep, apply_transition

logger = get_logger(__name__)

BUILTIN_TOKEN_COLORS: Dict[str, str] = {
    "GREEN": "#00cc66",
    "ORANGE": "#ff6600",
    "CYAN": "#00ccff",
    "PINK": "#ff0066",
    "WHITE": "#ffffff",
    "GRAY": "#666666",
}

COLOR_TOKEN_PATTERN = re.compile(
    r"\{(GREEN|ORANGE|CYAN|PINK|WHITE|GRAY|PRIMARY|SECONDARY|ACCENT|MUTED|TEXT|BACKGROUND|/)\}"
)


def token_color(name: str, theme: Theme) -> str:
    if name in BUILTIN_TOKEN_COLORS:
        return BUILTIN_TOKEN_COLORS[name]
    colors = theme.colors
    if name == "SECONDARY":
        return colors.secondary or colors.primary
    return getattr(colors, name.lower())


def process_body(body: str, theme: Theme) -> str:
    """Escape slide text for rich and turn ``{GREEN}..{/}`` tokens into color tags.

    A ``{/}`` with no open color is dropped.
    """
    parts: List[str] = []
    open_tags = 0
    pos = 0
    for match in COLOR_TOKEN_PATTERN.finditer(body):
        parts.append(escape(body[pos:match.start()]))
        pos = match.end()
        name = match.group(1)
        if name == "/":
            if open_tags:
                parts.append("[/]")
                open_tags -= 1
            continue
        parts.append(f"[{token_color(name, theme)}]")
        open_tags += 1
    parts.append(escape(body[pos:]))
    return "".join(parts)


def build_slide_content(screen: Screen, slide: Slide) -> str:
    """Window content for ``slide``: optional big text, a blank line, the body."""
    content = ""
    if slide.big_text:
        colors = screen.theme.gradient(slide.gradient)
        content += generate_multi_line_big_text(slide.big_text, colors) + "\n\n"
    return content + process_body(slide.body, screen.theme)


async def render_slide(
    screen: Screen,
    slide: Slide,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> Window:
    """Create a window for ``slide`` on top of the stack and reveal its content."""
    window = screen.create_window(slide.title)
    content = build_slide_content(screen, slide)
    logger.debug("Revealing slide %d (%s) with %s", slide.index, slide.title, slide.transition)
    await apply_transition(
        window,
        screen,
        content,
        slide.transition,
        screen.theme.animations,
        sleep=sleep,
        rng=rng or screen.rng,
    )
    return window
