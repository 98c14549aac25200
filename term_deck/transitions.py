"""Reveal animations applied when a slide's content is written to its window.

Every policy leaves the window showing exactly ``content`` when it returns.
The engine is not reentrant: callers serialize reveals themselves (see
``presenter.Presenter``).
"""
from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, List, Optional, Protocol

from animation_config import AnimationTimings

Sleep = Callable[[float], Awaitable[None]]

TRANSITION_GLITCH = "glitch"
TRANSITION_FADE = "fade"
TRANSITION_INSTANT = "instant"
TRANSITION_TYPEWRITER = "typewriter"

GLITCH_FRAME_MS = 20
FADE_STEPS = 10

GLITCH_CHARS = (
    "█▓▒░▀▄▌▐■□▪▫●○◊◘◙♦♣♠♥★☆⌂ⁿ²³ÆØ∞≈≠±×÷αβγδεζηθλμπσφωΔΣΩ"
    "ｱｲｳｴｵｶｷｸｹｺｻｼｽｾｿﾀﾁﾂﾃﾄﾅﾆﾇﾈﾉﾊﾋﾌﾍﾎﾏﾐﾑﾒﾓﾔﾕﾖﾗﾘﾙﾚﾛﾜﾝ"
)

PROTECTED_CHARS = frozenset(
    [
        " ", "\t", "\n", "{", "}", "-", "/", "#", "[", "]", "(", ")", ":", ";",
        ",", ".", "!", "?", "'", '"', "`", "_", "|", "\\", "<", ">", "=", "+",
        "*", "&", "^", "%", "$", "@", "~",
        # box drawing
        "┌", "┐", "└", "┘", "│", "─", "├", "┤", "┬", "┴", "┼", "═", "║",
        "╔", "╗", "╚", "╝", "╠", "╣", "╦", "╩", "╬", "╭", "╮", "╯", "╰",
        # arrows
        "→", "←", "↑", "↓", "▶", "◀", "▲", "▼", "►", "◄",
    ]
)


class RevealTarget(Protocol):
    def set_content(self, content: str) -> None: ...


class RenderSurface(Protocol):
    def render(self) -> None: ...


def render_content(window: RevealTarget, screen: RenderSurface, content: str) -> None:
    window.set_content(content)
    screen.render()


def scramble_line(line: str, ratio: float, rng: random.Random) -> str:
    out: List[str] = []
    for char in line:
        if char in PROTECTED_CHARS:
            out.append(char)
        elif rng.random() < ratio:
            out.append(rng.choice(GLITCH_CHARS))
        else:
            out.append(char)
    return "".join(out)


async def glitch_line(
    window: RevealTarget,
    screen: RenderSurface,
    current_lines: List[str],
    new_line: str,
    iterations: int,
    timings: AnimationTimings,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> None:
    """Converge ``new_line`` from noise to text in ``iterations + 1`` renders."""
    rng = rng or random.Random()
    iterations = max(1, iterations)
    for i in range(iterations, -1, -1):
        scrambled = scramble_line(new_line, i / iterations, rng)
        render_content(window, screen, "\n".join(current_lines + [scrambled]))
        await sleep(timings.scaled(GLITCH_FRAME_MS))


async def line_by_line_reveal(
    window: RevealTarget,
    screen: RenderSurface,
    content: str,
    timings: AnimationTimings,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> None:
    revealed: List[str] = []
    for line in content.split("\n"):
        await glitch_line(
            window,
            screen,
            revealed,
            line,
            timings.glitch_iterations,
            timings,
            sleep=sleep,
            rng=rng,
        )
        # the last glitch frame (ratio 0) already shows the line verbatim
        revealed.append(line)
        window.set_content("\n".join(revealed))
        if line.strip():
            await sleep(timings.scaled(timings.line_delay))


async def fade_in_reveal(
    window: RevealTarget,
    screen: RenderSurface,
    content: str,
    timings: AnimationTimings,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> None:
    rng = rng or random.Random()
    delay = timings.scaled(timings.line_delay * 2 / FADE_STEPS)
    for step in range(FADE_STEPS):
        ratio = step / FADE_STEPS
        revealed = "".join(
            char if char == "\n" or char in PROTECTED_CHARS or rng.random() < ratio else " "
            for char in content
        )
        render_content(window, screen, revealed)
        await sleep(delay)
    render_content(window, screen, content)


async def typewriter_reveal(
    window: RevealTarget,
    screen: RenderSurface,
    content: str,
    timings: AnimationTimings,
    *,
    sleep: Sleep = asyncio.sleep,
) -> None:
    char_delay = timings.scaled(timings.line_delay / 5)
    for end, char in enumerate(content, start=1):
        render_content(window, screen, content[:end])
        if char not in (" ", "\n"):
            await sleep(char_delay)


async def apply_transition(
    window: RevealTarget,
    screen: RenderSurface,
    content: str,
    transition: str,
    timings: AnimationTimings,
    *,
    sleep: Sleep = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> None:
    """Reveal ``content`` in ``window`` using the named transition."""
    if transition == TRANSITION_GLITCH:
        await line_by_line_reveal(window, screen, content, timings, sleep=sleep, rng=rng)
    elif transition == TRANSITION_FADE:
        await fade_in_reveal(window, screen, content, timings, sleep=sleep, rng=rng)
    elif transition == TRANSITION_TYPEWRITER:
        await typewriter_reveal(window, screen, content, timings, sleep=sleep)
    else:
        render_content(window, screen, content)
