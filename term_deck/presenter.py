"""Live presentation state and slide navigation.

Navigating backwards or jumping rebuilds the whole window stack by replaying
slides ``0..k``; the stack then holds exactly ``k + 1`` windows. While a
reveal is running, new navigation requests are dropped, not queued.
"""
from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional, Set

from rich.console import Console

from logging_utils import get_logger

from .deck_loader import load_deck
from .models import Deck
from .screen import Screen
from .slide_renderer import render_slide
from .transitions import Sleep

logger = get_logger(__name__)

NEXT_KEYS = {"space", "enter", "right", "n"}
PREV_KEYS = {"left", "backspace", "p"}
QUIT_KEYS = {"q", "escape", "C-c"}


class PresenterState(Enum):
    IDLE = "idle"
    REVEALING = "revealing"


@dataclass
class RevealHandle:
    task: asyncio.Future
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True
        self.task.cancel()


class Presenter:
    def __init__(
        self,
        deck: Deck,
        screen: Screen,
        *,
        loop: Optional[bool] = None,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.deck = deck
        self.screen = screen
        self.loop = deck.settings.loop if loop is None else loop
        self.sleep = sleep
        self.rng = rng
        self.current_slide = 0
        self.state = PresenterState.IDLE
        self.reveal: Optional[RevealHandle] = None
        self._auto_task: Optional[asyncio.Task] = None
        self._key_tasks: Set[asyncio.Task] = set()

    @property
    def is_animating(self) -> bool:
        return self.state is PresenterState.REVEALING

    @property
    def slide_count(self) -> int:
        return len(self.deck.slides)

    # ------------------------------------------------------------------
    # reveal bookkeeping

    async def _run_exclusive(self, work: Callable[[], Awaitable[None]]) -> bool:
        if self.is_animating:
            logger.debug("Navigation dropped: reveal in progress")
            return False
        handle = RevealHandle(asyncio.ensure_future(work()))
        self.state = PresenterState.REVEALING
        self.reveal = handle
        try:
            await handle.task
        except asyncio.CancelledError:
            if not handle.cancelled:
                raise
            logger.debug("Reveal cancelled")
            return False
        finally:
            self.state = PresenterState.IDLE
            self.reveal = None
        return True

    def cancel_reveal(self) -> None:
        if self.reveal is not None:
            self.reveal.cancel()

    async def _render(self, index: int) -> None:
        await render_slide(self.screen, self.deck.slides[index], sleep=self.sleep, rng=self.rng)

    def _update_ui(self, index: int) -> None:
        self.current_slide = index
        if self.deck.settings.show_progress and self.slide_count:
            self.screen.progress = (index + 1) / self.slide_count
        self.screen.render()

    # ------------------------------------------------------------------
    # navigation

    async def show_slide(self, index: int) -> bool:
        """Reveal slide ``index`` on top of the current stack."""
        if self.is_animating or not 0 <= index < self.slide_count:
            return False

        async def work() -> None:
            self.current_slide = index
            await self._render(index)
            self._update_ui(index)

        return await self._run_exclusive(work)

    async def _replay(self, target: int) -> bool:
        async def work() -> None:
            self.screen.clear_windows()
            for i in range(target + 1):
                await self._render(i)
            self._update_ui(target)

        return await self._run_exclusive(work)

    async def next_slide(self) -> bool:
        next_index = self.current_slide + 1
        if next_index >= self.slide_count:
            if self.loop:
                # wrapping starts a fresh stack at slide 0
                return await self._replay(0)
            return False
        return await self.show_slide(next_index)

    async def prev_slide(self) -> bool:
        prev_index = self.current_slide - 1
        if prev_index < 0:
            if self.loop:
                return await self._replay(self.slide_count - 1)
            return False
        return await self._replay(prev_index)

    async def jump_to_slide(self, index: int) -> bool:
        if not 0 <= index < self.slide_count:
            return False
        return await self._replay(index)

    # ------------------------------------------------------------------
    # auto-advance and keys

    def start_auto_advance(self) -> None:
        interval = self.deck.settings.auto_advance
        if interval <= 0 or self._auto_task is not None:
            return
        self._auto_task = asyncio.get_running_loop().create_task(self._auto_advance(interval / 1000.0))

    def stop_auto_advance(self) -> None:
        if self._auto_task is not None:
            self._auto_task.cancel()
            self._auto_task = None

    async def _auto_advance(self, seconds: float) -> None:
        while True:
            await asyncio.sleep(seconds)
            if not self.is_animating:
                await self.next_slide()

    def handle_key(self, key: str) -> Optional[asyncio.Task]:
        """Dispatch a navigation key; returns the scheduled task, if any."""
        if key in NEXT_KEYS:
            coro = self.next_slide()
        elif key in PREV_KEYS:
            coro = self.prev_slide()
        elif len(key) == 1 and key.isdigit():
            coro = self.jump_to_slide(int(key))
        else:
            return None
        task = asyncio.get_running_loop().create_task(coro)
        self._key_tasks.add(task)
        task.add_done_callback(self._key_tasks.discard)
        return task

    def close(self) -> None:
        self.stop_auto_advance()
        self.cancel_reveal()
        for task in list(self._key_tasks):
            task.cancel()
        self.screen.destroy()


async def present(
    slides_dir: Path | str,
    *,
    start_slide: Optional[int] = None,
    loop: Optional[bool] = None,
    console: Optional[Console] = None,
) -> None:
    """Run a live presentation until the user quits (q, Esc or Ctrl-C)."""
    from .keyboard import KeyReader

    deck = load_deck(slides_dir)
    if not deck.slides:
        raise ValueError(f"No slides found in {slides_dir}")

    screen = Screen(deck.theme)
    presenter = Presenter(deck, screen, loop=loop)
    first = deck.settings.start_slide if start_slide is None else start_slide
    first = min(max(first, 0), len(deck.slides) - 1)
    quit_event = asyncio.Event()

    def on_key(key: str) -> None:
        if key in QUIT_KEYS:
            quit_event.set()
        else:
            presenter.handle_key(key)

    screen.attach(console)
    try:
        screen.start_background()
        with KeyReader(on_key):
            if first > 0:
                await presenter.jump_to_slide(first)
            else:
                await presenter.show_slide(first)
            presenter.start_auto_advance()
            await quit_event.wait()
    finally:
        presenter.close()
