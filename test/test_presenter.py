from __future__ import annotations

import asyncio
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from term_deck.models import DEFAULT_THEME, Deck, DeckSettings, Slide
from term_deck.presenter import Presenter, PresenterState
from term_deck.screen import Screen


async def no_sleep(_: float) -> None:
    return None


def _deck(count: int = 4, transition: str = "instant", **settings) -> Deck:
    return Deck(
        slides=tuple(
            Slide(title=f"Slide {i}", body=f"body {i}", transition=transition, index=i) for i in range(count)
        ),
        settings=DeckSettings(**settings),
    )


def _presenter(deck: Deck, **kwargs) -> Presenter:
    screen = Screen(DEFAULT_THEME, width=60, height=20, rng=random.Random(0))
    kwargs.setdefault("sleep", no_sleep)
    return Presenter(deck, screen, **kwargs)


def test_jump_replays_all_previous_slides() -> None:
    presenter = _presenter(_deck(5))

    async def scenario() -> None:
        await presenter.show_slide(0)
        await presenter.show_slide(1)
        assert await presenter.jump_to_slide(3)

    asyncio.run(scenario())
    assert [w.title for w in presenter.screen.windows] == ["Slide 0", "Slide 1", "Slide 2", "Slide 3"]
    assert presenter.current_slide == 3
    assert presenter.state is PresenterState.IDLE


def test_jump_out_of_range_is_ignored() -> None:
    presenter = _presenter(_deck(2))

    async def scenario() -> bool:
        await presenter.show_slide(0)
        return await presenter.jump_to_slide(7)

    assert asyncio.run(scenario()) is False
    assert len(presenter.screen.windows) == 1


def test_prev_slide_rebuilds_stack() -> None:
    presenter = _presenter(_deck(4))

    async def scenario() -> None:
        for i in range(3):
            await presenter.show_slide(i)
        await presenter.prev_slide()

    asyncio.run(scenario())
    assert [w.title for w in presenter.screen.windows] == ["Slide 0", "Slide 1"]
    assert presenter.current_slide == 1


def test_next_slide_stops_at_end_without_loop() -> None:
    presenter = _presenter(_deck(2))

    async def scenario() -> bool:
        await presenter.show_slide(0)
        await presenter.next_slide()
        return await presenter.next_slide()

    assert asyncio.run(scenario()) is False
    assert presenter.current_slide == 1
    assert len(presenter.screen.windows) == 2


def test_next_slide_wraps_when_looping() -> None:
    presenter = _presenter(_deck(2), loop=True)

    async def scenario() -> None:
        await presenter.show_slide(0)
        await presenter.next_slide()
        await presenter.next_slide()

    asyncio.run(scenario())
    assert presenter.current_slide == 0
    assert [w.title for w in presenter.screen.windows] == ["Slide 0"]


def test_prev_from_first_slide_loops_to_last() -> None:
    presenter = _presenter(_deck(3, loop=True))

    async def scenario() -> None:
        await presenter.show_slide(0)
        await presenter.prev_slide()

    asyncio.run(scenario())
    assert presenter.current_slide == 2
    assert len(presenter.screen.windows) == 3


def test_navigation_during_reveal_is_dropped() -> None:
    gate = asyncio.Event()

    async def gated_sleep(_: float) -> None:
        await gate.wait()

    presenter = _presenter(_deck(3, transition="glitch"), sleep=gated_sleep)

    async def scenario() -> None:
        first = asyncio.ensure_future(presenter.show_slide(0))
        await asyncio.sleep(0)
        assert presenter.is_animating
        assert await presenter.next_slide() is False
        assert await presenter.jump_to_slide(2) is False
        gate.set()
        assert await first is True

    asyncio.run(scenario())
    assert [w.title for w in presenter.screen.windows] == ["Slide 0"]
    assert not presenter.is_animating


def test_cancelled_reveal_returns_to_idle() -> None:
    async def slow_sleep(_: float) -> None:
        await asyncio.sleep(10)

    presenter = _presenter(_deck(1, transition="glitch"), sleep=slow_sleep)

    async def scenario() -> bool:
        task = asyncio.ensure_future(presenter.show_slide(0))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        presenter.cancel_reveal()
        return await task

    assert asyncio.run(scenario()) is False
    assert presenter.state is PresenterState.IDLE


def test_progress_tracks_current_slide() -> None:
    presenter = _presenter(_deck(4, show_progress=True))

    async def scenario() -> None:
        await presenter.show_slide(0)
        await presenter.next_slide()

    asyncio.run(scenario())
    assert presenter.screen.progress == 0.5


def test_handle_key_dispatches_navigation() -> None:
    presenter = _presenter(_deck(4))

    async def scenario() -> None:
        await presenter.show_slide(0)
        task = presenter.handle_key("space")
        assert task is not None
        await task
        await presenter.handle_key("3")
        await presenter.handle_key("left")
        assert presenter.handle_key("x") is None

    asyncio.run(scenario())
    assert presenter.current_slide == 2
    assert len(presenter.screen.windows) == 3


def test_auto_advance_moves_forward() -> None:
    presenter = _presenter(_deck(3, auto_advance=10))

    async def scenario() -> None:
        await presenter.show_slide(0)
        presenter.start_auto_advance()
        for _ in range(100):
            if presenter.current_slide == 2:
                break
            await asyncio.sleep(0.01)
        presenter.stop_auto_advance()

    asyncio.run(scenario())
    assert presenter.current_slide == 2
