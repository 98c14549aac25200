"""
Terminal slide presentations with animated reveals and video export.

Slides are drawn as a stack of bordered windows over a matrix-rain
background; the same compositor feeds the live terminal and the headless
frame capture used by the exporters.
"""

from __future__ import annotations

__all__ = [
    "load_deck",
    "Presenter",
    "Screen",
]

from .deck_loader import load_deck
from .presenter import Presenter
from .screen import Screen
