"""Raw keypress reading for the live presenter (POSIX terminals)."""
from __future__ import annotations

import asyncio
import os
import sys
import termios
import tty
from typing import Callable, List, Optional

from logging_utils import get_logger

logger = get_logger(__name__)

KEY_NAMES = {
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b": "escape",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\r": "enter",
    "\n": "enter",
    " ": "space",
    "\x03": "C-c",
}


def split_keys(data: str) -> List[str]:
    """Split a chunk read from the terminal into key names."""
    keys: List[str] = []
    i = 0
    while i < len(data):
        if data.startswith("\x1b[", i) and i + 2 < len(data):
            seq = data[i:i + 3]
            keys.append(KEY_NAMES.get(seq, seq))
            i += 3
            continue
        char = data[i]
        keys.append(KEY_NAMES.get(char, char))
        i += 1
    return keys


class KeyReader:
    """Puts stdin in cbreak mode and forwards key names to ``on_key``."""

    def __init__(self, on_key: Callable[[str], None], *, fd: Optional[int] = None) -> None:
        self.on_key = on_key
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._saved: Optional[list] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def __enter__(self) -> "KeyReader":
        self._saved = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(self.fd, self._on_readable)
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._loop is not None:
            self._loop.remove_reader(self.fd)
            self._loop = None
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _on_readable(self) -> None:
        data = os.read(self.fd, 64).decode("utf-8", errors="replace")
        for key in split_keys(data):
            logger.debug("key: %r", key)
            self.on_key(key)
