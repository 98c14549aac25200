from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from logging_utils import get_logger

from .models import (
    DEFAULT_THEME,
    TRANSITIONS,
    Deck,
    DeckSettings,
    ExportSettings,
    Slide,
    Theme,
)

logger = get_logger(__name__)

DECK_CONFIG_NAME = "deck.yaml"
FRONTMATTER_FENCE = "---"
_SKIPPED_FILES = {"readme.md"}


def split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(frontmatter, body)`` for a ``---`` fenced markdown file."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != FRONTMATTER_FENCE:
        return {}, text
    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONTMATTER_FENCE:
            raw = yaml.safe_load("\n".join(lines[1:idx])) or {}
            if not isinstance(raw, dict):
                raise ValueError("frontmatter must be a mapping")
            return raw, "\n".join(lines[idx + 1:]).strip("\n")
    raise ValueError("frontmatter is not closed with '---'")


def normalize_big_text(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if str(item).strip())
    raise ValueError("bigText must be a string or a list of strings")


def parse_slide(path: Path, index: int) -> Slide:
    frontmatter, body = split_frontmatter(path.read_text(encoding="utf-8"))
    title = str(frontmatter.get("title") or "").strip()
    if not title:
        raise ValueError(f"Slide {path.name} must have a title")

    transition = str(frontmatter.get("transition") or "glitch")
    if transition not in TRANSITIONS:
        raise ValueError(
            f"Slide {path.name} has unknown transition '{transition}' "
            f"(expected one of: {', '.join(TRANSITIONS)})"
        )

    gradient = frontmatter.get("gradient")
    return Slide(
        title=title,
        body=body,
        big_text=normalize_big_text(frontmatter.get("bigText", frontmatter.get("big_text"))),
        gradient=str(gradient) if gradient else None,
        transition=transition,
        source_path=path,
        index=index,
    )


def _parse_settings(raw: Any) -> DeckSettings:
    if not isinstance(raw, dict):
        return DeckSettings()
    return DeckSettings(
        start_slide=max(0, int(raw.get("startSlide", 0))),
        loop=bool(raw.get("loop", False)),
        auto_advance=max(0, int(raw.get("autoAdvance", 0))),
        show_progress=bool(raw.get("showProgress", False)),
    )


def _parse_export(raw: Any) -> ExportSettings:
    if not isinstance(raw, dict):
        return ExportSettings()

    def _opt_int(key: str) -> int | None:
        value = raw.get(key)
        return int(value) if value is not None else None

    return ExportSettings(width=_opt_int("width"), height=_opt_int("height"), fps=_opt_int("fps"))


def find_slide_files(slides_dir: Path) -> List[Path]:
    return sorted(
        path
        for path in slides_dir.glob("*.md")
        if path.is_file() and path.name.lower() not in _SKIPPED_FILES
    )


def load_deck(slides_dir: Path | str) -> Deck:
    """Load every slide in ``slides_dir`` (sorted by file name) plus ``deck.yaml``."""
    base = Path(slides_dir).expanduser().resolve()
    if not base.is_dir():
        raise FileNotFoundError(f"Slides directory not found: {base}")

    config: Dict[str, Any] = {}
    config_path = base / DECK_CONFIG_NAME
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        if not isinstance(config, dict):
            raise ValueError(f"{config_path.name} must contain a mapping")

    theme: Theme = Theme.from_dict(config.get("theme"), DEFAULT_THEME)
    slides = tuple(parse_slide(path, idx) for idx, path in enumerate(find_slide_files(base)))
    logger.info("Loaded %d slides from %s (theme: %s)", len(slides), base, theme.name)
    return Deck(
        slides=slides,
        theme=theme,
        settings=_parse_settings(config.get("settings")),
        export=_parse_export(config.get("export")),
        base_path=base,
        title=config.get("title"),
    )
