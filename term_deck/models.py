from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from animation_config import AnimationTimings, resolve_animation_timings

TRANSITIONS: Tuple[str, ...] = ("glitch", "fade", "instant", "typewriter")
BORDER_STYLES: Tuple[str, ...] = ("line", "double", "rounded", "none")

_HEX_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def _parse_hex(value: Any, default: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and _HEX_PATTERN.match(value.strip()):
        return value.strip().lower()
    return default


@dataclass(frozen=True)
class ThemeColors:
    primary: str = "#00cc66"
    accent: str = "#ff6600"
    background: str = "#0a0a0a"
    text: str = "#ffffff"
    muted: str = "#666666"
    secondary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: object, base: "ThemeColors | None" = None) -> "ThemeColors":
        defaults = base or cls()
        if not isinstance(data, dict):
            return defaults
        kwargs = {}
        for name in ("primary", "accent", "background", "text", "muted", "secondary"):
            if name in data:
                kwargs[name] = _parse_hex(data[name], getattr(defaults, name))
        return replace(defaults, **kwargs)


@dataclass(frozen=True)
class WindowPadding:
    top: int = 1
    bottom: int = 1
    left: int = 2
    right: int = 2


@dataclass(frozen=True)
class WindowStyle:
    border_style: str = "line"
    shadow: bool = True
    padding: WindowPadding = field(default_factory=WindowPadding)

    @classmethod
    def from_dict(cls, data: object, base: "WindowStyle | None" = None) -> "WindowStyle":
        defaults = base or cls()
        if not isinstance(data, dict):
            return defaults
        border_style = str(data.get("borderStyle", data.get("border_style", defaults.border_style)))
        if border_style not in BORDER_STYLES:
            border_style = defaults.border_style
        shadow = data.get("shadow", defaults.shadow)
        padding = defaults.padding
        padding_raw = data.get("padding")
        if isinstance(padding_raw, dict):
            padding = WindowPadding(
                **{
                    side: max(0, int(padding_raw.get(side, getattr(padding, side))))
                    for side in ("top", "bottom", "left", "right")
                }
            )
        return cls(border_style=border_style, shadow=bool(shadow), padding=padding)


DEFAULT_GRADIENTS: Dict[str, Tuple[str, ...]] = {
    "fire": ("#ff6600", "#ff3300", "#ff0066"),
    "cool": ("#00ccff", "#0066ff", "#6600ff"),
    "pink": ("#ff0066", "#ff0099", "#cc00ff"),
    "hf": ("#99cc00", "#00cc66", "#00cccc"),
}

DEFAULT_GLYPHS = "ｱｲｳｴｵｶｷｸｹｺｻｼｽｾｿﾀﾁﾂﾃﾄﾅﾆﾇﾈﾉﾊﾋﾌﾍﾎﾏﾐﾑﾒﾓﾔﾕﾖﾗﾘﾙﾚﾛﾜﾝ0123456789"


@dataclass(frozen=True)
class Theme:
    name: str = "matrix"
    colors: ThemeColors = field(default_factory=ThemeColors)
    gradients: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_GRADIENTS))
    glyphs: str = DEFAULT_GLYPHS
    animations: AnimationTimings = field(default_factory=AnimationTimings)
    window: WindowStyle = field(default_factory=WindowStyle)
    description: Optional[str] = None

    def gradient(self, name: Optional[str]) -> Tuple[str, ...]:
        if name and name in self.gradients:
            return tuple(self.gradients[name])
        if "fire" in self.gradients:
            return tuple(self.gradients["fire"])
        return next(iter(self.gradients.values()))

    @classmethod
    def from_dict(cls, data: object, base: "Theme | None" = None) -> "Theme":
        """Merge a (possibly partial) theme mapping over ``base``."""
        defaults = base or cls()
        if not isinstance(data, dict):
            return defaults

        gradients: Dict[str, Tuple[str, ...]] = dict(defaults.gradients)
        raw_gradients = data.get("gradients")
        if isinstance(raw_gradients, dict):
            for key, values in raw_gradients.items():
                if not isinstance(values, (list, tuple)):
                    raise ValueError(f"gradient '{key}' must be a list of colors")
                parsed = tuple(c for c in (_parse_hex(v, None) for v in values) if c)
                if len(parsed) < 2:
                    raise ValueError(f"gradient '{key}' must have at least 2 hex colors")
                gradients[str(key)] = parsed

        glyphs = data.get("glyphs", defaults.glyphs)
        if not isinstance(glyphs, str) or len(glyphs) < 10:
            raise ValueError("glyphs must be a string of at least 10 characters")

        animations = defaults.animations
        if isinstance(data.get("animations"), dict):
            merged = {
                "revealSpeed": defaults.animations.reveal_speed,
                "matrixDensity": defaults.animations.matrix_density,
                "glitchIterations": defaults.animations.glitch_iterations,
                "lineDelay": defaults.animations.line_delay,
                "matrixInterval": defaults.animations.matrix_interval,
            }
            merged.update(data["animations"])
            animations = resolve_animation_timings(merged)

        return cls(
            name=str(data.get("name", defaults.name)),
            colors=ThemeColors.from_dict(data.get("colors"), defaults.colors),
            gradients=gradients,
            glyphs=glyphs,
            animations=animations,
            window=WindowStyle.from_dict(data.get("window"), defaults.window),
            description=data.get("description", defaults.description),
        )


DEFAULT_THEME = Theme()


@dataclass(frozen=True)
class Slide:
    title: str
    body: str = ""
    big_text: Tuple[str, ...] = field(default_factory=tuple)
    gradient: Optional[str] = None
    transition: str = "glitch"
    source_path: Optional[Path] = None
    index: int = 0


@dataclass(frozen=True)
class DeckSettings:
    start_slide: int = 0
    loop: bool = False
    auto_advance: int = 0
    show_progress: bool = False


@dataclass(frozen=True)
class ExportSettings:
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[int] = None


@dataclass(frozen=True)
class Deck:
    slides: Tuple[Slide, ...]
    theme: Theme = DEFAULT_THEME
    settings: DeckSettings = field(default_factory=DeckSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    base_path: Optional[Path] = None
    title: Optional[str] = None
