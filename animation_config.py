"""Helpers for resolving theme animation timing knobs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class AnimationTimings:
    reveal_speed: float = 1.0
    matrix_density: int = 50
    glitch_iterations: int = 5
    line_delay: float = 30.0
    matrix_interval: float = 80.0

    def scaled(self, delay_ms: float) -> float:
        """Convert a millisecond delay to seconds, honouring ``reveal_speed``."""
        return max(0.0, delay_ms) / 1000.0 / self.reveal_speed


# theme key -> (attribute, minimum, maximum)
_RANGES: Dict[str, Tuple[str, float, float]] = {
    "revealSpeed": ("reveal_speed", 0.1, 5.0),
    "matrixDensity": ("matrix_density", 10, 200),
    "glitchIterations": ("glitch_iterations", 1, 20),
    "lineDelay": ("line_delay", 0, 500),
    "matrixInterval": ("matrix_interval", 20, 200),
}

_INTEGER_FIELDS = {"matrix_density", "glitch_iterations"}


def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def resolve_animation_timings(animation_cfg: Dict[str, Any] | None) -> AnimationTimings:
    """Build timings from a theme ``animations`` mapping.

    Accepts both the camelCase theme keys and the snake_case attribute names.
    Unparseable values fall back to defaults, out-of-range values are clamped.
    """
    cfg = animation_cfg if isinstance(animation_cfg, dict) else {}
    defaults = AnimationTimings()
    kwargs: Dict[str, Any] = {}
    for key, (attr, low, high) in _RANGES.items():
        raw = cfg.get(key, cfg.get(attr))
        if raw is None:
            continue
        value = _clamp(_to_float(raw, getattr(defaults, attr)), low, high)
        kwargs[attr] = int(round(value)) if attr in _INTEGER_FIELDS else value
    return AnimationTimings(**kwargs)
