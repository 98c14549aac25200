from __future__ import annotations

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from animation_config import AnimationTimings, resolve_animation_timings
from config_loader import default_config, load_config
from logging_utils import configure_logging


def test_default_config(tmp_path: Path) -> None:
    config = default_config(tmp_path)
    assert config.config_path is None
    assert config.logging_level == "INFO"
    assert config.log_file == (tmp_path / "logs" / "term-deck.log").resolve()
    assert config.export == {"width": 120, "height": 40, "fps": 30, "slide_time": 3.0, "quality": 80}


def test_load_config_merges_export_section(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n  level: debug\n  file: out/run.log\nexport:\n  fps: 12\n  quality: 60\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.logging_level == "DEBUG"
    assert config.log_file == (tmp_path / "out" / "run.log").resolve()
    assert config.export["fps"] == 12
    assert config.export["quality"] == 60
    assert config.export["width"] == 120
    assert '"fps": 12' in config.dumps()


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_animation_timings_clamped_and_coerced() -> None:
    timings = resolve_animation_timings(
        {"revealSpeed": "2", "matrixDensity": 1000, "glitchIterations": "bad", "line_delay": -5}
    )
    assert timings.reveal_speed == 2.0
    assert timings.matrix_density == 200
    assert timings.glitch_iterations == AnimationTimings().glitch_iterations
    assert timings.line_delay == 0
    assert timings.matrix_interval == 80.0


def test_animation_timings_defaults_for_missing_section() -> None:
    assert resolve_animation_timings(None) == AnimationTimings()


def test_scaled_honours_reveal_speed() -> None:
    assert AnimationTimings(reveal_speed=0.5).scaled(100) == pytest.approx(0.2)


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "app.log"
    root = logging.getLogger()
    saved = list(root.handlers)
    try:
        configure_logging("DEBUG", log_file, console=False)
        configure_logging("INFO", log_file, console=False)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.FileHandler)
        logging.getLogger("term_deck.test").info("hello")
        root.handlers[0].flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)
        for handler in saved:
            root.addHandler(handler)
