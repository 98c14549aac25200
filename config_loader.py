"""Configuration loader for term-deck runs (logging + export defaults)."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

try:
    import yaml  # type: ignore
except ModuleNotFoundError as exc:  # pragma: no cover - import guard
    raise RuntimeError(
        "PyYAML is required. Please install it with `pip install pyyaml`."
    ) from exc


_EXPORT_DEFAULTS: Dict[str, Any] = {
    "width": 120,
    "height": 40,
    "fps": 30,
    "slide_time": 3.0,
    "quality": 80,
}


@dataclass
class AppConfig:
    """Wrapper around raw configuration with resolved paths."""

    raw: Dict[str, Any]
    config_path: Path | None
    project_root: Path
    log_file: Path

    @property
    def logging_level(self) -> str:
        level = (
            self.raw.get("logging", {}).get("level")
            or self.raw.get("logging", {}).get("LEVEL")
            or "INFO"
        )
        return str(level).upper()

    @property
    def export(self) -> Dict[str, Any]:
        """Export defaults merged with the ``export`` section of the file."""
        merged = dict(_EXPORT_DEFAULTS)
        section = self.raw.get("export")
        if isinstance(section, dict):
            merged.update({k: v for k, v in section.items() if v is not None})
        return merged

    def to_debug_dict(self) -> Dict[str, Any]:
        return {
            "config_path": str(self.config_path) if self.config_path else None,
            "log_file": str(self.log_file),
            "export": self.export,
        }

    def dumps(self) -> str:
        """Return a JSON string for diagnostics."""
        return json.dumps(self.to_debug_dict(), ensure_ascii=False, indent=2)


def _build(raw: Dict[str, Any], config_path: Path | None, root: Path) -> AppConfig:
    log_file_name = raw.get("logging", {}).get("file", "logs/term-deck.log")
    log_file = (root / log_file_name).resolve()
    return AppConfig(raw=raw, config_path=config_path, project_root=root, log_file=log_file)


def default_config(project_root: Path | None = None) -> AppConfig:
    """Configuration used when no YAML file is given."""
    root = (project_root or Path.cwd()).resolve()
    return _build({}, None, root)


def load_config(path: Path | str, project_root: Path | None = None) -> AppConfig:
    """Load YAML config and resolve the log file location."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    root = project_root.resolve() if project_root else config_path.parent
    return _build(raw, config_path, root)
