"""Configuration loading for geoffrey (.geoffrey.yml)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError
from .markers import DOXYGEN, MarkerSyntax, get_syntax

CONFIG_FILENAME = ".geoffrey.yml"


@dataclass
class MarkerConfig:
    """Marker syntaxes used to extract regions, by source file suffix."""

    default: MarkerSyntax = DOXYGEN
    suffixes: Dict[str, MarkerSyntax] = field(default_factory=dict)

    def syntax_for(self, path: str | PurePath) -> MarkerSyntax:
        suffix = PurePath(path).suffix.lower()
        return self.suffixes.get(suffix, self.default)


@dataclass
class GeoffreyConfig:
    """Represents the settings defined in .geoffrey.yml."""

    root: Path
    source_root: Optional[Path] = None
    workers: Optional[int] = None
    exclude_paths: List[str] = field(default_factory=list)
    markers: MarkerConfig = field(default_factory=MarkerConfig)


def load_config(config_path: Path) -> GeoffreyConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GeoffreyConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root", path=config_file)

    source_root_str = _as_str(data.get("root"))
    source_root = (root / source_root_str).resolve() if source_root_str else None

    workers = data.get("workers")
    if workers is not None and (not isinstance(workers, int) or isinstance(workers, bool) or workers < 1):
        raise ConfigError("`workers` must be a positive integer", path=config_file)

    return GeoffreyConfig(
        root=root,
        source_root=source_root,
        workers=workers,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        markers=_parse_markers(data.get("markers"), config_file),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}", path=path) from exc
    return loaded or {}


def _parse_markers(value: Any, config_file: Path) -> MarkerConfig:
    if value is None:
        return MarkerConfig()
    if not isinstance(value, dict):
        raise ConfigError("`markers` must be a mapping", path=config_file)

    markers = MarkerConfig()
    if value.get("default") is not None:
        markers.default = _parse_syntax("default", value["default"], config_file)

    suffixes = value.get("suffixes") or {}
    if not isinstance(suffixes, dict):
        raise ConfigError("`markers.suffixes` must be a mapping", path=config_file)
    for suffix, entry in suffixes.items():
        key = str(suffix).lower()
        if not key.startswith("."):
            key = f".{key}"
        markers.suffixes[key] = _parse_syntax(key, entry, config_file)
    return markers


def _parse_syntax(label: str, entry: Any, config_file: Path) -> MarkerSyntax:
    if isinstance(entry, str):
        try:
            return get_syntax(entry)
        except KeyError as exc:
            raise ConfigError(f"{exc.args[0]} for {label}", path=config_file) from None

    if not isinstance(entry, dict) or not _as_str(entry.get("open")):
        raise ConfigError(
            f"Marker syntax for {label} must be a syntax name or a mapping with `open`",
            path=config_file,
        )
    try:
        return MarkerSyntax.from_patterns(
            _as_str(entry.get("name")) or label,
            str(entry["open"]),
            _as_str(entry.get("close")),
            placeholder=_as_str(entry.get("placeholder")) or DOXYGEN.placeholder,
        )
    except (re.error, ValueError) as exc:
        raise ConfigError(f"Invalid marker pattern for {label}: {exc}", path=config_file) from exc


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "GeoffreyConfig", "MarkerConfig", "load_config"]
