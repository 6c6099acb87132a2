"""Configuration loading for modtrack (.modtrack.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".modtrack.yml"
DEFAULT_OUTPUT_DIR = "Output"
DEFAULT_MAX_SNAPSHOTS = 100
DEFAULT_RULES_VERSION = "2.0"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class HistoryConfig:
    """Where snapshots are stored and how many are kept."""

    file: str = "history.json"
    max_snapshots: int = DEFAULT_MAX_SNAPSHOTS


@dataclass
class ReportConfig:
    """Report file names and dashboard template overrides."""

    rules_version: str = DEFAULT_RULES_VERSION
    json_file: str = "module-tracker.json"
    html_file: str = "index.html"
    templates_dir: Optional[Path] = None


@dataclass
class PluginConfig:
    """Plugin enablement and extra bootstrap modules."""

    enabled: Optional[List[str]] = None
    modules: List[str] = field(default_factory=list)


@dataclass
class ModTrackConfig:
    """Represents the settings defined in .modtrack.yml."""

    root: Path
    output_dir: Optional[Path] = None
    history: HistoryConfig = field(default_factory=HistoryConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    plugins: PluginConfig = field(default_factory=PluginConfig)

    def resolve_output_dir(self, override: Path | None = None) -> Path:
        if override is not None:
            return override.expanduser().resolve()
        if self.output_dir is not None:
            return self.output_dir
        return self.root / DEFAULT_OUTPUT_DIR


def load_config(config_path: Path) -> ModTrackConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ModTrackConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_dir_str = _as_str(data.get("output_dir"))
    output_dir = (root / output_dir_str).resolve() if output_dir_str else None

    history = HistoryConfig()
    history_data = _as_dict(data.get("history"))
    if history_data:
        history.file = _as_str(history_data.get("file")) or history.file
        max_snapshots = _as_int(history_data.get("max_snapshots"))
        if max_snapshots is not None:
            if max_snapshots < 1:
                raise ConfigError("history.max_snapshots must be a positive integer")
            history.max_snapshots = max_snapshots

    report = ReportConfig()
    report_data = _as_dict(data.get("report"))
    if report_data:
        report.rules_version = _as_str(report_data.get("rules_version")) or report.rules_version
        report.json_file = _as_str(report_data.get("json_file")) or report.json_file
        report.html_file = _as_str(report_data.get("html_file")) or report.html_file
        templates_dir_str = _as_str(report_data.get("templates_dir"))
        report.templates_dir = root / templates_dir_str if templates_dir_str else None

    plugins = PluginConfig()
    plugin_data = _as_dict(data.get("plugins"))
    if plugin_data:
        if "enabled" in plugin_data:
            plugins.enabled = _as_str_list(plugin_data.get("enabled"))
        plugins.modules = _as_str_list(plugin_data.get("modules"))

    return ModTrackConfig(
        root=root,
        output_dir=output_dir,
        history=history,
        report=report,
        plugins=plugins,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "HistoryConfig",
    "ModTrackConfig",
    "PluginConfig",
    "ReportConfig",
    "load_config",
]
