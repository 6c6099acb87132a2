"""Pipeline orchestration: scan, analyze, record history, export."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ConfigError, ModTrackConfig, load_config
from .engine import AnalysisEngine
from .export import ReportExporter
from .history import Clock, HistoryManager
from .logging import get_logger
from .models import HistoryData, HistorySnapshot, ModuleMetrics
from .plugins import build_registries
from .registry import RuleRegistry, ScannerRegistry


@dataclass
class RunOutcome:
    """Result of a single tracker run."""

    root: Path
    output_dir: Path
    modules: List[ModuleMetrics]
    snapshot: Optional[HistorySnapshot]
    history: HistoryData
    json_path: Optional[Path]
    html_path: Optional[Path]
    dry_run: bool = False

    @property
    def modularized_count(self) -> int:
        return sum(1 for module in self.modules if module.is_modularized)

    @property
    def legacy_count(self) -> int:
        return len(self.modules) - self.modularized_count


class Orchestrator:
    """Coordinates registries, analysis, history and export for one project."""

    def __init__(
        self,
        scanners: ScannerRegistry | None = None,
        rules: RuleRegistry | None = None,
        *,
        plugin_modules: Sequence[str] = (),
        clock: Clock | None = None,
    ) -> None:
        if (scanners is None) != (rules is None):
            raise ValueError("scanners and rules must be injected together")
        self.scanners = scanners
        self.rules = rules
        self.plugin_modules = list(plugin_modules)
        self._clock = clock
        self.logger = get_logger("orchestrator")

    def run(
        self,
        path: str | Path,
        *,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Analyze the project at ``path`` and write its reports."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")

        config = self._load_config(root)
        scanners, rules = self._resolve_registries(config)
        self.logger.info("Project root: %s", root)
        self.logger.info("Registered scanners: %d", scanners.count)
        self.logger.info("Registered rules: %d", rules.count)

        entities = scanners.scan_all(root)
        self.logger.info("Found %d modules", len(entities))

        engine = AnalysisEngine(rules)
        self.logger.info("Analyzing modules...")
        modules = engine.analyze_all(entities)

        target_dir = config.resolve_output_dir(output_dir)
        history_manager = self._history_manager(target_dir, rules, config)

        if dry_run:
            snapshot = history_manager.create_snapshot(modules)
            history = history_manager.load_history()
            self.logger.info("Dry run: skipping history and report writes")
            return RunOutcome(root, target_dir, modules, snapshot, history, None, None, True)

        target_dir.mkdir(parents=True, exist_ok=True)
        # History is kept even if the export below fails.
        snapshot = history_manager.record_snapshot(modules)
        history = history_manager.load_history()

        exporter = ReportExporter(
            rules,
            rules_version=config.report.rules_version,
            templates_dir=config.report.templates_dir,
            clock=self._clock,
        )
        json_path = exporter.export_json(modules, target_dir / config.report.json_file)
        html_path = exporter.export_html(modules, history, target_dir / config.report.html_file)

        return RunOutcome(root, target_dir, modules, snapshot, history, json_path, html_path)

    def load_history(self, path: str | Path, *, output_dir: Path | None = None) -> HistoryData:
        """Return the stored history for the project at ``path``."""
        root = Path(path).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        config = self._load_config(root)
        target_dir = config.resolve_output_dir(output_dir)
        # Aggregation is not needed to read history, so no plugins are loaded.
        return self._history_manager(target_dir, RuleRegistry(), config).load_history()

    def _load_config(self, root: Path) -> ModTrackConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return ModTrackConfig(root=root)

    def _resolve_registries(self, config: ModTrackConfig) -> tuple[ScannerRegistry, RuleRegistry]:
        if self.scanners is not None and self.rules is not None:
            self.scanners.freeze()
            self.rules.freeze()
            return self.scanners, self.rules
        modules = [*config.plugins.modules, *self.plugin_modules]
        return build_registries(config.plugins.enabled, modules)

    def _history_manager(
        self, output_dir: Path, rules: RuleRegistry, config: ModTrackConfig
    ) -> HistoryManager:
        return HistoryManager(
            output_dir,
            rules,
            filename=config.history.file,
            max_snapshots=config.history.max_snapshots,
            clock=self._clock,
        )


__all__ = ["Orchestrator", "RunOutcome"]
