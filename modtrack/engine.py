"""Applies registered rules to discovered modules."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from .logging import get_logger
from .models import Entity, ModuleMetrics, Target, TargetMetrics
from .registry import RuleRegistry


class AnalysisEngine:
    """Turns entities into metrics records using a rule registry.

    ``analyze`` touches no shared state, so each entity can be analysed
    independently. Rule failures are not caught: a failing rule aborts the run.
    """

    def __init__(self, rules: RuleRegistry) -> None:
        self.rules = rules
        self.logger = get_logger("engine")

    def analyze(self, entity: Entity) -> ModuleMetrics:
        targets = [self._analyze_target(target, entity.path) for target in entity.targets]
        custom_fields = self.rules.apply_to_module(entity)
        return ModuleMetrics(
            name=entity.name,
            path=Path(entity.path).as_posix(),
            source=entity.source,
            is_modularized=entity.is_modularized,
            targets=targets,
            custom_fields=custom_fields,
        )

    def analyze_all(self, entities: Iterable[Entity]) -> List[ModuleMetrics]:
        results: List[ModuleMetrics] = []
        for entity in entities:
            metrics = self.analyze(entity)
            results.append(metrics)
            suffix = f" - {len(metrics.targets)} targets" if metrics.targets else ""
            self.logger.info("[ok] %s%s", metrics.name, suffix)
        return results

    def _analyze_target(self, target: Target, module_path: Path) -> TargetMetrics:
        custom_fields = self.rules.apply_to_target(target, Path(module_path))
        return TargetMetrics(name=target.name, custom_fields=custom_fields)


__all__ = ["AnalysisEngine"]
