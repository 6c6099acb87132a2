"""Point-in-time snapshots of aggregated metrics."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .logging import get_logger
from .models import FieldMetadata, HistoryData, HistorySnapshot, ModuleMetrics
from .registry import RuleRegistry
from .stores import read_json, write_json_atomic

DEFAULT_HISTORY_FILE = "history.json"
DEFAULT_MAX_SNAPSHOTS = 100

Clock = Callable[[], datetime]


class HistoryError(RuntimeError):
    """Raised when the history document cannot be written."""


def utc_timestamp(clock: Clock | None = None) -> str:
    """ISO 8601 timestamp in UTC with second precision, e.g. ``2024-05-01T10:00:00Z``."""
    now = clock() if clock is not None else datetime.now(UTC)
    return now.astimezone(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def canonical_value(value: Any) -> Optional[str]:
    """Return the textual form used to match field values against value tokens.

    ``None`` has no canonical form and never matches. Booleans render as
    ``true``/``false``, numbers as their Python literal, strings unchanged.
    Lists, tuples and mappings render as compact JSON with sorted keys, so an
    array value only matches a token spelled exactly like ``["a","b"]``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (list, tuple, Mapping)):
        try:
            return json.dumps(value, sort_keys=True, separators=(",", ":"))
        except (TypeError, ValueError):
            return str(value)
    return str(value)


class HistoryManager:
    """Loads, aggregates and appends history snapshots for one output directory."""

    def __init__(
        self,
        output_dir: Path,
        rules: RuleRegistry,
        *,
        filename: str = DEFAULT_HISTORY_FILE,
        max_snapshots: int = DEFAULT_MAX_SNAPSHOTS,
        clock: Clock | None = None,
    ) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self.path = Path(output_dir) / filename
        self.rules = rules
        self.max_snapshots = max_snapshots
        self._clock = clock
        self.logger = get_logger("history")

    def load_history(self) -> HistoryData:
        """Return stored history; a missing or corrupt file counts as empty."""
        payload = read_json(self.path)
        if not isinstance(payload, dict):
            if payload is not None:
                self.logger.warning("Ignoring malformed history at %s", self.path)
            return HistoryData()
        raw_snapshots = payload.get("snapshots")
        if not isinstance(raw_snapshots, list):
            return HistoryData()
        snapshots = []
        for raw in raw_snapshots:
            snapshot = HistorySnapshot.from_dict(raw)
            if snapshot is None:
                self.logger.debug("Skipping malformed snapshot entry in %s", self.path)
                continue
            snapshots.append(snapshot)
        return HistoryData(snapshots=snapshots)

    def save_history(self, history: HistoryData) -> None:
        try:
            write_json_atomic(self.path, history.to_dict())
        except (OSError, TypeError, ValueError) as exc:
            raise HistoryError(f"Failed to write history to {self.path}: {exc}") from exc

    def create_snapshot(self, modules: Sequence[ModuleMetrics]) -> HistorySnapshot:
        modularized = [module for module in modules if module.is_modularized]
        legacy_count = len(modules) - len(modularized)
        total_targets = sum(len(module.targets) for module in modularized)

        custom_metrics: Dict[str, int] = {}
        for field in self.rules.all_fields_metadata():
            if not field.show_in_chart:
                continue
            for token in field.values:
                key = f"{field.id}_{token}_count"
                custom_metrics[key] = _count_matches(field, token, modules)

        return HistorySnapshot(
            date=utc_timestamp(self._clock),
            modules_count=len(modules),
            modularized_count=len(modularized),
            legacy_count=legacy_count,
            total_targets=total_targets,
            custom_metrics=custom_metrics,
        )

    def record_snapshot(self, modules: Sequence[ModuleMetrics]) -> Optional[HistorySnapshot]:
        """Append a snapshot unless metrics are unchanged since the last one.

        Returns the appended snapshot, or ``None`` when nothing was recorded.
        """
        history = self.load_history()
        snapshot = self.create_snapshot(modules)

        if history.snapshots and snapshot.same_metrics(history.snapshots[-1]):
            self.logger.info("History: no changes detected, skipping snapshot")
            return None

        history.snapshots.append(snapshot)
        if len(history.snapshots) > self.max_snapshots:
            history.snapshots = history.snapshots[-self.max_snapshots :]

        self.save_history(history)
        self.logger.info(
            "History recorded: %s (%d snapshots)", self.path, len(history.snapshots)
        )
        return snapshot


def _count_matches(field: FieldMetadata, token: str, modules: Sequence[ModuleMetrics]) -> int:
    count = 0
    for module in modules:
        if field.level == "module":
            if _matches(module.custom_fields, field.id, token):
                count += 1
            continue
        for target in module.targets:
            if _matches(target.custom_fields, field.id, token):
                count += 1
    return count


def _matches(custom_fields: Mapping[str, Any], field_id: str, token: str) -> bool:
    if field_id not in custom_fields:
        return False
    return canonical_value(custom_fields[field_id]) == token


__all__ = [
    "DEFAULT_HISTORY_FILE",
    "DEFAULT_MAX_SNAPSHOTS",
    "HistoryError",
    "HistoryManager",
    "canonical_value",
    "utc_timestamp",
]
