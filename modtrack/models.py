"""Core data models shared across modtrack components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

LEVELS = ("module", "target")
CHART_TYPES = ("line", "bar", "area")
COLORS = ("green", "yellow", "orange", "red", "blue", "gray", "purple")


@dataclass(frozen=True)
class Target:
    """A discoverable sub-unit (build target, library) inside a module."""

    name: str
    path: Path


@dataclass(frozen=True)
class Entity:
    """A module discovered by a scanner."""

    name: str
    path: Path
    source: str
    targets: Tuple[Target, ...] = ()

    def __post_init__(self) -> None:
        # Scanners commonly build lists; store an immutable copy.
        object.__setattr__(self, "targets", tuple(self.targets))

    @property
    def is_modularized(self) -> bool:
        return len(self.targets) > 0


@dataclass(frozen=True)
class ValueMeta:
    """Display metadata for one value of an enum-like field."""

    label: str
    color: str
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.color not in COLORS:
            raise ValueError(
                f"Unknown badge color '{self.color}'; expected one of {', '.join(COLORS)}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"label": self.label, "color": self.color}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class FieldMetadata:
    """Self-describing schema for a rule output.

    Consumers (filters, tables, charts, comparisons, history aggregation) read
    these flags instead of knowing about individual rules. ``level`` tells
    whether the value lives on the module or on each of its targets;
    ``inverted_comparison`` marks fields where a lower number is better.
    """

    id: str
    label: str
    description: Optional[str] = None
    level: str = "target"
    is_filterable: bool = False
    show_in_table: bool = True
    show_in_chart: bool = False
    show_in_comparison: bool = False
    inverted_comparison: bool = False
    chart_type: Optional[str] = None
    chart_color: Optional[str] = None
    values: Mapping[str, ValueMeta] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Field metadata requires a non-empty id")
        if self.level not in LEVELS:
            raise ValueError(f"Field '{self.id}' has unknown level '{self.level}'")
        if self.chart_type is not None and self.chart_type not in CHART_TYPES:
            raise ValueError(f"Field '{self.id}' has unknown chart type '{self.chart_type}'")
        object.__setattr__(self, "values", dict(self.values))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "level": self.level,
            "is_filterable": self.is_filterable,
            "show_in_table": self.show_in_table,
            "show_in_chart": self.show_in_chart,
            "show_in_comparison": self.show_in_comparison,
            "inverted_comparison": self.inverted_comparison,
            "values": {token: meta.to_dict() for token, meta in self.values.items()},
        }
        if self.description is not None:
            data["description"] = self.description
        if self.chart_type is not None:
            data["chart_type"] = self.chart_type
        if self.chart_color is not None:
            data["chart_color"] = self.chart_color
        return data


@dataclass(frozen=True)
class TargetMetrics:
    """Rule output for a single target."""

    name: str
    custom_fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "custom_fields": dict(self.custom_fields)}


@dataclass(frozen=True)
class ModuleMetrics:
    """Rule output for a module and all of its targets."""

    name: str
    path: str
    source: str
    is_modularized: bool
    targets: List[TargetMetrics] = field(default_factory=list)
    custom_fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "source": self.source,
            "is_modularized": self.is_modularized,
            "targets": [target.to_dict() for target in self.targets],
            "custom_fields": dict(self.custom_fields),
        }


@dataclass(frozen=True)
class HistorySnapshot:
    """Aggregated metrics at a point in time."""

    date: str
    modules_count: int
    modularized_count: int
    legacy_count: int
    total_targets: int
    # key = "<field_id>_<value>_count"
    custom_metrics: Dict[str, int] = field(default_factory=dict)

    def same_metrics(self, other: HistorySnapshot) -> bool:
        """Compare every field except ``date``."""
        return (
            self.modules_count == other.modules_count
            and self.modularized_count == other.modularized_count
            and self.legacy_count == other.legacy_count
            and self.total_targets == other.total_targets
            and self.custom_metrics == other.custom_metrics
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "modules_count": self.modules_count,
            "modularized_count": self.modularized_count,
            "legacy_count": self.legacy_count,
            "total_targets": self.total_targets,
            "custom_metrics": dict(self.custom_metrics),
        }

    @classmethod
    def from_dict(cls, payload: object) -> Optional[HistorySnapshot]:
        """Return a snapshot for a well-formed payload, ``None`` otherwise."""
        if not isinstance(payload, dict):
            return None
        date = payload.get("date")
        counts = [
            payload.get(key)
            for key in ("modules_count", "modularized_count", "legacy_count", "total_targets")
        ]
        if not isinstance(date, str):
            return None
        if not all(isinstance(value, int) and not isinstance(value, bool) for value in counts):
            return None
        raw_metrics = payload.get("custom_metrics", {})
        if not isinstance(raw_metrics, dict):
            return None
        custom_metrics: Dict[str, int] = {}
        for key, value in raw_metrics.items():
            if isinstance(key, str) and isinstance(value, int) and not isinstance(value, bool):
                custom_metrics[key] = value
        return cls(date, *counts, custom_metrics=custom_metrics)  # type: ignore[arg-type]


@dataclass
class HistoryData:
    """The stored sequence of snapshots, oldest first."""

    snapshots: List[HistorySnapshot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"snapshots": [snapshot.to_dict() for snapshot in self.snapshots]}


@dataclass(frozen=True)
class TrackerOutput:
    """Bundle handed to the JSON and HTML exporters."""

    generated_at: str
    rules_version: str
    modules_count: int
    fields_meta: Dict[str, FieldMetadata]
    modules: List[ModuleMetrics]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "rules_version": self.rules_version,
            "modules_count": self.modules_count,
            "fields_meta": {key: meta.to_dict() for key, meta in self.fields_meta.items()},
            "modules": [module.to_dict() for module in self.modules],
        }
