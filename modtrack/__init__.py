"""Module tracker: discover modules, apply rules, and track metrics over time."""

from .engine import AnalysisEngine
from .history import HistoryManager, canonical_value
from .models import (
    Entity,
    FieldMetadata,
    HistoryData,
    HistorySnapshot,
    ModuleMetrics,
    Target,
    TargetMetrics,
    TrackerOutput,
    ValueMeta,
)
from .registry import RuleRegistry, ScannerRegistry

__all__ = [
    "AnalysisEngine",
    "Entity",
    "FieldMetadata",
    "HistoryData",
    "HistoryManager",
    "HistorySnapshot",
    "ModuleMetrics",
    "RuleRegistry",
    "ScannerRegistry",
    "Target",
    "TargetMetrics",
    "TrackerOutput",
    "ValueMeta",
    "canonical_value",
]
