"""Registry of detection rules and their field metadata."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple

from ..models import Entity, FieldMetadata, Target
from .base import RegistryFrozenError

FieldMap = Dict[str, Any]
TargetRuleFn = Callable[[Target, Path], Mapping[str, Any]]
ModuleRuleFn = Callable[[Entity], Mapping[str, Any]]


class RuleRegistry:
    """Holds target-scoped and module-scoped rules.

    Every ``apply_to_*`` call re-runs every rule; outputs are never cached
    because rules may read filesystem state that changes between scans.
    Field maps are merged in registration order, so the rule registered last
    wins when two rules emit the same key.
    """

    def __init__(self) -> None:
        self._target_rules: List[Tuple[FieldMetadata, TargetRuleFn]] = []
        self._module_rules: List[Tuple[FieldMetadata, ModuleRuleFn]] = []
        # metadata of both kinds, in registration order
        self._fields: List[FieldMetadata] = []
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration

    def register_target_rule(self, metadata: FieldMetadata, apply_fn: TargetRuleFn) -> None:
        """Register a rule applied to every target of every module."""
        self._check_registration(metadata, apply_fn)
        self._target_rules.append((metadata, apply_fn))
        self._fields.append(metadata)

    def register_module_rule(self, metadata: FieldMetadata, apply_fn: ModuleRuleFn) -> None:
        """Register a rule applied to every module."""
        self._check_registration(metadata, apply_fn)
        self._module_rules.append((metadata, apply_fn))
        self._fields.append(metadata)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Metadata

    def all_fields_metadata(self) -> List[FieldMetadata]:
        """Metadata of every rule, deduplicated by id.

        Entries follow registration order across both rule kinds. A duplicated
        id keeps the position where it was first registered and carries the
        metadata registered last, whichever kind registered it.
        """
        by_id: Dict[str, FieldMetadata] = {}
        for metadata in self._fields:
            by_id[metadata.id] = metadata
        return list(by_id.values())

    def fields_metadata_dict(self) -> Dict[str, FieldMetadata]:
        return {metadata.id: metadata for metadata in self.all_fields_metadata()}

    # ------------------------------------------------------------------
    # Application

    def apply_to_target(self, target: Target, parent_path: Path) -> FieldMap:
        result: FieldMap = {}
        for metadata, apply_fn in self._target_rules:
            result.update(_as_field_map(metadata, apply_fn(target, parent_path)))
        return result

    def apply_to_module(self, entity: Entity) -> FieldMap:
        result: FieldMap = {}
        for metadata, apply_fn in self._module_rules:
            result.update(_as_field_map(metadata, apply_fn(entity)))
        return result

    @property
    def count(self) -> int:
        return len(self._target_rules) + len(self._module_rules)

    def _check_registration(self, metadata: FieldMetadata, apply_fn: Callable[..., Any]) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register rule '{metadata.id}' after registration closed"
            )
        if not isinstance(metadata, FieldMetadata):
            raise TypeError("Rules must be registered with FieldMetadata")
        if not callable(apply_fn):
            raise TypeError(f"Rule '{metadata.id}' must be callable")


def _as_field_map(metadata: FieldMetadata, output: object) -> FieldMap:
    if not isinstance(output, Mapping):
        raise TypeError(
            f"Rule '{metadata.id}' returned {type(output).__name__}; expected a mapping"
        )
    return dict(output)


__all__ = ["FieldMap", "ModuleRuleFn", "RuleRegistry", "TargetRuleFn"]
