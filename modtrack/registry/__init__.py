"""Scanner and rule registries populated during the plugin bootstrap phase."""

from .base import RegistryFrozenError
from .rules import FieldMap, RuleRegistry
from .scanners import ScannerRegistry

__all__ = [
    "FieldMap",
    "RegistryFrozenError",
    "RuleRegistry",
    "ScannerRegistry",
]
