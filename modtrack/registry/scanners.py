"""Registry of module scanners."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Tuple

from ..logging import get_logger
from ..models import Entity
from .base import RegistryFrozenError

ScanFn = Callable[[Path], Iterable[Entity]]

# A root that is missing or unreadable contributes no modules.
_DISCOVERY_ABSENCE = (FileNotFoundError, NotADirectoryError, PermissionError)


class ScannerRegistry:
    """Holds named discovery functions and aggregates their output."""

    def __init__(self) -> None:
        self._scanners: List[Tuple[str, ScanFn]] = []
        self._frozen = False
        self.logger = get_logger("registry.scanners")

    def register(self, name: str, scan_fn: ScanFn) -> None:
        """Register ``scan_fn`` under ``name`` (e.g. "spm", "legacy")."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register scanner '{name}' after registration closed")
        if not callable(scan_fn):
            raise TypeError(f"Scanner '{name}' must be callable")
        self._scanners.append((name, scan_fn))

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def scan_all(self, root: Path) -> List[Entity]:
        """Run every scanner in registration order and concatenate their modules."""
        root_path = Path(root)
        entities: List[Entity] = []
        for name, scan_fn in self._scanners:
            try:
                found = list(scan_fn(root_path))
            except _DISCOVERY_ABSENCE as exc:
                self.logger.warning("Scanner %s could not access %s: %s", name, root_path, exc)
                continue
            self.logger.debug("Scanner %s discovered %d modules", name, len(found))
            entities.extend(found)
        return entities

    @property
    def count(self) -> int:
        return len(self._scanners)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self._scanners]


__all__ = ["ScanFn", "ScannerRegistry"]
