"""Plugin discovery and the registration phase for scanners and rules.

A plugin is a callable ``register(scanners, rules)`` or any object (usually a
module) exposing one. Plugins come from the ``modtrack.plugins`` entry point
group and from bootstrap modules named by dotted import path.
"""

from __future__ import annotations

import importlib
from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set, Tuple

from .logging import get_logger
from .registry import RuleRegistry, ScannerRegistry

_ENTRY_POINT_GROUP = "modtrack.plugins"

RegisterFn = Callable[[ScannerRegistry, RuleRegistry], None]

logger = get_logger("plugins")


class PluginError(RuntimeError):
    """Raised when a plugin cannot be loaded."""


def build_registries(
    enabled: Sequence[str] | None = None,
    modules: Sequence[str] = (),
) -> Tuple[ScannerRegistry, RuleRegistry]:
    """Run every selected plugin once and return frozen registries.

    ``enabled`` restricts entry point plugins by name; bootstrap ``modules``
    always run, after the entry points, in the given order.
    """
    scanners = ScannerRegistry()
    rules = RuleRegistry()
    for name, register in discover_plugins(enabled, modules):
        logger.debug("Registering plugin %s", name)
        register(scanners, rules)
    scanners.freeze()
    rules.freeze()
    logger.debug("Registered %d scanners and %d rules", scanners.count, rules.count)
    return scanners, rules


def discover_plugins(
    enabled: Sequence[str] | None = None,
    modules: Sequence[str] = (),
) -> List[Tuple[str, RegisterFn]]:
    """Return ``(name, register)`` pairs honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    plugins: List[Tuple[str, RegisterFn]] = []
    seen: Set[str] = set()

    for entry in _iter_entry_points():
        key = entry.name.lower()
        if enabled_set is not None and key not in enabled_set:
            continue
        if key in seen:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise PluginError(f"Failed to load plugin entry point '{entry.name}': {exc}") from exc
        plugins.append((entry.name, _coerce_register(entry.name, loaded)))
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown plugins requested: {missing}")

    for dotted in modules:
        if dotted in seen:
            continue
        plugins.append((dotted, load_bootstrap(dotted)))
        seen.add(dotted)

    return plugins


def load_bootstrap(dotted: str) -> RegisterFn:
    """Import ``package.module`` or ``package.module:callable`` as a plugin."""
    module_name, _, attribute = dotted.partition(":")
    try:
        loaded: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise PluginError(f"Failed to import bootstrap module '{module_name}': {exc}") from exc
    if attribute:
        try:
            loaded = getattr(loaded, attribute)
        except AttributeError as exc:
            raise PluginError(f"Bootstrap module '{module_name}' has no '{attribute}'") from exc
    return _coerce_register(dotted, loaded)


def _coerce_register(name: str, obj: object) -> RegisterFn:
    register = getattr(obj, "register", None)
    if callable(register):
        return register
    if callable(obj) and not isinstance(obj, type):
        return obj  # type: ignore[return-value]
    raise PluginError(f"Plugin '{name}' must be a register(scanners, rules) callable or expose one")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = [
    "PluginError",
    "RegisterFn",
    "build_registries",
    "discover_plugins",
    "load_bootstrap",
]
