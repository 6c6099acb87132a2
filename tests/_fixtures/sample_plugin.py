"""Bootstrap plugin used by tests: Swift-style packages plus legacy folders.

Layout understood by the scanners::

    Packages/<Module>/Sources/<Target>/*.swift   -> modularized module
    Legacy/<Module>/*.swift                       -> legacy module
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from modtrack.fileutils import iter_source_files
from modtrack.models import Entity, FieldMetadata, Target, ValueMeta
from modtrack.registry import RuleRegistry, ScannerRegistry

CONCURRENCY = FieldMetadata(
    id="concurrency",
    label="Concurrency",
    level="target",
    is_filterable=True,
    show_in_chart=True,
    show_in_comparison=True,
    chart_type="line",
    values={
        "async": ValueMeta(label="async/await", color="green"),
        "callbacks": ValueMeta(label="Callbacks", color="orange"),
    },
)

UIKIT = FieldMetadata(
    id="uikit",
    label="UIKit",
    level="module",
    show_in_chart=True,
    show_in_comparison=True,
    inverted_comparison=True,
    values={
        "true": ValueMeta(label="Uses UIKit", color="red"),
        "false": ValueMeta(label="No UIKit", color="green"),
    },
)


def scan_packages(root: Path) -> List[Entity]:
    packages = root / "Packages"
    entities: List[Entity] = []
    for module_dir in sorted(p for p in packages.iterdir() if p.is_dir()):
        sources = module_dir / "Sources"
        targets = []
        if sources.is_dir():
            targets = [
                Target(name=target_dir.name, path=target_dir)
                for target_dir in sorted(sources.iterdir())
                if target_dir.is_dir()
            ]
        entities.append(Entity(name=module_dir.name, path=module_dir, source="spm", targets=targets))
    return entities


def scan_legacy(root: Path) -> List[Entity]:
    legacy = root / "Legacy"
    return [
        Entity(name=module_dir.name, path=module_dir, source="legacy")
        for module_dir in sorted(p for p in legacy.iterdir() if p.is_dir())
    ]


def detect_concurrency(target: Target, module_path: Path) -> dict:
    for _, text in iter_source_files(target.path, [".swift"]):
        if "async " in text or "await " in text:
            return {"concurrency": "async"}
    return {"concurrency": "callbacks"}


def detect_uikit(entity: Entity) -> dict:
    uses = any("import UIKit" in text for _, text in iter_source_files(entity.path, [".swift"]))
    return {"uikit": uses}


def register(scanners: ScannerRegistry, rules: RuleRegistry) -> None:
    scanners.register("spm", scan_packages)
    scanners.register("legacy", scan_legacy)
    rules.register_target_rule(CONCURRENCY, detect_concurrency)
    rules.register_module_rule(UIKIT, detect_uikit)
