"""Filesystem helpers for scanner and rule authors."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, Tuple

_EXCLUDED_DIRS = {
    ".build",
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    "DerivedData",
    "Pods",
    "build",
}


def path_exists(path: Path) -> bool:
    return Path(path).exists()


def iter_source_files(path: Path, suffixes: Iterable[str]) -> Iterator[Tuple[Path, str]]:
    """Yield ``(file, text)`` for files under ``path`` ending in one of ``suffixes``.

    Hidden entries and build/VCS directories are skipped, as are files that
    cannot be read as UTF-8. A missing ``path`` yields nothing.
    """
    root = Path(path)
    if not root.is_dir():
        return
    wanted = {suffix.lower() if suffix.startswith(".") else f".{suffix.lower()}" for suffix in suffixes}

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            name for name in dirnames if name not in _EXCLUDED_DIRS and not name.startswith(".")
        )
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            file_path = Path(dirpath) / filename
            if file_path.suffix.lower() not in wanted:
                continue
            try:
                text = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            yield file_path, text


__all__ = ["iter_source_files", "path_exists"]
