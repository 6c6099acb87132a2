"""Tests for modtrack.fileutils."""

from __future__ import annotations

from pathlib import Path

from modtrack.fileutils import iter_source_files, path_exists


def test_iter_source_files_filters_suffixes_and_skips_hidden(project_builder) -> None:
    project_builder.write(
        {
            "Sources/App/App.swift": "struct App {}\n",
            "Sources/App/Notes.md": "# notes\n",
            "Sources/App/.hidden.swift": "hidden\n",
            ".build/debug/Generated.swift": "generated\n",
            "node_modules/pkg/index.swift": "vendored\n",
        }
    )
    root = project_builder.path()

    found = [(path.relative_to(root).as_posix(), text) for path, text in iter_source_files(root, ["swift"])]

    assert found == [("Sources/App/App.swift", "struct App {}\n")]


def test_iter_source_files_skips_undecodable_files(tmp_path: Path) -> None:
    (tmp_path / "bad.swift").write_bytes(b"\xff\xfe\x00")
    (tmp_path / "good.swift").write_text("let x = 1\n", encoding="utf-8")

    assert [path.name for path, _ in iter_source_files(tmp_path, [".swift"])] == ["good.swift"]


def test_missing_directory_yields_nothing(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    assert list(iter_source_files(missing, [".swift"])) == []
    assert path_exists(missing) is False
    assert path_exists(tmp_path) is True
