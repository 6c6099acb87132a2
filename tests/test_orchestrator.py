"""Tests for modtrack.orchestrator."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from modtrack import plugins
from modtrack.export import ExportError, ReportExporter
from modtrack.orchestrator import Orchestrator
from modtrack.plugins import build_registries
from modtrack.registry import RuleRegistry, ScannerRegistry

SAMPLE = "tests._fixtures.sample_plugin"


@pytest.fixture(autouse=True)
def _no_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(plugins, "_iter_entry_points", lambda: [])


def test_run_writes_reports_and_history(sample_project, clock) -> None:
    orchestrator = Orchestrator(plugin_modules=[SAMPLE], clock=clock)

    outcome = orchestrator.run(sample_project.path())

    output_dir = sample_project.path().resolve() / "Output"
    assert outcome.output_dir == output_dir
    assert [m.name for m in outcome.modules] == ["Core", "Networking", "Checkout"]
    assert outcome.modularized_count == 2
    assert outcome.legacy_count == 1

    snapshot = outcome.snapshot
    assert snapshot is not None
    assert snapshot.total_targets == 3
    assert snapshot.custom_metrics == {
        "concurrency_async_count": 2,
        "concurrency_callbacks_count": 1,
        "uikit_true_count": 1,
        "uikit_false_count": 2,
    }

    report = json.loads((output_dir / "module-tracker.json").read_text(encoding="utf-8"))
    assert report["modules_count"] == 3
    assert set(report["fields_meta"]) == {"concurrency", "uikit"}
    core = report["modules"][0]
    assert core["targets"] == [
        {"name": "CoreAPI", "custom_fields": {"concurrency": "callbacks"}},
        {"name": "CoreImpl", "custom_fields": {"concurrency": "async"}},
    ]
    assert core["custom_fields"] == {"uikit": False}

    assert (output_dir / "index.html").exists()
    assert len(json.loads((output_dir / "history.json").read_text())["snapshots"]) == 1


def test_second_run_without_changes_keeps_history_length(sample_project, clock) -> None:
    orchestrator = Orchestrator(plugin_modules=[SAMPLE], clock=clock)

    orchestrator.run(sample_project.path())
    second = orchestrator.run(sample_project.path())

    assert second.snapshot is None
    assert len(second.history.snapshots) == 1


def test_changes_between_runs_append_snapshots(sample_project, clock) -> None:
    orchestrator = Orchestrator(plugin_modules=[SAMPLE], clock=clock)
    orchestrator.run(sample_project.path())

    sample_project.write({"Packages/Payments/Sources/Payments/Pay.swift": "func pay() async {}\n"})
    outcome = orchestrator.run(sample_project.path())

    assert [s.modularized_count for s in outcome.history.snapshots] == [2, 3]


def test_dry_run_writes_nothing(sample_project, clock) -> None:
    outcome = Orchestrator(plugin_modules=[SAMPLE], clock=clock).run(
        sample_project.path(), dry_run=True
    )

    assert outcome.dry_run is True
    assert outcome.snapshot is not None
    assert outcome.json_path is None
    assert not (sample_project.path() / "Output").exists()


def test_config_controls_output_and_history(sample_project, clock) -> None:
    sample_project.write(
        {
            ".modtrack.yml": f"""
                output_dir: build/tracker
                history:
                  file: trend.json
                report:
                  rules_version: "5.0"
                plugins:
                  modules: [{SAMPLE}]
            """
        }
    )

    outcome = Orchestrator(clock=clock).run(sample_project.path())

    output_dir = sample_project.path().resolve() / "build" / "tracker"
    assert outcome.json_path == output_dir / "module-tracker.json"
    assert (output_dir / "trend.json").exists()
    report = json.loads(outcome.json_path.read_text(encoding="utf-8"))
    assert report["rules_version"] == "5.0"


def test_injected_empty_registries_produce_zero_snapshot(tmp_path: Path, clock) -> None:
    outcome = Orchestrator(ScannerRegistry(), RuleRegistry(), clock=clock).run(tmp_path)

    assert outcome.modules == []
    snapshot = outcome.snapshot
    assert snapshot is not None
    assert (snapshot.modules_count, snapshot.total_targets, snapshot.custom_metrics) == (0, 0, {})


def test_missing_project_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator(ScannerRegistry(), RuleRegistry()).run(tmp_path / "missing")


def test_load_history_for_missing_project_raises(sample_project, clock) -> None:
    scanners, rules = build_registries(modules=[SAMPLE])
    Orchestrator(scanners, rules, clock=clock).run(sample_project.path())
    missing = sample_project.path() / "missing"

    with pytest.raises(FileNotFoundError, match="missing"):
        Orchestrator().load_history(missing)


def test_export_failure_keeps_recorded_history(
    sample_project, clock, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(self, modules, path):
        raise ExportError("disk full")

    monkeypatch.setattr(ReportExporter, "export_json", _fail)
    scanners, rules = build_registries(modules=[SAMPLE])

    with pytest.raises(ExportError):
        Orchestrator(scanners, rules, clock=clock).run(sample_project.path())

    history = Orchestrator().load_history(sample_project.path())
    assert len(history.snapshots) == 1


def test_registries_must_be_injected_together() -> None:
    with pytest.raises(ValueError):
        Orchestrator(scanners=ScannerRegistry())
