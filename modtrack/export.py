"""JSON report and HTML dashboard export."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateError

from .config import DEFAULT_RULES_VERSION
from .history import Clock, utc_timestamp
from .logging import get_logger
from .models import HistoryData, ModuleMetrics, TrackerOutput
from .registry import RuleRegistry
from .stores import dump_json, write_text_atomic

DASHBOARD_TEMPLATE = "dashboard.html.j2"


class ExportError(RuntimeError):
    """Raised when a report cannot be encoded or written."""


class ReportExporter:
    """Serialises metrics, field metadata and history for consumers."""

    def __init__(
        self,
        rules: RuleRegistry,
        *,
        rules_version: str = DEFAULT_RULES_VERSION,
        templates_dir: Path | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.rules = rules
        self.rules_version = rules_version
        self.templates_dir = templates_dir
        self._clock = clock
        self._env = self._create_env(templates_dir)
        self.logger = get_logger("export")

    def build_output(self, modules: Sequence[ModuleMetrics]) -> TrackerOutput:
        return TrackerOutput(
            generated_at=utc_timestamp(self._clock),
            rules_version=self.rules_version,
            modules_count=len(modules),
            fields_meta=self.rules.fields_metadata_dict(),
            modules=list(modules),
        )

    def export_json(self, modules: Sequence[ModuleMetrics], path: Path) -> Path:
        output = self.build_output(modules)
        try:
            text = dump_json(output.to_dict(), pretty=True) + "\n"
        except (TypeError, ValueError) as exc:
            raise ExportError(f"Failed to encode report: {exc}") from exc
        self._write(path, text)
        self.logger.info("JSON exported to: %s", path)
        return path

    def export_html(
        self, modules: Sequence[ModuleMetrics], history: HistoryData, path: Path
    ) -> Path:
        output = self.build_output(modules)
        try:
            data_json = _script_safe(dump_json(output.to_dict(), pretty=False))
            history_json = _script_safe(dump_json(history.to_dict(), pretty=False))
        except (TypeError, ValueError) as exc:
            raise ExportError(f"Failed to encode dashboard data: {exc}") from exc

        try:
            template = self._env.get_template(DASHBOARD_TEMPLATE)
            html = template.render(
                data_json=data_json,
                history_json=history_json,
                generated_at=output.generated_at,
                rules_version=output.rules_version,
            )
        except TemplateError as exc:
            raise ExportError(f"Failed to render dashboard: {exc}") from exc

        self._write(path, html)
        self.logger.info("HTML exported to: %s", path)
        return path

    def _write(self, path: Path, text: str) -> None:
        try:
            write_text_atomic(path, text)
        except OSError as exc:
            raise ExportError(f"Failed to write {path}: {exc}") from exc

    def _create_env(self, templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


def _script_safe(text: str) -> str:
    # Embedded JSON must not terminate the surrounding <script> element.
    return text.replace("</", "<\\/")


__all__ = ["DASHBOARD_TEMPLATE", "ExportError", "ReportExporter"]
