"""CLI entrypoints for modtrack commands."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .export import ExportError
from .history import HistoryError
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator
from .plugins import PluginError
from .stores import dump_json

ROOT_ENV_VAR = "MODTRACK_ROOT"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_location_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=f"Project root (defaults to ${ROOT_ENV_VAR}, then the current directory).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for reports and history (defaults to <root>/Output).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modtrack",
        description="Track module structure and rule metrics of a codebase over time.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Scan the project, record a history snapshot and export reports.",
    )
    _add_verbose_option(run_parser, suppress_default=True)
    _add_location_options(run_parser)
    run_parser.add_argument(
        "--plugin",
        action="append",
        default=[],
        metavar="MODULE",
        help="Bootstrap module registering scanners and rules (repeatable).",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Analyze and print the snapshot without writing history or reports.",
    )

    history_parser = subparsers.add_parser(
        "history",
        help="Print the stored history snapshots as JSON.",
    )
    _add_verbose_option(history_parser, suppress_default=True)
    _add_location_options(history_parser)

    return parser


def resolve_root(path: str | None) -> Path:
    """Argument first, then $MODTRACK_ROOT, then the current directory."""
    if path:
        return Path(path)
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root)
    return Path.cwd()


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for modtrack commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")
    root = resolve_root(args.path)

    if args.command == "run":
        orchestrator = Orchestrator(plugin_modules=args.plugin)
        try:
            outcome = orchestrator.run(root, output_dir=args.output_dir, dry_run=args.dry_run)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (PluginError, ValueError) as exc:
            parser.exit(1, f"modtrack run failed: {exc}\n")
        except (HistoryError, ExportError) as exc:
            logger.debug("Export failure", exc_info=True)
            parser.exit(1, f"Error exporting: {exc}\nRun with --verbose for more details.\n")
        if outcome.dry_run:
            snapshot = outcome.snapshot.to_dict() if outcome.snapshot else {}
            print(dump_json(snapshot))
            return
        print(
            f"Analyzed {len(outcome.modules)} modules "
            f"({outcome.modularized_count} modularized, {outcome.legacy_count} legacy)"
        )
        print(f"Done! Open {_relativize(outcome.html_path)} in your browser.")
    elif args.command == "history":
        try:
            history = Orchestrator().load_history(root, output_dir=args.output_dir)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        print(dump_json(history.to_dict()))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path | None) -> str:
    if path is None:
        return ""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
