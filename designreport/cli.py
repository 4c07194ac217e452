"""CLI entrypoints for designreport."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, ReportConfig, apply_env_overrides, load_config
from .logging import configure_logging
from .orchestrator import FIGMA_KEYWORD, Orchestrator, build_source
from .scheduler import FanOutScheduler
from .sources import DiscoveryError
from .stores import SnapshotError

_SERVE_COMMAND = "serve"


def _add_verbose_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_reports_dir_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=None,
        help="Directory where report snapshots are stored (overrides the config file).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designreport",
        usage="%(prog)s [options] [ root_project_directory | figma ]",
        description=(
            "Inventory symbols, text styles and layer styles across design files "
            "and write one consolidated usage report."
        ),
        epilog=f"Run `%(prog)s {_SERVE_COMMAND} --help` to serve stored reports over HTTP.",
    )
    _add_verbose_option(parser)
    _add_reports_dir_option(parser)
    parser.add_argument(
        "source",
        nargs="?",
        help=(
            "Directory laid out as <project>/<file>.sketch, "
            f"or `{FIGMA_KEYWORD}` to read the teams in FIGMA_TEAMS."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Config file or directory containing .designreport.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Upper bound on extractions in flight at once.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def _build_serve_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=f"designreport {_SERVE_COMMAND}",
        description="Serve stored report snapshots as JSON.",
    )
    _add_verbose_option(parser)
    _add_reports_dir_option(parser)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Config file or directory containing .designreport.yml.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for designreport."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == _SERVE_COMMAND:
        _serve(argv[1:])
        return

    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.source:
        parser.print_help()
        return

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = _load(args.config, args.reports_dir)
        max_concurrency = (
            args.max_concurrency if args.max_concurrency is not None else config.max_concurrency
        )
        scheduler = FanOutScheduler(max_concurrency=max_concurrency)
        source = build_source(args.source, config)
        outcome = Orchestrator(scheduler).run(source, config.reports_dir)
    except (ConfigError, DiscoveryError, ValueError) as exc:
        parser.exit(1, f"designreport failed: {exc}\n")
    except SnapshotError as exc:
        parser.exit(
            1,
            f"designreport failed: {exc}\nThe aggregated report was not saved; rerun once the report directory is writable.\n",
        )
    except RuntimeError as exc:
        parser.exit(1, f"designreport failed: {exc}\nRun with --verbose for more details.\n")

    analysed = outcome.files_discovered - len(outcome.failures)
    print(f"Analysed {analysed} of {outcome.files_discovered} files")
    if outcome.failures:
        print(f"{len(outcome.failures)} files failed and were left out of the report")
    if outcome.report.warnings:
        print(f"{len(outcome.report.warnings)} integrity warnings (see log output)")
    print(f"It took {outcome.elapsed:.3f} seconds to finish.")
    print(f"Report written to {_relativize(outcome.path)}")


def _serve(argv: list[str]) -> None:
    parser = _build_serve_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=bool(args.verbose))
    try:
        config = _load(args.config, args.reports_dir)
    except ConfigError as exc:
        parser.exit(1, f"designreport failed: {exc}\n")

    from .service import run_service

    run_service(host=args.host, port=args.port, reports_dir=config.reports_dir)


def _load(config_path: Path, reports_dir: Path | None) -> ReportConfig:
    config = apply_env_overrides(load_config(config_path))
    if reports_dir is not None:
        config.reports_dir = reports_dir.expanduser().resolve()
    return config


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
