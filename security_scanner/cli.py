"""Command-line entry point for the security scanner."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import REPORT_FORMATS, AppConfig, find_config_file, load_config
from .errors import ConfigError
from .log import configure_logging
from .reporter import Reporter
from .result import ScanResult, format_summary_table
from .scanner import SecurityScanner
from .severity import SEVERITY_ORDER, Severity

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="security-scanner",
        description="Pattern-based security scanner for source trees",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Directory to scan (defaults to rootDir from the config file, then the current directory).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .securityrc YAML/JSON file (auto-discovered in the scan directory).",
    )
    parser.add_argument("--rules-dir", default=None, help="Directory with custom rule descriptors.")
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        help="Glob of files to scan, relative to the root (repeatable).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Glob of files to skip; wins over --include (repeatable).",
    )
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=list(REPORT_FORMATS),
        default=None,
        help="Report format to write (repeatable, defaults to markdown and html).",
    )
    parser.add_argument(
        "--output-dir",
        "--out",
        dest="output_dir",
        default=None,
        help="Directory for report files (e.g., security-audit).",
    )
    parser.add_argument("--no-report", action="store_true", help="Only print the summary table.")
    parser.add_argument("--workers", type=int, default=None, help="Number of files scanned in parallel.")
    parser.add_argument(
        "--context-lines",
        type=int,
        default=None,
        help="Lines of source shown before and after each match.",
    )
    parser.add_argument(
        "--fail-on",
        choices=[severity.value for severity in SEVERITY_ORDER],
        default=Severity.INFO.value,
        help="Lowest severity that makes the exit code non-zero (default: info).",
    )
    parser.add_argument(
        "--log-level",
        choices=["error", "warn", "info", "debug"],
        default=None,
        help="Log verbosity (defaults to the config file, then LOG_LEVEL, then info).",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Silence log output.")
    return parser


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """Combine CLI flags, the config file and defaults (flags win)."""

    if args.config:
        app_config = load_config(args.config)
    else:
        discovered = find_config_file(Path(args.path) if args.path else Path.cwd())
        app_config = load_config(discovered) if discovered else AppConfig()

    scanner_config = app_config.scanner.with_overrides(
        root_dir=args.path,
        rules_dir=args.rules_dir,
        include=args.include,
        exclude=args.exclude,
        workers=args.workers,
        context_lines=args.context_lines,
    )
    reporter_config = app_config.reporter.with_overrides(
        output_dir=args.output_dir,
        formats=args.formats,
    )
    return AppConfig(scanner=scanner_config, reporter=reporter_config)


def write_output(result: ScanResult, reporter: Reporter | None) -> None:
    print(format_summary_table(result))
    if reporter is None:
        return
    result.reports = reporter.render(result)
    for report_format, path in result.reports.items():
        print(f"\nReport ({report_format}) written to {path}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = resolve_config(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logging_config = app_config.scanner.logging
    configure_logging(
        level=args.log_level or logging_config.level,
        silent=args.quiet or logging_config.silent,
    )

    try:
        scanner = SecurityScanner(app_config.scanner).init()
        result = scanner.scan()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    reporter = None if args.no_report else Reporter(app_config.reporter)
    write_output(result, reporter)
    return result.exit_code(Severity.parse(args.fail_on))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
