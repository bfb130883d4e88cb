"""
path-audit command line interface.

Usage:
    path-audit                        # Audit the current PATH
    path-audit --json --pretty        # Full report as JSON
    path-audit -b python --versions   # One binary, with versions
    path-audit --from-report r.json -s high

Exit codes:
    0  No conflicts (after filtering), or quiet mode
    1  Conflicts found
    2  Fatal error (PATH unavailable, bad config, unreadable report)
"""

from __future__ import annotations

import argparse
import sys

from . import __version__
from .analyzer import AnalysisOptions, PathAnalyzer
from .config import load_config
from .errors import PathAuditError
from .logging_config import setup_logging
from .models import CATEGORIES, SEVERITIES
from .render import format_human, render_json
from .snapshot import filter_conflicts, load_report, write_report

EXIT_OK = 0
EXIT_CONFLICTS = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="path-audit",
        description="Detect and explain conflicting executables on the search path",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    output = parser.add_argument_group("output")
    output.add_argument("--json", action="store_true", help="Output JSON")
    output.add_argument("--pretty", action="store_true", help="Indent JSON output")
    output.add_argument(
        "--conflicts-only",
        action="store_true",
        help="Only show conflicts (omit header and summary)",
    )
    output.add_argument(
        "--recommendations",
        action="store_true",
        default=None,
        help="Show recommendations for each conflict",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument("--binary", "-b", help="Only report conflicts for this binary")
    filters.add_argument("--category", "-c", choices=CATEGORIES, help="Only report this category")
    filters.add_argument("--severity", "-s", choices=SEVERITIES, help="Minimum severity to report")

    scan = parser.add_argument_group("scan")
    scan.add_argument(
        "--versions",
        action="store_true",
        default=None,
        help="Run executables to extract their versions",
    )
    scan.add_argument(
        "--hashes",
        action="store_true",
        default=None,
        help="Hash the leading bytes of every executable",
    )
    scan.add_argument(
        "--no-resolve-symlinks",
        dest="resolve_symlinks",
        action="store_false",
        default=None,
        help="Do not resolve symbolic links",
    )
    scan.add_argument("--custom-path", help="Analyze this path-list string instead of PATH")
    scan.add_argument("--config", help="Configuration file (YAML or JSON)")

    reports = parser.add_argument_group("reports")
    reports.add_argument("--write-report", metavar="FILE", help="Save the full result as JSON")
    reports.add_argument(
        "--from-report",
        metavar="FILE",
        help="Filter and render a saved report instead of scanning",
    )

    logs = parser.add_argument_group("logging")
    verbosity = logs.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Suppress human output")
    logs.add_argument("--log-file", help="Also write logs to this file")

    return parser


def _options_from_args(args: argparse.Namespace, config) -> AnalysisOptions:
    overrides = {}
    if args.versions is not None:
        overrides["extract_versions"] = args.versions
    if args.hashes is not None:
        overrides["include_hashes"] = args.hashes
    if args.resolve_symlinks is not None:
        overrides["resolve_symlinks"] = args.resolve_symlinks
    if args.custom_path is not None:
        overrides["custom_path"] = args.custom_path
    return AnalysisOptions.from_config(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for path-audit."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        if args.from_report:
            result = load_report(args.from_report)
        else:
            analyzer = PathAnalyzer(options=_options_from_args(args, config), verbose=args.verbose)
            result = analyzer.analyze()
            if args.write_report:
                write_report(result, args.write_report, pretty=True)
    except PathAuditError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_ERROR

    result = filter_conflicts(
        result,
        binary=args.binary,
        category=args.category,
        min_severity=args.severity,
    )

    show_recommendations = args.recommendations if args.recommendations is not None else config.output.recommendations

    if args.json:
        print(render_json(result, pretty=args.pretty, conflicts_only=args.conflicts_only))
    elif not args.quiet:
        sys.stdout.write(format_human(
            result,
            show_recommendations=show_recommendations,
            verbose=args.verbose,
            conflicts_only=args.conflicts_only,
        ))

    if result.conflicts and not args.quiet:
        return EXIT_CONFLICTS
    return EXIT_OK


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
