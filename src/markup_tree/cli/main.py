"""Main CLI entry point for the markup-tree command-line tool.

Provides commands to parse markup files, print the ids assigned to a built
live tree, and profile parsing performance.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from markup_tree import __version__
from markup_tree.api import MarkupTreeParser, ParseResult
from markup_tree.shared import (
    ConfigError,
    MarkupParseError,
    MarkupTreeConfig,
    configure_logging,
)
from markup_tree.tree import LiveTree, to_dict, to_markup
from markup_tree.tools import profile_markup


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="markup-tree",
        description="Parse UI markup into trees and inspect live node trees"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration JSON file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse markup files")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to parse"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "markup", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat a missing close tag at end of input as an error"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Ids command
    ids_parser = subparsers.add_parser("ids", help="Print path-hash ids of built live trees")
    ids_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to index"
    )

    # Profile command
    profile_parser = subparsers.add_parser("profile", help="Profile parsing and tree building")
    profile_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to profile"
    )
    profile_parser.add_argument(
        "--iterations", "-n",
        type=int,
        default=10,
        help="Profiled runs per file (default: 10)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_config(config_path: Optional[Path]) -> MarkupTreeConfig:
    """Load configuration from a JSON file, or the defaults.

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    if config_path is None:
        return MarkupTreeConfig()
    try:
        return MarkupTreeConfig.from_json(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read config file {config_path}: {e}") from e


def format_results(
    results: List[ParseResult],
    format_type: str
) -> str:
    """Format parse results for output."""
    if format_type == "markup":
        return "\n".join(to_markup(result.tree) for result in results if result.success)

    if format_type == "text":
        if not results:
            return "No results to display."

        successful = sum(1 for r in results if r.success)
        lines = [f"Parsed {len(results)} files, {successful} successful", "-" * 60]
        for result in results:
            status = "✓" if result.success else "✗"
            lines.append(f"{status} {result.source}")
            lines.append(
                f"   Root: <{result.tree.tag}>, Nodes: {result.element_count}, "
                f"Depth: {result.performance.max_depth}, "
                f"Time: {result.processing_time_ms:.1f}ms"
            )
            for diag in result.diagnostics:
                if diag.severity.name != "INFO":
                    lines.append(f"   {diag.severity.name.title()}: {diag.message}")
            lines.append("")
        return "\n".join(lines)

    payload: List[Dict[str, Any]] = []
    for result in results:
        entry = result.summary()
        entry["tree"] = to_dict(result.tree) if result.success else None
        payload.append(entry)
    return json.dumps(payload, indent=2)


def cmd_parse(args: argparse.Namespace, config: MarkupTreeConfig) -> int:
    """Handle parse command."""
    overrides: Dict[str, Any] = {"api__never_fail_mode": True}
    if args.strict:
        overrides["parser__strict_close_tags"] = True
    parser = MarkupTreeParser(config.override(**overrides))

    results = [parser.parse_file(path) for path in args.paths]
    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    return 0 if all(result.success for result in results) else 1


def cmd_ids(args: argparse.Namespace, config: MarkupTreeConfig) -> int:
    """Handle ids command."""
    parser = MarkupTreeParser(config.override(api__never_fail_mode=True))
    id_attribute = config.tree.id_attribute
    failures = 0

    for path in args.paths:
        result = parser.parse_file(path)
        if not result.success:
            print(f"{path}: {result.error}", file=sys.stderr)
            failures += 1
            continue

        live = LiveTree(config.tree, parser.correlation_id)
        root = live.from_tree(result.tree)
        live.idx(root)

        print(f"# {path}")
        for node in root.iter():
            location = "/" + "/".join(str(position) for position in node.locate())
            print(f"{location}\t{node.attrs[id_attribute]}\t{node.tag}")

    return 0 if failures == 0 else 1


def cmd_profile(args: argparse.Namespace, config: MarkupTreeConfig) -> int:
    """Handle profile command."""
    if args.iterations <= 0:
        print("--iterations must be positive", file=sys.stderr)
        return 1

    reports: Dict[str, Any] = {}
    failures = 0
    for path in args.paths:
        try:
            markup = path.read_text(encoding="utf-8")
            report = profile_markup(markup, args.iterations, config)
        except (OSError, MarkupParseError) as e:
            print(f"{path}: {e}", file=sys.stderr)
            failures += 1
            continue
        reports[str(path)] = report.to_dict()

    print(json.dumps(reports, indent=2))
    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging("WARNING")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # Route to appropriate command handler
    try:
        if args.command == "parse":
            return cmd_parse(args, config)
        elif args.command == "ids":
            return cmd_ids(args, config)
        elif args.command == "profile":
            return cmd_profile(args, config)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
