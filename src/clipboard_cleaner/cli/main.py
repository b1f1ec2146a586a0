"""Main CLI entry point for the clipboard-cleaner command-line tool.

Sanitizes clipboard dumps read from files or stdin, lists the configured
transformation profiles, resolves clipboard target names to charsets and
validates configuration files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from clipboard_cleaner import __version__
from clipboard_cleaner.api.sanitizer import ClipboardSanitizer, ProfileSet
from clipboard_cleaner.character.encoding import resolve_target_encoding
from clipboard_cleaner.shared.errors import CleanerError
from clipboard_cleaner.shared.loader import ConfigurationLoader, load_config_file
from clipboard_cleaner.shared.logging import configure_logging, get_logger
from clipboard_cleaner.shared.result import DiagnosticSeverity, SanitizeResult
from clipboard_cleaner.tools.profiling import PerformanceProfiler

logger = get_logger(__name__, None, "cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def load_profile_set(config_path: Optional[Path] = None) -> ProfileSet:
    """Load and compile the configuration, falling back to the bundled one."""
    config = ConfigurationLoader().load_or_default(config_path)
    return ProfileSet.load(config)


def read_input(source: Optional[str]) -> bytes:
    """Read raw clipboard bytes from a file, or from stdin for ``-``."""
    if source is None or source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def report_diagnostics(result: SanitizeResult, quiet: bool = False) -> None:
    for entry in result.diagnostics:
        if entry.severity is DiagnosticSeverity.ERROR:
            print(f"Error: {entry.message}", file=sys.stderr)
        elif entry.severity is DiagnosticSeverity.WARNING and not quiet:
            print(f"Warning: {entry.message}", file=sys.stderr)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="clipboard-cleaner",
        description="Decode clipboard data and remove or reveal hidden characters"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Sanitize command
    sanitize_parser = subparsers.add_parser(
        "sanitize", help="Sanitize clipboard data read from a file or stdin"
    )
    sanitize_parser.add_argument(
        "path",
        nargs="?",
        default="-",
        help="File holding the raw clipboard bytes (default: stdin)"
    )
    sanitize_parser.add_argument(
        "--target", "-t",
        help="Clipboard target the data was requested as, e.g. UTF8_STRING"
    )
    sanitize_parser.add_argument(
        "--encoding", "-e",
        help="Charset of the data, overriding the one implied by --target"
    )
    sanitize_parser.add_argument(
        "--profile", "-p",
        help="Transformation profile to apply (default: configured default)"
    )
    sanitize_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    sanitize_parser.add_argument(
        "--stats",
        action="store_true",
        help="Print per-stage timing to stderr"
    )

    # Profiles command
    profiles_parser = subparsers.add_parser("profiles", help="List transformation profiles")
    profiles_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    profiles_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )

    # Resolve command
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show the charset used for clipboard targets"
    )
    resolve_parser.add_argument(
        "targets",
        nargs="+",
        help="Clipboard target names or MIME types"
    )

    # Check-config command
    check_parser = subparsers.add_parser(
        "check-config", help="Validate a configuration file"
    )
    check_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
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


def format_profiles(profile_set: ProfileSet, format_type: str) -> str:
    """Format the profiles of a profile set for output."""
    entries: List[Dict[str, Any]] = [
        {
            "name": profile.name,
            "display_name": profile.label,
            "description": profile.description,
            "steps": len(profile.transformations),
            "default": profile.name == profile_set.default_profile_name,
            "gui_replacement": profile.name == profile_set.gui_replacement_profile_name,
        }
        for profile in profile_set.profiles
    ]

    if format_type == "json":
        return json.dumps(entries, indent=2)

    lines = []
    for entry in entries:
        marker = "*" if entry["default"] else " "
        lines.append(f"{marker} {entry['name']:<20} {entry['display_name']}")
        if entry["description"]:
            lines.append(f"  {'':<20} {entry['description']}")
    return "\n".join(lines)


def cmd_sanitize(args: argparse.Namespace) -> int:
    """Handle sanitize command."""
    profile_set = load_profile_set(args.config)
    sanitizer = ClipboardSanitizer(profile_set)

    try:
        data = read_input(args.path)
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.stats:
        profiler = PerformanceProfiler()
        result = profiler.profile_sanitize(
            sanitizer, data, args.target, args.encoding, args.profile,
            session_id=args.path,
        )
        print(profiler.generate_report().format_text(), file=sys.stderr)
    else:
        result = sanitizer.sanitize(data, args.target, args.encoding, args.profile)

    report_diagnostics(result, args.quiet)
    if not result.success:
        return EXIT_FAILURE

    sys.stdout.write(result.text)
    sys.stdout.flush()
    return EXIT_OK


def cmd_profiles(args: argparse.Namespace) -> int:
    """Handle profiles command."""
    profile_set = load_profile_set(args.config)
    print(format_profiles(profile_set, args.format))
    return EXIT_OK


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handle resolve command."""
    unresolved = 0
    for target in args.targets:
        charset = resolve_target_encoding(target)
        if charset is None:
            unresolved += 1
        print(f"{target}\t{charset or '-'}")
    return EXIT_OK if unresolved == 0 else EXIT_FAILURE


def cmd_check_config(args: argparse.Namespace) -> int:
    """Handle check-config command."""
    if args.config:
        config = load_config_file(args.config)
        source = str(args.config)
    else:
        config = ConfigurationLoader().load_or_default()
        source = "search path or built-in default"

    profile_set = ProfileSet.load(config)
    if not args.quiet:
        print(f"Configuration OK ({source}): {len(config.filters)} filters, "
              f"{len(profile_set)} profiles")
        for name in (profile_set.default_profile_name, profile_set.gui_replacement_profile_name):
            if name is not None and name not in profile_set:
                print(f"Warning: profile '{name}' is referenced but not defined",
                      file=sys.stderr)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    # Set up logging verbosity
    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)
    else:
        configure_logging(logging.WARNING)

    handlers = {
        "sanitize": cmd_sanitize,
        "profiles": cmd_profiles,
        "resolve": cmd_resolve,
        "check-config": cmd_check_config,
    }

    # Route to appropriate command handler
    try:
        handler = handlers.get(args.command)
        if handler is None:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return EXIT_FAILURE
        return handler(args)

    except CleanerError as e:
        logger.debug("Command failed", extra={"command": args.command, "reason": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
