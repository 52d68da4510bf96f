"""dyntemplate command line interface.

Usage::

    dyntemplate                         # pick a template interactively
    dyntemplate "My Simple Template" -b ./out
    dyntemplate --no-overwrite -c ./extra/template.py
    dyntemplate --edit                  # open (or create) a configuration
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import traceback

from rich.markup import escape

from dyntemplate import __version__
from dyntemplate.commands import ExpandOptions, TemplateCommands
from dyntemplate.config import Settings
from dyntemplate.engine.context import HostState
from dyntemplate.engine.errors import TemplateError
from dyntemplate.engine.expander import ExpansionResult
from dyntemplate.prompts import TerminalSelector
from dyntemplate.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dyntemplate",
        description="Expand dynamic file templates defined in Python configuration files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  dyntemplate\n"
            "  dyntemplate 'My Simple Template' --basedir ./out\n"
            "  dyntemplate --no-overwrite --config ./template.py\n"
        ),
    )
    parser.add_argument("key", nargs="?", help="Template name (prompted for if omitted)")
    parser.add_argument(
        "--basedir", "-b",
        default=None,
        help="Base directory for relative paths (prompted for if needed)",
    )
    parser.add_argument(
        "--no-overwrite",
        dest="overwrite",
        action="store_false",
        help="Keep files that already exist",
    )
    parser.add_argument(
        "--config", "-c",
        dest="configs",
        action="append",
        default=[],
        help="Extra configuration source, tried first (repeatable)",
    )
    parser.add_argument(
        "--file",
        dest="active_file",
        default=None,
        help="Path treated as the active file (sets file/file_dirname)",
    )
    parser.add_argument(
        "--visible",
        dest="visible_files",
        action="append",
        default=[],
        help="Path treated as an open file; its directory is offered as base (repeatable)",
    )
    parser.add_argument(
        "--workspace", "-w",
        dest="workspaces",
        action="append",
        default=None,
        help="Workspace folder (repeatable, default: current directory)",
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="JSON settings file (default: from DYNTEMPLATE_* environment variables)",
    )
    parser.add_argument("--edit", action="store_true", help="Open or create a configuration")
    parser.add_argument("--list", action="store_true", help="List available templates and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _print_results(results: list[ExpansionResult]) -> None:
    if not results:
        console.print("[dim]Nothing to expand.[/dim]")
        return
    rows = [
        (escape(r.path), r.outcome.value + (" + hook" if r.hooked else "")) for r in results
    ]
    print_summary_table(rows, title="Expanded")
    written = sum(1 for r in results if r.outcome.wrote)
    print_success(f"{written} file(s) written, {len(results) - written} left untouched")


async def run(args: argparse.Namespace) -> int:
    settings = Settings.load(args.settings) if args.settings else Settings.from_env()
    host = HostState(
        active_file=os.path.abspath(args.active_file) if args.active_file else None,
        visible_files=[os.path.abspath(p) for p in args.visible_files],
        workspace_folders=[os.path.abspath(w) for w in (args.workspaces or [os.getcwd()])],
        editor=settings.editor,
    )
    commands = TemplateCommands(settings, host, TerminalSelector())

    if args.edit:
        await commands.edit_config(commands.config_sources(args.configs))
        return 0

    if args.list:
        templates = await commands.load_templates(commands.config_sources(args.configs))
        if not templates:
            print_warning("No templates found. Run with --edit to create a configuration.")
            return 0
        rows = [(escape(name), f"{len(entries)} file(s)") for name, entries in templates.items()]
        print_summary_table(rows, title="Templates")
        return 0

    options = ExpandOptions(
        overwrite=args.overwrite,
        basedir=args.basedir,
        key=args.key,
        configs=args.configs,
    )
    results = await commands.expand_template(options)
    if results is not None:
        _print_results(results)
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``dyntemplate`` / ``python -m dyntemplate``."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        print_error("Interrupted.")
        sys.exit(130)
    except TemplateError as exc:
        print_error(f"Error: {escape(str(exc))}")
        sys.exit(1)
    except Exception as exc:
        if args.verbose:
            traceback.print_exc()
        print_error(f"Template expansion failed: {type(exc).__name__}: {escape(str(exc))}")
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
