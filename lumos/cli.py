"""
Lumos CLI — File Runner and Compiler
====================================
Thin command-line wrapper around the Runtime. Reads source files and
prints results; all language work happens in the engine.

Usage:
    # Run a program
    python -m lumos run examples/hello.lumos

    # Compile to another language (default target from LUMOS_DEFAULT_TARGET)
    python -m lumos compile examples/hello.lumos --target rust
    python -m lumos compile examples/hello.lumos -t go -o hello.go

    # Token count and AST dump
    python -m lumos analyze examples/hello.lumos

    # Supported compile targets
    python -m lumos targets

    # Engine version
    python -m lumos version
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from .config import LumosConfig
from .runtime import VERSION, Runtime

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def read_source(filepath: str) -> str | None:
    """Read a source file, or print an error and return None."""
    if not os.path.exists(filepath):
        print(f"Error: File not found: {filepath}")
        return None
    with open(filepath, "r", encoding="utf-8") as f:
        return f.read()


def build_runtime(args) -> Runtime:
    config = LumosConfig.from_env()
    if getattr(args, "echo", False):
        config.echo_output = True
    return Runtime(config)


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_run(args) -> int:
    """Execute a source file and print its output."""
    source = read_source(args.file)
    if source is None:
        return 1

    runtime = build_runtime(args)
    result = runtime.execute(source)
    if result.output and not runtime.config.echo_output:
        print(result.output)
    if not result.success:
        print(f"⚠ {result.error}")
        return 1
    return 0


def cmd_compile(args) -> int:
    """Compile a source file to another language."""
    source = read_source(args.file)
    if source is None:
        return 1

    runtime = build_runtime(args)
    result = runtime.compile(source, args.target)
    if not result.success:
        print(f"⚠ {result.error}")
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.compiled)
        print(f"✔ Wrote {result.target} code to {args.output}")
    else:
        print(result.compiled, end="")
    return 0


def cmd_analyze(args) -> int:
    """Print the token count and AST of a source file."""
    source = read_source(args.file)
    if source is None:
        return 1

    result = build_runtime(args).analyze(source)
    if not result.success:
        print(f"⚠ {result.error}")
        return 1
    print(f"Tokens: {result.token_count}")
    print(result.ast_dump)
    return 0


def cmd_targets(args) -> int:
    """List supported compile targets."""
    print("─── Compile Targets ───")
    for name in build_runtime(args).list_targets():
        print(f"  • {name}")
    return 0


def cmd_version(args) -> int:
    print(f"Lumos {VERSION}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lumos",
        description="Lumos — run and compile Lumos programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  lumos run hello.lumos\n"
            "  lumos compile hello.lumos --target rust\n"
            "  lumos analyze hello.lumos\n"
            "  lumos targets\n"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    p_run = subparsers.add_parser("run", help="Execute a Lumos file")
    p_run.add_argument("file", help="Path to the source file")
    p_run.add_argument("--echo", action="store_true", help="Stream print output as it happens")

    p_compile = subparsers.add_parser("compile", help="Compile a Lumos file to another language")
    p_compile.add_argument("file", help="Path to the source file")
    p_compile.add_argument("--target", "-t", default=None,
                           help="Target language (see `lumos targets`)")
    p_compile.add_argument("--output", "-o", default=None, help="Write the result to this file")

    p_analyze = subparsers.add_parser("analyze", help="Show token count and AST")
    p_analyze.add_argument("file", help="Path to the source file")

    subparsers.add_parser("targets", help="List supported compile targets")
    subparsers.add_parser("version", help="Show the engine version")

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else LumosConfig.from_env().numeric_log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "run": cmd_run,
        "compile": cmd_compile,
        "analyze": cmd_analyze,
        "targets": cmd_targets,
        "version": cmd_version,
    }

    if args.command in commands:
        return commands[args.command](args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
