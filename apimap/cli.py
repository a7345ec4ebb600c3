"""CLI entrypoints for apimap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .logging import configure_logging
from .pipeline import Generator
from .registry import FORMATS


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apimap",
        description="Generate a namespace API registry from TypeScript declaration files.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan declaration files and write the generated registry module.",
    )
    _add_verbosity_options(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "project",
        nargs="?",
        default=".",
        help="Project root holding .apimap.yml and node_modules (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--source",
        help="Scan this declaration directory instead of resolving the package.",
    )
    generate_parser.add_argument(
        "--package",
        help="npm package whose declarations are scanned (default: ableton-js).",
    )
    generate_parser.add_argument(
        "--subdir",
        help="Directory next to the package entry point that holds the declarations.",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        help="Path of the generated module, relative to the project root.",
    )
    generate_parser.add_argument(
        "--format",
        choices=FORMATS,
        help="Layout of the generated module.",
    )
    generate_parser.add_argument(
        "--export-name",
        help="Name of the exported registry constant.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the diff without writing the generated module.",
    )
    generate_parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 when the generated module is out of date.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing generation endpoints.",
    )
    _add_verbosity_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apimap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    if args.command == "generate":
        check = bool(args.check)
        try:
            outcome = Generator().run(
                args.project,
                source=args.source,
                output=args.output,
                fmt=args.format,
                export_name=args.export_name,
                package=args.package,
                subdir=args.subdir,
                dry_run=bool(args.dry_run) or check,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except (RuntimeError, ValueError) as exc:
            parser.exit(1, f"apimap generate failed: {exc}\nRun with --verbose for more details.\n")

        rel_path = _relativize(outcome.path)
        classes = len(outcome.registry)
        if check:
            if outcome.changed:
                parser.exit(1, f"{rel_path} is out of date; run `apimap generate` to refresh it.\n")
            print(f"{rel_path} is up to date ({classes} classes)")
        elif outcome.dry_run:
            print(outcome.diff or "(no changes)")
        elif outcome.changed:
            print(f"Registry with {classes} classes written to {rel_path}")
        else:
            print(f"{rel_path} already up to date ({classes} classes)")
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
