"""CLI entrypoints for bartleby commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .errors import BartlebyError
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root or bartleby.yml path (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bartleby",
        description="Build static sites with a pre-rendered client-side router.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Render every page and bundle the router once.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--manifest",
        type=Path,
        default=None,
        help="Write the build manifest (pages and snippets) as JSON to this file.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Build, then rebuild on changes while serving the output with live reload.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Interface to bind the dev server to.")
    serve_parser.add_argument("--port", type=int, default=None, help="Port for the dev server.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bartleby commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=args.log_file,
        serve=args.command == "serve",
    )

    orchestrator = Orchestrator()

    if args.command == "build":
        try:
            result = orchestrator.run_build(args.path)
        except (BartlebyError, FileNotFoundError) as exc:
            parser.exit(1, f"bartleby build failed: {exc}\n")
        except Exception as exc:  # pragma: no cover
            parser.exit(1, f"bartleby build failed: {exc}\nRun with --verbose for more details.\n")
        if args.manifest is not None:
            args.manifest.parent.mkdir(parents=True, exist_ok=True)
            args.manifest.write_text(
                json.dumps(result.to_dict(), indent=2, default=str),
                encoding="utf-8",
            )
        print(f"Built {len(result.pages)} pages")
    elif args.command == "serve":
        from .watch import serve

        try:
            serve(args.path, orchestrator=orchestrator, host=args.host, port=args.port)
        except KeyboardInterrupt:
            print("\nStopped.")
        except (BartlebyError, FileNotFoundError) as exc:
            parser.exit(1, f"bartleby serve failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
