"""Command line entry points for docksync."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..models import LogEvent, PublishMode, RunOutcome, SyncConfig
from ..infrastructure.error_handler import SyncError
from .api import RepositorySyncer


EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FAILED = 2

_EXIT_CODES = {
    RunOutcome.COMPLETE: EXIT_OK,
    RunOutcome.PENDING: EXIT_OK,
    RunOutcome.PARTIAL: EXIT_PARTIAL,
    RunOutcome.FAILED: EXIT_FAILED,
}


def _print_event(event: LogEvent) -> None:
    print(event.format(), flush=True)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (defaults to the GITHUB_TOKEN environment variable).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docksync",
        description="Republish a GitHub repository together with generated Docker artifacts.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    push = subparsers.add_parser("push", help="Create a repository and push the project to it.")
    push.add_argument("source", help="Source repository URL (https://github.com/owner/repo).")
    push.add_argument("destination", help="Name of the repository to create.")
    push.add_argument(
        "--dockerfile",
        type=Path,
        default=None,
        help="Path to the container build file to publish as Dockerfile.",
    )
    push.add_argument(
        "--mode",
        choices=[mode.value for mode in PublishMode],
        default=PublishMode.FULL_PROJECT.value,
        help="'dockerfile' pushes generated artifacts only; 'full' adds the project files.",
    )
    push.add_argument("--private", action="store_true", help="Create a private repository.")
    push.add_argument("--description", default=None, help="Description of the new repository.")
    push.add_argument("--branch", default=None, help="Branch to commit to (default: main).")
    push.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be pushed without creating anything.",
    )
    _add_common_options(push)

    inspect = subparsers.add_parser("inspect", help="Show a repository's detected stack and dependencies.")
    inspect.add_argument("source", help="Source repository URL.")
    _add_common_options(inspect)

    return parser


async def _run_push(args: argparse.Namespace, token: Optional[str]) -> int:
    build_file = None
    if args.dockerfile is not None:
        try:
            build_file = args.dockerfile.read_text(encoding="utf-8")
        except OSError as e:
            print(f"Cannot read {args.dockerfile}: {e}", file=sys.stderr)
            return EXIT_FAILED

    config = SyncConfig(target_branch=args.branch) if args.branch else SyncConfig()
    mode = PublishMode(args.mode)

    async with RepositorySyncer(auth_token=token, config=config, verbose=args.verbose) as syncer:
        if args.dry_run:
            run = await syncer.preview(args.source, build_file=build_file, mode=mode, on_event=_print_event)
            for file in run.files:
                print(f"  {file.path}  [{file.kind.value}, {file.size_bytes} bytes]")
        else:
            run = await syncer.sync(
                args.source,
                args.destination,
                build_file=build_file,
                mode=mode,
                private=args.private,
                description=args.description,
                on_event=_print_event,
            )

    return _EXIT_CODES[run.outcome]


async def _run_inspect(args: argparse.Namespace, token: Optional[str]) -> int:
    async with RepositorySyncer(auth_token=token, verbose=args.verbose) as syncer:
        run = syncer.start_run()
        run.log.subscribe(_print_event)
        result = await syncer.analyze(run, args.source)

    stack = result.tech_stack
    print(f"Project:    {result.project.name} ({result.source.display_name}@{result.source.branch})")
    print(f"Language:   {stack.language or 'Unknown'}")
    print(f"Frameworks: {', '.join(stack.frameworks) or 'None'}")
    print(f"Databases:  {', '.join(stack.databases) or 'None'}")
    print(f"Tools:      {', '.join(stack.tools) or 'None'}")
    print(f"Dependencies ({len(result.dependencies)}):")
    for dependency in result.dependencies:
        print(f"  - {dependency.render()}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    token = args.token or os.environ.get("GITHUB_TOKEN")

    handler = _run_push if args.command == "push" else _run_inspect
    try:
        return asyncio.run(handler(args, token))
    except SyncError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
