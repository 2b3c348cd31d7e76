"""CLI for wikirefs - keep link reference blocks in sync with wikilinks."""

import argparse
import asyncio
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .extension import UPDATE_COMMAND
from .runtime import Runtime, build_runtime
from .workspace import MARKDOWN


def _collect_paths(args: argparse.Namespace, rt: Runtime) -> list[Path]:
    """Paths given on the command line, or every note in the vault."""
    if args.paths:
        return [Path(p) for p in args.paths]
    storage = rt.vault.storage
    return [storage.path_for(nid) for nid in storage.list_all_ids()]


def cmd_update(args: argparse.Namespace, rt: Runtime) -> int:
    """Synchronize reference blocks and save the documents."""
    return asyncio.run(_update(args, rt))


async def _update(args: argparse.Namespace, rt: Runtime) -> int:
    await rt.ensure_started()

    check = getattr(args, 'check', False)
    failed = False
    would_change: list[Path] = []
    output: list[dict[str, Any]] = []

    for path in _collect_paths(args, rt):
        if not path.exists():
            print(f"File not found: {path}", file=sys.stderr)
            failed = True
            continue

        doc = rt.workspace.open_document(path)
        try:
            if doc.language_id != MARKDOWN:
                if not args.quiet and not args.json:
                    print(f"{path}: skipped (not markdown)")
                continue

            result = await rt.workspace.execute_command(UPDATE_COMMAND)
            if result.changed:
                would_change.append(path)
                if not check:
                    await rt.workspace.save(doc)

            output.append({
                "path": str(path),
                "id": result.document_id,
                "action": result.action,
                "references": result.references,
            })
            if args.json or args.quiet:
                continue
            if result.changed:
                verb = "would be " + result.action if check else result.action
                print(f"{path}: {verb}")
            elif result.action == "skipped":
                print(f"{path}: skipped ({result.reason})")
        finally:
            rt.workspace.close_document(doc)

    if args.json:
        print(json.dumps(output, indent=2))

    if failed:
        return 1
    if check and would_change:
        return 1
    return 0


def cmd_status(args: argparse.Namespace, rt: Runtime) -> int:
    """Report whether reference blocks are up to date."""
    return asyncio.run(_status(args, rt))


async def _status(args: argparse.Namespace, rt: Runtime) -> int:
    await rt.ensure_started()

    failed = False
    stale = False
    output: list[dict[str, Any]] = []

    for path in _collect_paths(args, rt):
        if not path.exists():
            print(f"File not found: {path}", file=sys.stderr)
            failed = True
            continue

        doc = rt.workspace.open_document(path)
        try:
            if doc.language_id != MARKDOWN:
                continue
            status = await rt.evaluator.evaluate(doc)
        finally:
            rt.workspace.close_document(doc)

        if status is None:
            output.append({"path": str(path), "status": None})
            if not args.quiet and not args.json:
                print(f"{path}: no link references")
            continue

        if not status.up_to_date:
            stale = True
        output.append({
            "path": str(path),
            "status": status.status,
            "start_line": status.range.start_line,
            "end_line": status.range.end_line,
        })
        if not args.json and (not args.quiet or not status.up_to_date):
            print(f"{path}:{status.range.start_line + 1}: {status.title}")

    if args.json:
        print(json.dumps(output, indent=2))

    return 1 if failed or stale else 0


def cmd_watch(args: argparse.Namespace, rt: Runtime) -> int:
    """Watch vault for changes and keep reference blocks in sync."""
    try:
        from .watch import watch_vault
    except ImportError as e:
        print(
            "Error: watchdog library not installed. Install with: pip install wikirefs[watch]",
            file=sys.stderr,
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    debounce_ms = getattr(args, 'debounce_ms', None) or rt.config.watch.debounce_ms

    return watch_vault(
        rt,
        debounce_ms=debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Runtime) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install wikirefs[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token_arg = getattr(args, 'token', 'auto')
    token = None

    if token_arg == 'auto':
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif token_arg == 'none':
        print("Warning: Running without authentication. Only use in trusted environments.")
        token = None
    else:
        token = token_arg

    app = create_app(rt, token=token, enable_cors=getattr(args, 'cors', False))

    host = getattr(args, 'host', '127.0.0.1')
    port = getattr(args, 'port', 8765)

    print(f"Starting server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")

    return 0


def _version_string() -> str:
    return (
        f"wikirefs {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}"
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="wikirefs", description="Keep markdown link references in sync with wikilinks"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/wikirefs.toml, vault/wikirefs.toml)",
    )
    parser.add_argument(
        "--vault",
        type=Path,
        default=None,
        help="Path to vault directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # update command
    parser_update = subparsers.add_parser(
        "update", help="Insert or refresh link reference blocks"
    )
    parser_update.add_argument(
        "paths", nargs="*", help="Markdown files (default: every note in the vault)"
    )
    parser_update.add_argument(
        "--check", action="store_true",
        help="Don't write; exit 1 if any file would change"
    )

    # status command
    parser_status = subparsers.add_parser(
        "status", help="Show whether link reference blocks are up to date"
    )
    parser_status.add_argument(
        "paths", nargs="*", help="Markdown files (default: every note in the vault)"
    )

    # watch command
    parser_watch = subparsers.add_parser("watch", help="Watch vault and update on change")
    parser_watch.add_argument(
        "--debounce-ms", dest="debounce_ms", type=int, default=None,
        help="Debounce window in milliseconds (default: from config, 150)"
    )

    # serve command
    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8765,
        help="Port to bind to (default: 8765)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "update": cmd_update,
        "status": cmd_status,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }
    handler = handlers.get(args.cmd)

    if handler:
        try:
            rt = build_runtime(vault_path=args.vault, config_path=args.config)
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
