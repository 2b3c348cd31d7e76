"""Watch mode for wikirefs - re-synchronize reference blocks as notes change."""

import asyncio
import json
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.fs_storage import MARKDOWN_SUFFIXES, read_text
from .errors import WikirefsError
from .runtime import Runtime

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(self, vault_path: Path, on_batch: Any, debounce_ms: int = 150):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Pending changes by note id; events arrive on the observer thread
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0
        self._lock = threading.Lock()

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped."""
        name = path.name

        # Skip hidden files
        if name.startswith("."):
            return True

        # Skip temp/swap files
        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        # Only process markdown files
        return path.suffix.lower() not in MARKDOWN_SUFFIXES

    def _extract_id(self, path: Path) -> str | None:
        """Extract note ID from path."""
        if self._should_skip(path):
            return None
        return path.stem

    def _record(self, src_path: Any, deleted: bool) -> None:
        note_id = self._extract_id(Path(str(src_path)))
        if not note_id:
            return
        with self._lock:
            if deleted:
                self.changed.discard(note_id)
                self.deleted.add(note_id)
            else:
                self.deleted.discard(note_id)
                self.changed.add(note_id)
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, deleted=False)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, deleted=False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path, deleted=True)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save through a temp file show up as a move onto the note
        if not event.is_directory:
            self._record(event.src_path, deleted=True)
            self._record(event.dest_path, deleted=False)

    def check_and_flush(self) -> Any:
        """Flush if the debounce period has elapsed since the last event."""
        with self._lock:
            if not (self.changed or self.deleted):
                return None
            elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            return self.flush()
        return None

    def flush(self) -> Any:
        """Hand accumulated events to the batch handler."""
        with self._lock:
            if not (self.changed or self.deleted):
                return None
            changed = set(self.changed)
            deleted = set(self.deleted)
            self.changed.clear()
            self.deleted.clear()

        if self.on_batch:
            return self.on_batch(changed, deleted)
        return None


async def sync_batch(rt: Runtime, changed: set[str], deleted: set[str]) -> dict[str, int]:
    """
    Bring the graph up to date with a batch of file events, then
    re-synchronize the changed notes and every note linking to them.

    Only documents whose text actually changed are written back, so the
    watcher's own writes settle after one extra, empty pass.
    """
    storage = rt.vault.storage

    for nid in deleted:
        await rt.graph.remove_note(nid)
    for nid in changed:
        path = storage.path_for(nid)
        if path.exists():
            await rt.graph.add_note_from_markdown(nid, read_text(path))

    targets = set(changed)
    for nid in changed | deleted:
        targets.update(rt.graph.backlinks(nid))

    counts = {"updated": 0, "unchanged": 0, "failed": 0}
    for nid in sorted(targets):
        path = storage.path_for(nid)
        if not path.exists():
            continue
        doc = rt.workspace.open_document(path, activate=False)
        try:
            result = await rt.engine.synchronize(doc)
            if result.changed:
                await rt.workspace.save(doc)
                counts["updated"] += 1
            else:
                counts["unchanged"] += 1
        except (WikirefsError, OSError) as e:
            logger.error("Failed to update link references in %s: %s", path, e)
            counts["failed"] += 1
        finally:
            rt.workspace.close_document(doc)

    return counts


def watch_vault(
    rt: Runtime,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the vault directory and keep reference blocks in sync.

    Args:
        rt: Wired runtime
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = rt.vault.storage.root
    if not vault_path.exists():
        print(f"Error: Vault not found: {vault_path}", file=sys.stderr)
        return 1

    return asyncio.run(_watch(rt, vault_path, debounce_ms, quiet, json_output))


async def _watch(
    rt: Runtime,
    vault_path: Path,
    debounce_ms: int,
    quiet: bool,
    json_output: bool,
) -> int:
    await rt.ensure_started()
    if not quiet and not json_output:
        print(f"Loaded {len(rt.graph)} notes", flush=True)

    running = True

    async def handle_batch(changed: set[str], deleted: set[str]) -> None:
        """Handle a batch of changes."""
        start_time = time.time()

        try:
            counts = await sync_batch(rt, changed, deleted)
            duration_ms = int((time.time() - start_time) * 1000)

            if json_output:
                event = {
                    "type": "batch",
                    "changed": sorted(changed),
                    "deleted": sorted(deleted),
                    "updated": counts["updated"],
                    "failed": counts["failed"],
                    "duration_ms": duration_ms,
                }
                print(json.dumps(event), flush=True)
            elif not quiet and (counts["updated"] or counts["failed"]):
                print(
                    f"Updated: {counts['updated']} failed: {counts['failed']} ({duration_ms}ms)",
                    flush=True,
                )
        except Exception as e:
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {vault_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            await asyncio.sleep(0.1)
            pending = handler.check_and_flush()
            if pending is not None:
                await pending
    finally:
        pending = handler.flush()
        if pending is not None:
            await pending
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
