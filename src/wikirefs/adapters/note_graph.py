"""In-memory note graph built from the vault's markdown files."""

import asyncio
import logging

from ..core.model import LinkedNote, Note, NoteId, NoteWithLinks
from ..core.ports import NoteGraph
from ..core.vault import Vault
from ..errors import NoteGraphError, NoteNotFoundError

logger = logging.getLogger(__name__)


class GraphReady:
    """
    Initialization handle for a note graph.

    Created once per graph; every operation that needs the graph awaits
    ``wait()`` before its first use. There is no timeout.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._error: BaseException | None = None

    def set(self) -> None:
        self._event.set()

    def fail(self, error: BaseException) -> None:
        self._error = error
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
        if self._error is not None:
            raise NoteGraphError(f"Note graph failed to load: {self._error}") from self._error


def _consume_error(task: asyncio.Task) -> None:
    # already logged and passed to waiters through GraphReady.fail
    if not task.cancelled():
        task.exception()


class InMemoryNoteGraph(NoteGraph):
    def __init__(self, vault: Vault):
        self.vault = vault
        self.ready = GraphReady()
        self._notes: dict[NoteId, Note] = {}
        self._lock = asyncio.Lock()
        self._load_task: asyncio.Task | None = None

    def start(self) -> GraphReady:
        """Schedule the initial load on the running loop and return the handle."""
        if self._load_task is None:
            self._load_task = asyncio.get_running_loop().create_task(self.load())
            self._load_task.add_done_callback(_consume_error)
        return self.ready

    async def load(self) -> None:
        try:
            async with self._lock:
                self._notes.clear()
                for nid in self.vault.list_ids():
                    note = self.vault.get(nid)
                    if note is not None:
                        self._notes[nid] = note
                    # let other tasks run between files on big vaults
                    await asyncio.sleep(0)
        except Exception as e:
            logger.error("Failed to load note graph from vault: %s", e)
            self.ready.fail(e)
            raise
        logger.debug("Note graph loaded: %d notes", len(self._notes))
        self.ready.set()

    async def add_note_from_markdown(self, id: NoteId, raw_text: str) -> None:
        try:
            note = self.vault.parse(id, raw_text)
        except Exception as e:
            raise NoteGraphError(f"Could not ingest note {id}: {e}") from e
        async with self._lock:
            self._notes[id] = note

    async def remove_note(self, id: NoteId) -> None:
        async with self._lock:
            self._notes.pop(id, None)

    async def get_note_with_links(self, id: NoteId) -> NoteWithLinks:
        async with self._lock:
            note = self._notes.get(id)
            if note is None:
                raise NoteNotFoundError(id)

            linked: list[LinkedNote] = []
            seen: set[NoteId] = set()
            for link in note.body.links:
                target_id = link.target.id
                if target_id in seen:
                    continue
                target = self._notes.get(target_id)
                if target is None:
                    continue  # unresolved
                seen.add(target_id)
                linked.append(LinkedNote(id=target_id, title=target.title))

            return NoteWithLinks(id=note.id, title=note.title, linked_notes=linked)

    def backlinks(self, id: NoteId) -> list[NoteId]:
        """Ids of notes whose body links to ``id``, sorted."""
        return sorted(
            nid
            for nid, note in self._notes.items()
            if nid != id and any(link.target.id == id for link in note.body.links)
        )

    def __contains__(self, id: object) -> bool:
        return id in self._notes

    def __len__(self) -> int:
        return len(self._notes)
