"""Build the canonical reference list for a note's outbound links."""

import logging
from enum import Enum

from ..adapters.note_graph import GraphReady
from ..core.model import LinkedNote, NoteId
from ..core.ports import NoteGraph
from .locator import REFERENCE_FOOTER, REFERENCE_HEADER

logger = logging.getLogger(__name__)


class EmptyPolicy(str, Enum):
    """What an existing block becomes once the note has no outbound links."""

    KEEP_MARKERS = "keep-markers"  # header immediately followed by footer
    REMOVE = "remove"  # block deleted
    LEAVE = "leave"  # block left as it is


def format_reference(link: LinkedNote) -> str:
    # [wiki-link-text]: wiki-link "Page title"
    return f'[{link.id}]: {link.id.split(".")[0]} "{link.title}"'


def block_lines(refs: list[str], policy: EmptyPolicy) -> list[str] | None:
    """
    Lines an existing block should hold for the canonical list ``refs``.

    None means the block is to be left untouched.
    """
    if refs:
        return refs
    if policy is EmptyPolicy.KEEP_MARKERS:
        return [REFERENCE_HEADER, REFERENCE_FOOTER]
    if policy is EmptyPolicy.REMOVE:
        return []
    return None


class ReferenceListGenerator:
    def __init__(self, graph: NoteGraph, ready: GraphReady | None = None):
        self.graph = graph
        self.ready = ready

    async def generate(self, document_id: NoteId, raw_text: str) -> list[str]:
        """
        Ingest ``raw_text`` as note ``document_id`` and return its reference list.

        Returns ``[header, *references, footer]``, or an empty list when the
        note has no resolved outbound links. Graph errors propagate.
        """
        if self.ready is not None:
            await self.ready.wait()

        await self.graph.add_note_from_markdown(document_id, raw_text)
        note = await self.graph.get_note_with_links(document_id)

        if not note.linked_notes:
            return []

        references = [format_reference(link) for link in note.linked_notes]
        logger.debug("Generated %d references for %s", len(references), document_id)
        return [REFERENCE_HEADER, *references, REFERENCE_FOOTER]
