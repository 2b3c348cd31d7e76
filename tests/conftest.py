"""Shared test doubles."""

import asyncio
from pathlib import Path

import pytest

from wikirefs.core.model import LinkedNote, NoteWithLinks
from wikirefs.workspace import TextDocument


class FakeGraph:
    """Note graph returning canned links, recording every call."""

    def __init__(self, links: dict[str, list[tuple[str, str]]] | None = None):
        self.links = {
            nid: [LinkedNote(id=i, title=t) for i, t in pairs]
            for nid, pairs in (links or {}).items()
        }
        self.ingested: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.active = 0
        self.max_active = 0
        self.on_query = None

    def set_links(self, nid: str, pairs: list[tuple[str, str]]) -> None:
        self.links[nid] = [LinkedNote(id=i, title=t) for i, t in pairs]

    async def add_note_from_markdown(self, id: str, raw_text: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.ingested.append((id, raw_text))

    async def get_note_with_links(self, id: str) -> NoteWithLinks:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.on_query is not None:
                self.on_query(id)
            return NoteWithLinks(id=id, title=id, linked_notes=list(self.links.get(id, [])))
        finally:
            self.active -= 1


@pytest.fixture
def fake_graph():
    return FakeGraph()


def make_document(text: str, name: str = "note-a.md", **kwargs) -> TextDocument:
    return TextDocument(Path("/vault") / name, text, **kwargs)


