from pathlib import Path
from typing import Protocol, Iterable, Any
from .model import NoteId, NoteBody, NoteWithLinks


class StorageStrategy(Protocol):
    """
    Flat store: one directory, files named <id>.md
    """

    def path_for(self, id: NoteId) -> Path:
        pass

    def read_raw(self, id: NoteId) -> str | None:
        pass

    def list_all_ids(self) -> Iterable[NoteId]:
        pass


class ParserStrategy(Protocol):
    """
    Parse Markdown into headings, fences and wikilinks.
    """

    def parse(self, text: str, id: NoteId) -> NoteBody:
        pass


class NoteCodec(Protocol):
    """
    Split optional frontmatter from the raw body.
    """

    def decode_file(self, text: str, id: NoteId) -> tuple[dict[str, Any], str]:
        pass


class NoteGraph(Protocol):
    """
    Note identities, titles and resolved outbound links.

    Re-ingesting a note replaces its previous links. Outbound links come back
    in the order they first appear in the note; unresolved targets are left
    out.
    """

    async def add_note_from_markdown(self, id: NoteId, raw_text: str) -> None:
        pass

    async def get_note_with_links(self, id: NoteId) -> NoteWithLinks:
        pass
