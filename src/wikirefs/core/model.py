from __future__ import annotations
from dataclasses import dataclass, field

from .meta import MetaBag

NoteId = str


@dataclass(frozen=True)
class Range:
    start: int  # char offsets in the raw text
    end: int


@dataclass(frozen=True)
class BlockRange:
    """
    Line range of a generated reference block.

    ``start_line`` is the header line and ``end_line`` the line after the
    footer, both at column 0. ``start``/``end`` are the matching character
    offsets; ``end`` includes the footer's line break when it has one.
    """

    start_line: int
    end_line: int
    start: int
    end: int


@dataclass
class Block:
    kind: str  # "heading" | "fence"
    range: Range
    heading_text: str | None = None
    heading_level: int | None = None
    fence_info: str | None = None


@dataclass(frozen=True)
class LinkTarget:
    id: NoteId
    title_text: str | None = None  # "[[id|Title]]" helper
    heading: str | None = None  # "[[id#Heading]]", not used for resolution


@dataclass(frozen=True)
class Link:
    source: NoteId
    target: LinkTarget
    range: Range | None = None


@dataclass
class NoteBody:
    raw: str
    blocks: list[Block] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)


@dataclass
class Note:
    id: NoteId
    meta: MetaBag
    body: NoteBody

    @property
    def title(self) -> str:
        """Frontmatter title, else first heading, else the id."""
        title = self.meta.get_str("title")
        if title:
            return title
        for block in self.body.blocks:
            if block.kind == "heading" and block.heading_text:
                return block.heading_text
        return self.id


@dataclass(frozen=True)
class LinkedNote:
    id: NoteId
    title: str


@dataclass
class NoteWithLinks:
    id: NoteId
    title: str
    linked_notes: list[LinkedNote] = field(default_factory=list)
