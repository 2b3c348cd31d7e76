"""Host document model: open documents, will-save events, commands, annotations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .adapters.fs_storage import MARKDOWN_SUFFIXES, read_text, write_text_atomic
from .config import FormatConfig
from .core.model import BlockRange
from .format.text import CRLF, LF, detect_eol

logger = logging.getLogger(__name__)

MARKDOWN = "markdown"


def language_for(path: Path) -> str:
    return MARKDOWN if path.suffix.lower() in MARKDOWN_SUFFIXES else "plaintext"


@dataclass(frozen=True)
class TextEdit:
    start: int  # char offsets into the text at the time the edit was made
    end: int
    new_text: str


@dataclass(frozen=True)
class Annotation:
    """Passive label shown over a range. ``command`` is None for display-only."""

    range: BlockRange
    title: str
    command: str | None = None


class DocumentClosedError(RuntimeError):
    pass


class TextDocument:
    def __init__(
        self,
        path: Path,
        text: str,
        language_id: str | None = None,
        eol: str | None = None,
        insert_spaces: bool = True,
        tab_size: int = 2,
    ):
        self.path = path
        self.language_id = language_id or language_for(path)
        self.eol = eol or detect_eol(text)
        self.insert_spaces = insert_spaces
        self.tab_size = tab_size
        self.version = 1
        self.closed = False
        self.dirty = False
        self._text = text

    @property
    def id(self) -> str:
        """Note id: the filename stem."""
        return self.path.stem

    def get_text(self, range: BlockRange | None = None) -> str:
        if range is None:
            return self._text
        return self._text[range.start:range.end]

    def apply_edits(self, edits: list[TextEdit]) -> None:
        if self.closed:
            raise DocumentClosedError(f"Document {self.path} is closed")
        text = self._text
        for edit in sorted(edits, key=lambda e: e.start, reverse=True):
            text = text[:edit.start] + edit.new_text + text[edit.end:]
        if text == self._text:
            return
        self._text = text
        self.version += 1
        self.dirty = True

    def __repr__(self) -> str:
        return f"TextDocument({str(self.path)!r}, version={self.version})"


class WillSaveEvent:
    def __init__(self, document: TextDocument):
        self.document = document
        self._pending: list[Awaitable[Any]] = []

    def wait_until(self, awaitable: Awaitable[Any]) -> None:
        """Hold the save until ``awaitable`` settles."""
        self._pending.append(awaitable)


WillSaveListener = Callable[[WillSaveEvent], None]
AnnotationProvider = Callable[[TextDocument], Awaitable[list[Annotation]]]


class Workspace:
    """
    Minimal editor host.

    Documents are opened from disk, edited in memory and written back by
    ``save()``, which first gives every will-save listener the chance to
    hold persistence until its work has settled.
    """

    def __init__(self, root: Path, format_config: FormatConfig | None = None):
        self.root = root
        self.format_config = format_config or FormatConfig()
        self.documents: dict[Path, TextDocument] = {}
        self.active_document: TextDocument | None = None
        self._will_save: list[WillSaveListener] = []
        self._commands: dict[str, Callable[..., Awaitable[Any]]] = {}
        self._annotation_providers: list[tuple[str, AnnotationProvider]] = []

    # Documents

    def open_document(self, path: Path, activate: bool = True) -> TextDocument:
        path = path.resolve()
        doc = self.documents.get(path)
        if doc is None:
            text = read_text(path)
            fc = self.format_config
            if fc.eol == "lf":
                eol = LF
            elif fc.eol == "crlf":
                eol = CRLF
            else:
                eol = detect_eol(text)
            doc = TextDocument(
                path,
                text,
                eol=eol,
                insert_spaces=fc.insert_spaces,
                tab_size=fc.tab_size,
            )
            self.documents[path] = doc
        if activate:
            self.active_document = doc
        return doc

    def close_document(self, doc: TextDocument) -> None:
        doc.closed = True
        self.documents.pop(doc.path, None)
        if self.active_document is doc:
            self.active_document = None

    async def save(self, doc: TextDocument) -> bool:
        """Run will-save listeners, wait for them, then write the document.

        Returns False when the document was closed before it could be written.
        """
        event = WillSaveEvent(doc)
        for listener in list(self._will_save):
            listener(event)

        if event._pending:
            results = await asyncio.gather(*event._pending, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    logger.error("Will-save participant failed for %s: %s", doc.path, result)

        if doc.closed:
            logger.debug("Not saving closed document %s", doc.path)
            return False

        write_text_atomic(doc.path, doc.get_text())
        doc.dirty = False
        return True

    # Registration

    def on_will_save(self, listener: WillSaveListener) -> Callable[[], None]:
        self._will_save.append(listener)
        return lambda: self._will_save.remove(listener)

    def register_command(
        self, name: str, handler: Callable[..., Awaitable[Any]]
    ) -> Callable[[], None]:
        if name in self._commands:
            raise ValueError(f"Command {name} is already registered")
        self._commands[name] = handler
        return lambda: self._commands.pop(name, None)

    async def execute_command(self, name: str, *args: Any) -> Any:
        handler = self._commands.get(name)
        if handler is None:
            raise KeyError(f"Unknown command: {name}")
        return await handler(*args)

    def register_annotation_provider(
        self, language_id: str, provider: AnnotationProvider
    ) -> Callable[[], None]:
        entry = (language_id, provider)
        self._annotation_providers.append(entry)
        return lambda: self._annotation_providers.remove(entry)

    async def provide_annotations(self, doc: TextDocument) -> list[Annotation]:
        annotations: list[Annotation] = []
        for language_id, provider in self._annotation_providers:
            if language_id == doc.language_id:
                annotations.extend(await provider(doc))
        return annotations
