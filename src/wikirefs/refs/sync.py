"""Insert or replace the reference block of a document."""

import asyncio
import logging
from dataclasses import dataclass, field

from ..errors import DuplicateMarkerError
from ..workspace import MARKDOWN, TextDocument, TextEdit
from .formatting import FormattingContext, resolve
from .generator import EmptyPolicy, ReferenceListGenerator, block_lines
from .locator import locate

logger = logging.getLogger(__name__)

INSERTED = "inserted"
REPLACED = "replaced"
UNCHANGED = "unchanged"
SKIPPED = "skipped"


@dataclass
class SyncResult:
    document_id: str
    action: str  # "inserted" | "replaced" | "unchanged" | "skipped"
    references: list[str] = field(default_factory=list)
    reason: str | None = None

    @property
    def changed(self) -> bool:
        return self.action in (INSERTED, REPLACED)


def _break_before(text: str, offset: int) -> int:
    """Length of the line break ending right before ``offset`` (0 if none)."""
    if text.endswith("\r\n", 0, offset):
        return 2
    if text.endswith(("\n", "\r"), 0, offset):
        return 1
    return 0


class SynchronizationEngine:
    """
    Keeps a document's reference block equal to its canonical list.

    Calls for the same document id run one at a time. A call that finds the
    document closed, or edited while the graph was consulted, writes nothing.
    """

    def __init__(
        self,
        generator: ReferenceListGenerator,
        on_empty: EmptyPolicy = EmptyPolicy.KEEP_MARKERS,
    ):
        self.generator = generator
        self.on_empty = on_empty
        # document id -> (lock, number of calls holding or waiting for it)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    def _acquire_slot(self, document_id: str) -> asyncio.Lock:
        lock, users = self._locks.get(document_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[document_id] = (lock, users + 1)
        return lock

    def _release_slot(self, document_id: str) -> None:
        lock, users = self._locks[document_id]
        if users <= 1:
            del self._locks[document_id]
        else:
            self._locks[document_id] = (lock, users - 1)

    async def synchronize(
        self, document: TextDocument, context: FormattingContext | None = None
    ) -> SyncResult:
        """
        Bring the reference block of ``document`` up to date.

        ``context`` defaults to the document's own formatting context.
        """
        if document.language_id != MARKDOWN:
            return SyncResult(document.id, SKIPPED, reason="not markdown")
        lock = self._acquire_slot(document.id)
        try:
            async with lock:
                if document.closed:
                    return SyncResult(document.id, SKIPPED, reason="document closed")
                return await self._synchronize(document, context or resolve(document))
        finally:
            self._release_slot(document.id)

    async def _synchronize(self, document: TextDocument, context: FormattingContext) -> SyncResult:
        eol = context.eol
        text = document.get_text()
        version = document.version

        try:
            existing = locate(text)
        except DuplicateMarkerError as e:
            logger.warning("Not updating link references in %s: %s", document.path, e)
            return SyncResult(document.id, SKIPPED, reason=str(e))

        refs = await self.generator.generate(document.id, text)

        if document.closed or document.version != version:
            logger.info("Document %s changed during update, skipping", document.path)
            return SyncResult(document.id, SKIPPED, refs, reason="document changed")

        if existing is None:
            if not refs:
                return SyncResult(document.id, UNCHANGED, refs)
            # after the last line
            edit = TextEdit(len(text), len(text), eol + eol.join(refs) + eol)
            action = INSERTED
        else:
            lines = block_lines(refs, self.on_empty)
            if lines is None:
                return SyncResult(document.id, UNCHANGED, refs)
            start = existing.start
            if lines:
                new_text = eol.join(lines) + eol
            else:
                # also drop the separator line break written on insert
                new_text = ""
                start -= _break_before(text, start)
            if text[start:existing.end] == new_text:
                return SyncResult(document.id, UNCHANGED, refs)
            edit = TextEdit(start, existing.end, new_text)
            action = REPLACED

        document.apply_edits([edit])
        logger.debug("Link references %s in %s", action, document.path)
        return SyncResult(document.id, action, refs)
