"""Report whether a document's reference block is stale, without editing it."""

import logging
from dataclasses import dataclass

from ..core.model import BlockRange
from ..errors import DuplicateMarkerError
from ..format.text import normalize_eol
from ..workspace import TextDocument
from .formatting import resolve
from .generator import EmptyPolicy, ReferenceListGenerator, block_lines
from .locator import block_text, locate

logger = logging.getLogger(__name__)

UP_TO_DATE = "up to date"
OUT_OF_DATE = "out of date"


@dataclass(frozen=True)
class BlockStatus:
    range: BlockRange
    status: str  # UP_TO_DATE | OUT_OF_DATE

    @property
    def up_to_date(self) -> bool:
        return self.status == UP_TO_DATE

    @property
    def title(self) -> str:
        return f"Link references ({self.status})"


class StatusEvaluator:
    def __init__(
        self,
        generator: ReferenceListGenerator,
        on_empty: EmptyPolicy = EmptyPolicy.KEEP_MARKERS,
    ):
        self.generator = generator
        self.on_empty = on_empty

    async def evaluate(self, document: TextDocument) -> BlockStatus | None:
        text = document.get_text()
        try:
            existing = locate(text)
        except DuplicateMarkerError as e:
            logger.debug("No status for %s: %s", document.path, e)
            return None
        if existing is None:
            return None

        eol = resolve(document).eol
        refs = await self.generator.generate(document.id, text)
        expected = eol.join(block_lines(refs, self.on_empty) or [])
        current = normalize_eol(block_text(text, existing), eol)

        return BlockStatus(existing, UP_TO_DATE if current == expected else OUT_OF_DATE)
