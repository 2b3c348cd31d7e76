"""Line ending and indentation to use when writing into a document."""

import logging
from dataclasses import dataclass

from ..format.text import CRLF
from ..workspace import TextDocument, Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormattingContext:
    eol: str
    indent_unit: str


DEFAULT_CONTEXT = FormattingContext(eol=CRLF, indent_unit="  ")


def resolve(document: TextDocument) -> FormattingContext:
    """Formatting context of ``document``, computed fresh on every call."""
    if document.insert_spaces:
        indent_unit = " " * document.tab_size
    else:
        indent_unit = "\t"
    return FormattingContext(eol=document.eol, indent_unit=indent_unit)


def resolve_active(
    workspace: Workspace, fallback: FormattingContext = DEFAULT_CONTEXT
) -> FormattingContext:
    """Formatting context of the active document, or ``fallback`` if none."""
    document = workspace.active_document
    if document is None:
        logger.debug("No active document, using default formatting context")
        return fallback
    return resolve(document)
