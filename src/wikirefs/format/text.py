"""Line-ending utilities for note text."""

import re
from typing import Iterator

LF = "\n"
CRLF = "\r\n"

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def detect_eol(text: str, default: str = LF) -> str:
    """Return the line ending of the first line break in ``text``.

    Args:
        text: Document text
        default: Returned when the text has no line break at all

    Returns:
        ``"\\n"`` or ``"\\r\\n"``
    """
    m = _LINE_BREAK.search(text)
    if not m:
        return default
    return CRLF if m.group(0) == CRLF else LF


def normalize_eol(text: str, eol: str) -> str:
    """Rewrite every line break in ``text`` (CRLF, LF or lone CR) as ``eol``."""
    return _LINE_BREAK.sub(eol, text)


def iter_lines(text: str) -> Iterator[tuple[str, int, int]]:
    """Yield ``(content, start, end)`` for each line of ``text``.

    ``content`` has no line break, ``start`` is the offset of the line and
    ``end`` the offset just past its line break. A trailing empty line after
    the final break is not yielded.
    """
    pos = 0
    for m in _LINE_BREAK.finditer(text):
        yield text[pos:m.start()], pos, m.end()
        pos = m.end()
    if pos < len(text):
        yield text[pos:], pos, len(text)
