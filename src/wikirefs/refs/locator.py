"""Find the generated reference block inside document text."""

from ..core.model import BlockRange
from ..errors import DuplicateMarkerError
from ..format.text import iter_lines

REFERENCE_HEADER = '[//begin]: # "Autogenerated link references for markdown compatibility"'
REFERENCE_FOOTER = '[//end]: # "Autogenerated link references"'


def _closed_fence_lines(lines: list[tuple[str, int, int]]) -> set[int]:
    fenced: set[int] = set()
    opened: int | None = None
    for i, (content, _start, _end) in enumerate(lines):
        if content.startswith("```"):
            if opened is None:
                opened = i
            else:
                fenced.update(range(opened, i + 1))
                opened = None
    # an unclosed fence hides nothing
    return fenced


def locate(
    text: str,
    header: str = REFERENCE_HEADER,
    footer: str = REFERENCE_FOOTER,
) -> BlockRange | None:
    """
    Return the range of the reference block in ``text``, or None.

    A marker only counts when it makes up a whole line outside a fenced code
    block. The range starts at the header line and ends at column 0 of the
    line after the footer. Missing markers, or a footer that does not come
    after the header, mean there is no block.

    Raises:
        DuplicateMarkerError: If either marker occurs on more than one line
    """
    lines = list(iter_lines(text))
    fenced = _closed_fence_lines(lines)

    header_at: tuple[int, int] | None = None  # (line, start offset)
    footer_at: tuple[int, int] | None = None  # (line, end offset)

    for line_no, (content, start, end) in enumerate(lines):
        if line_no in fenced:
            continue
        if content == header:
            if header_at is not None:
                raise DuplicateMarkerError(header, header_at[0], line_no)
            header_at = (line_no, start)
        elif content == footer:
            if footer_at is not None:
                raise DuplicateMarkerError(footer, footer_at[0], line_no)
            footer_at = (line_no, end)

    if header_at is None or footer_at is None:
        return None
    if footer_at[0] <= header_at[0]:
        return None

    return BlockRange(
        start_line=header_at[0],
        end_line=footer_at[0] + 1,
        start=header_at[1],
        end=footer_at[1],
    )


def block_text(text: str, range: BlockRange) -> str:
    """Text of the block without the footer's trailing line break."""
    chunk = text[range.start:range.end]
    if chunk.endswith("\r\n"):
        return chunk[:-2]
    if chunk.endswith(("\n", "\r")):
        return chunk[:-1]
    return chunk
