import re

from ..core.model import (
    Block,
    Link,
    LinkTarget,
    NoteBody,
    Range,
)
from ..core.ports import ParserStrategy

LINK_RE = re.compile(r"\[\[(.*?)\]\]")
HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
FENCE_START_RE = re.compile(r"^```(.*)$")


def _parse_target(spec: str) -> LinkTarget:
    # Handles: id | id|Title | id#Heading | id#Heading|Title
    # Only the id takes part in resolution.
    core = spec
    title = None
    if "|" in spec:
        core, title = spec.split("|", 1)
        title = title.strip() or None
    heading = None
    if "#" in core:
        core, heading = core.split("#", 1)
        heading = heading.strip() or None
    return LinkTarget(id=core.strip(), title_text=title, heading=heading)


class MarkdownParser(ParserStrategy):
    def parse(self, text: str, id: str) -> NoteBody:
        body = NoteBody(raw=text)

        lines = text.splitlines(keepends=True)
        offset = 0
        in_fence = False
        fence_start = 0
        fence_info = ""

        for ln in lines:
            line_stripped = ln.rstrip('\n\r')

            if line_stripped.startswith("```"):
                if not in_fence:
                    in_fence = True
                    fence_start = offset
                    fence_match = FENCE_START_RE.match(line_stripped)
                    fence_info = fence_match.group(1).strip() if fence_match else ""
                else:
                    in_fence = False
                    body.blocks.append(
                        Block(
                            kind="fence",
                            range=Range(fence_start, offset + len(ln)),
                            fence_info=fence_info,
                        )
                    )
                    fence_info = ""

            elif in_fence:
                pass

            else:
                heading_match = HEADING_RE.match(line_stripped)
                if heading_match:
                    body.blocks.append(
                        Block(
                            kind="heading",
                            range=Range(offset, offset + len(ln)),
                            heading_text=heading_match.group(2).strip(),
                            heading_level=len(heading_match.group(1)),
                        )
                    )

                # Wikilinks inside code fences are not links
                for m in LINK_RE.finditer(line_stripped):
                    if m.start() > 0 and line_stripped[m.start() - 1] == "!":
                        continue  # transclusion, not an outbound link
                    target = _parse_target(m.group(1))
                    if not target.id:
                        continue
                    body.links.append(
                        Link(
                            source=id,
                            target=target,
                            range=Range(offset + m.start(), offset + m.end()),
                        )
                    )

            offset += len(ln)

        return body
