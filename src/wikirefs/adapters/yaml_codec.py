import io
import logging
import re
from typing import Any

import yaml

from ..core.ports import NoteCodec

logger = logging.getLogger(__name__)

_FM = re.compile(r"^\s*---\s*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)


class YamlFrontmatter:
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        body = text[m.end() :]
        try:
            fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable frontmatter: %s", e)
            return {}, body
        if not isinstance(fm, dict):
            return {}, body
        return fm, body


class MarkdownNoteCodec(NoteCodec):
    def __init__(self, fm: YamlFrontmatter):
        self.fm = fm

    def decode_file(self, text: str, id: str) -> tuple[dict[str, Any], str]:
        return self.fm.decode(text)
