from collections.abc import Iterable

from .meta import MetaBag
from .model import Note, NoteId
from .ports import NoteCodec, ParserStrategy, StorageStrategy


class Vault:
    def __init__(
        self, storage: StorageStrategy, parser: ParserStrategy, codec: NoteCodec
    ):
        self.storage = storage
        self.parser = parser
        self.codec = codec

    def parse(self, id: NoteId, raw: str) -> Note:
        """Build a note from file contents without touching storage."""
        meta_partial, body_text = self.codec.decode_file(raw, id)
        return Note(id=id, meta=MetaBag(meta_partial), body=self.parser.parse(body_text, id))

    def get(self, id: NoteId) -> Note | None:
        raw = self.storage.read_raw(id)
        if raw is None:
            return None
        return self.parse(id, raw)

    def list_ids(self) -> Iterable[NoteId]:
        return self.storage.list_all_ids()
