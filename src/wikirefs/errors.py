"""Exceptions raised by wikirefs."""


class WikirefsError(Exception):
    """Base class for wikirefs errors."""


class DuplicateMarkerError(WikirefsError):
    """A reference block marker occurs more than once in a document."""

    def __init__(self, marker: str, first_line: int, second_line: int):
        self.marker = marker
        self.first_line = first_line
        self.second_line = second_line
        super().__init__(
            f"Marker {marker!r} appears on lines {first_line + 1} and {second_line + 1}"
        )


class NoteGraphError(WikirefsError):
    """The note graph could not ingest or resolve a note."""


class NoteNotFoundError(NoteGraphError):
    """The note graph has no note with the requested id."""

    def __init__(self, note_id: str):
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found")
