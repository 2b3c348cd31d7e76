from pathlib import Path
from typing import Iterable
from ..core.ports import StorageStrategy

MARKDOWN_SUFFIXES = (".md", ".markdown")


class FsStorage(StorageStrategy):
    def __init__(self, root: Path):
        self.root = root

    def path_for(self, id: str) -> Path:
        for suffix in MARKDOWN_SUFFIXES + tuple(s.upper() for s in MARKDOWN_SUFFIXES):
            p = self.root / f"{id}{suffix}"
            if p.exists():
                return p
        return self.root / f"{id}.md"

    def read_raw(self, id: str) -> str | None:
        p = self.path_for(id)
        # newline="" keeps CRLF intact so line endings survive a round trip
        return read_text(p) if p.exists() else None

    def list_all_ids(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        for p in sorted(self.root.iterdir()):
            if p.is_file() and p.suffix.lower() in MARKDOWN_SUFFIXES:
                yield p.stem


def read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text_atomic(path: Path, contents: str) -> None:
    """Write via a temp file and rename over the target."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(contents)
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
