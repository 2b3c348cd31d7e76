from typing import MutableMapping, Iterator, Any


class MetaBag(MutableMapping[str, Any]):
    """
    Frontmatter keys of a note, kept exactly as decoded.

    Only ``title`` is read by the reference generator; everything else is
    carried along untouched.
    """

    def __init__(self, initial: dict | None = None):
        self._d = dict(initial or {})

    def __getitem__(self, k: str) -> Any:
        return self._d[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self._d[k] = v

    def __delitem__(self, k: str) -> None:
        del self._d[k]

    def __iter__(self) -> Iterator[str]:
        return iter(self._d)

    def __len__(self) -> int:
        return len(self._d)

    def get_str(self, key: str, default: str | None = None) -> str | None:
        v = self._d.get(key, default)
        if isinstance(v, str):
            return v.strip() or default
        return default
