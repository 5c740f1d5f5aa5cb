# store.py
# Minimal key-value persistence behind the replay cache.
# Keys are slash-separated strings; values are opaque bytes.

from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def put(self, key: str, data: bytes) -> None: ...


class FileStore:
    """
    One JSON file per key under ``root``.

    Key ``ns/abc`` lives at ``root/ns/abc.json``. Missing directories are
    created on write. Reads of missing or unreadable files return None.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        parts = [part for part in key.split("/") if part not in ("", ".", "..")]
        if not parts:
            raise ValueError(f"Invalid store key: {key!r}")
        return self._root.joinpath(*parts[:-1], f"{parts[-1]}.json")

    def get(self, key: str) -> bytes | None:
        try:
            return self.path_for(key).read_bytes()
        except OSError:
            return None

    def put(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


class MemoryStore:
    """Dict-backed store, for tests and throwaway runs."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def __len__(self) -> int:
        return len(self._data)
