"""Key/value storage ports used for persistence."""

from pathlib import Path


class StoragePort:
    """Protocol for a synchronous key/value store.

    A read after a write to the same key returns what was just written.
    """

    def read(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if the key was never written."""
        raise NotImplementedError

    def write(self, key: str, data: bytes) -> None:
        """Store *data* under *key*, replacing any previous value."""
        raise NotImplementedError


class InMemoryStorage(StoragePort):
    """Stores values in a dict."""

    def __init__(self) -> None:
        self.values: dict[str, bytes] = {}

    def read(self, key: str) -> bytes | None:
        return self.values.get(key)

    def write(self, key: str, data: bytes) -> None:
        self.values[key] = bytes(data)

    def clear(self) -> None:
        """Drop all values."""
        self.values.clear()


class FileStorage(StoragePort):
    """Writes each key to ``<directory>/<key>.json``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def write(self, key: str, data: bytes) -> None:
        # write to a sibling file first so readers never see a partial value
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
