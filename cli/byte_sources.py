"""Positional byte readers the orchestrator pulls chunk bytes from."""

import os
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteSource(Protocol):
    """Random-access source of file bytes."""

    def size(self) -> int:
        ...

    def read(self, start: int, end: int) -> bytes:
        ...


class FileByteSource:
    """
    Reads byte ranges from a file on disk.

    Each read opens its own handle, so concurrent workers never share a file
    offset.
    """

    def __init__(self, path):
        self.path = Path(path)

    def size(self) -> int:
        return self.path.stat().st_size

    def read(self, start: int, end: int) -> bytes:
        """
        Read bytes [start, end) from the file.

        Raises:
            OSError: If the file cannot be read
        """
        with open(self.path, 'rb') as f:
            f.seek(start)
            return f.read(max(0, end - start))

    def __repr__(self) -> str:
        return f"FileByteSource({os.fspath(self.path)!r})"


class BytesByteSource:
    """Serves byte ranges from an in-memory buffer."""

    def __init__(self, data: bytes):
        self._data = bytes(data)

    def size(self) -> int:
        return len(self._data)

    def read(self, start: int, end: int) -> bytes:
        return self._data[start:end]
