"""Local filesystem blob storage."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from casedocs.exceptions import StoreError


class LocalBlobStorage:
    """Stores blobs as files below a root directory.

    Keys are POSIX-style relative paths such as `forms/case-1/visa.pdf`.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """Return the storage root."""
        return self._root

    def _path(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if not key or relative.is_absolute() or ".." in relative.parts:
            raise StoreError(message=f"Invalid storage key: {key!r}")
        return self._root.joinpath(*relative.parts)

    def read(self, key: str) -> bytes:
        """Return the bytes stored under `key`.

        Raises:
            StoreError: If the key is invalid or nothing is stored under it.
        """
        path = self._path(key)
        if not path.is_file():
            raise StoreError(message=f"No blob stored under {key!r}")
        return path.read_bytes()

    def write(self, key: str, data: bytes, *, overwrite: bool = False) -> str:
        """Store `data` under `key`.

        The file is written next to its destination and moved in place, so readers
        never observe a partial blob.

        Args:
            key (str): Relative storage key.
            data (bytes): Payload.
            overwrite (bool): Replace an existing blob.

        Raises:
            StoreError: If the key is invalid or taken and `overwrite` is false.

        Returns:
            str: The storage key.
        """
        path = self._path(key)
        if path.exists() and not overwrite:
            raise StoreError(message=f"Blob already exists: {key!r}")
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f"{path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
        return key

    def exists(self, key: str) -> bool:
        """Return whether a blob is stored under `key`."""
        return self._path(key).is_file()
