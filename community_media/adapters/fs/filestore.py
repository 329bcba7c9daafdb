"""
Filesystem storage gateway.

Every operation resolves ``root / storage_name`` and checks the result is
inside the root before touching the file. Escapes raise ``PathEscapeError``
with a generic message; the offending name is only logged.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from community_media.domain.errors import NotFoundError, PathEscapeError

logger = logging.getLogger(__name__)


class StorageGateway:
    def __init__(self, base_path: str | Path, *, create_dirs: bool = True):
        self.base_path = Path(base_path).resolve()
        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _safe_path(self, storage_name: str) -> Path:
        # Prevent traversal
        if not storage_name or "\x00" in storage_name:
            logger.warning("Rejected storage name %r under %s", storage_name, self.base_path)
            raise PathEscapeError()

        target = (self.base_path / storage_name).resolve()
        if target == self.base_path or not target.is_relative_to(self.base_path):
            logger.warning(
                "Path traversal attempt: %r resolved to %s outside %s",
                storage_name,
                target,
                self.base_path,
            )
            raise PathEscapeError()
        return target

    def store(self, data: bytes, storage_name: str, *, replace: bool = False) -> str:
        """
        Write bytes under ``storage_name`` and return the path relative to the root.

        Raises FileExistsError if the name is taken and ``replace`` is False.
        """
        target = self._safe_path(storage_name)
        target.parent.mkdir(parents=True, exist_ok=True)

        mode = "wb" if replace else "xb"
        with open(target, mode) as f:
            f.write(data)

        logger.debug("Stored %d bytes as %s", len(data), storage_name)
        return str(target.relative_to(self.base_path))

    def resolve(self, storage_name: str) -> Path:
        """Filesystem location of ``storage_name``. Raises NotFoundError."""
        target = self._safe_path(storage_name)
        if not target.is_file():
            raise NotFoundError(f"file {storage_name}")
        return target

    def read(self, storage_name: str) -> bytes:
        with open(self.resolve(storage_name), "rb") as f:
            return f.read()

    def exists(self, storage_name: str) -> bool:
        return self._safe_path(storage_name).is_file()

    def delete(self, storage_name: str) -> None:
        """Remove the file; a missing file is not an error."""
        target = self._safe_path(storage_name)
        try:
            os.remove(target)
        except FileNotFoundError:
            return
        logger.debug("Deleted %s", storage_name)

    def total_size(self) -> int:
        """Bytes used by all files under the root."""
        total = 0
        for dirpath, _dirnames, filenames in os.walk(self.base_path):
            for name in filenames:
                try:
                    total += os.path.getsize(os.path.join(dirpath, name))
                except OSError:
                    continue
        return total
