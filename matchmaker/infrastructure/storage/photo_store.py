"""Filesystem storage for sealed (encrypted) photo blobs."""

import logging
import os
import random
import re
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,8}$")
DEFAULT_EXTENSION = ".jpg"


class PhotoStore:
    """Writes and reads opaque blobs under a single upload directory."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure_directory(self) -> None:
        # exist_ok keeps concurrent first uploads from failing on each other.
        self._directory.mkdir(parents=True, exist_ok=True)

    def new_filename(self, original_name: Optional[str]) -> str:
        """Collision resistant name: millisecond prefix, random suffix, original extension."""
        extension = os.path.splitext(original_name or "")[1].lower()
        if not _EXTENSION_RE.match(extension):
            extension = DEFAULT_EXTENSION
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"

    def write(self, filename: str, payload: bytes) -> Path:
        self.ensure_directory()
        path = self._resolve(filename)
        path.write_bytes(payload)
        return path

    def read(self, filename: str) -> bytes:
        """Raises FileNotFoundError when the blob is absent."""
        path = self._resolve(filename)
        if not path.is_file():
            raise FileNotFoundError(filename)
        return path.read_bytes()

    def delete(self, filename: str) -> bool:
        path = self._resolve(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def _resolve(self, filename: str) -> Path:
        safe = safe_filename(filename)
        if not safe:
            raise FileNotFoundError(filename)
        return self._directory / safe


def safe_filename(reference: Optional[str]) -> str:
    """Reduce a reference such as ``/api/images/x.jpg`` or ``../../x.jpg`` to its basename."""
    if not reference:
        return ""
    name = os.path.basename(reference.replace("\\", "/"))
    if name in {"", ".", ".."} or name.startswith("."):
        return ""
    return name
