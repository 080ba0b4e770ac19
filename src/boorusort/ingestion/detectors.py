"""File type detection and hashing utilities."""

from __future__ import annotations

import hashlib
import mimetypes
from pathlib import Path

from PIL import Image, UnidentifiedImageError

UNKNOWN_MIME = "application/octet-stream"
_CHUNK_SIZE = 1024 * 1024


class TypeDetector:
    """Identify a file's MIME type from its name, falling back to Pillow."""

    def detect(self, path: Path) -> str:
        """Return the MIME type of ``path``."""
        guessed, _ = mimetypes.guess_type(path.name)
        if guessed:
            return guessed
        try:
            with Image.open(path) as image:
                image_format = image.format
        except (UnidentifiedImageError, OSError):
            return UNKNOWN_MIME
        if image_format:
            return Image.MIME.get(image_format, f"image/{image_format.lower()}")
        return UNKNOWN_MIME

    def is_image(self, path: Path) -> bool:
        return self.detect(path).startswith("image/")


class HashComputer:
    """Compute the MD5 digest the catalog indexes files by."""

    def compute(self, path: Path) -> str:
        """Return the hex MD5 digest of the file contents.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.md5()
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
        return digest.hexdigest()


__all__ = ["TypeDetector", "HashComputer", "UNKNOWN_MIME"]
