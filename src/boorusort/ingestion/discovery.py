"""File discovery utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from .detectors import TypeDetector
from .models import PendingFile

LOGGER = logging.getLogger(__name__)


class DirectoryScanner:
    """Discover image files directly inside a directory.

    Files are yielded sorted by name; subdirectories are never entered.

    Args:
        detector: MIME detector used to keep images only.
        include_hidden: Whether dot-files are considered.
    """

    def __init__(
        self,
        *,
        detector: Optional[TypeDetector] = None,
        include_hidden: bool = False,
    ) -> None:
        self.detector = detector or TypeDetector()
        self.include_hidden = include_hidden

    def scan(self, root: Path) -> Iterator[PendingFile]:
        """Yield image files found in ``root``."""
        root = root.expanduser().resolve()
        if not root.is_dir():
            return

        for path in sorted(root.iterdir(), key=lambda entry: entry.name):
            if not path.is_file():
                continue
            if not self.include_hidden and path.name.startswith("."):
                continue
            mime_type = self.detector.detect(path)
            if not mime_type.startswith("image/"):
                LOGGER.debug("Skipping non-image file %s (%s).", path.name, mime_type)
                continue
            try:
                size = path.stat().st_size
            except OSError:
                continue
            yield PendingFile(path=path, size_bytes=size, mime_type=mime_type)


__all__ = ["DirectoryScanner"]
