"""Exceptions raised while moving files into place."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class OrganizationError(Exception):
    """Raised when a destination cannot be planned for a file."""


class FilesystemError(Exception):
    """Raised when the filesystem refuses a directory creation or move.

    These failures abort the whole run.
    """

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = ["OrganizationError", "FilesystemError"]
