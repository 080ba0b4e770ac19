"""Executor for planned moves."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .errors import FilesystemError, OrganizationError
from .models import MoveOperation

LOGGER = logging.getLogger(__name__)


class OperationExecutor:
    """Apply move operations to the filesystem.

    Args:
        write_debug_notes: Whether to write ``<file>.txt`` next to moved files
            that carry diagnostic notes.
    """

    def __init__(self, *, write_debug_notes: bool = True) -> None:
        self.write_debug_notes = write_debug_notes

    def apply(self, operation: MoveOperation, dry_run: bool = False) -> None:
        """Move the file and write its notes.

        Args:
            operation: Move computed by the planner.
            dry_run: When true, only validate the operation.

        Raises:
            OrganizationError: If the source vanished or the destination was
                taken after planning.
            FilesystemError: If a directory cannot be created or the move fails.
        """
        if not operation.source.exists():
            raise OrganizationError(f"Source path is missing: {operation.source}")
        if dry_run:
            return

        self._ensure_directory(operation.destination.parent)
        if operation.destination.exists():
            raise OrganizationError(f"Destination already exists: {operation.destination}")

        try:
            shutil.move(str(operation.source), str(operation.destination))
        except OSError as exc:
            raise FilesystemError(
                f'Unable to move "{operation.source}" to "{operation.destination}": {exc}',
                path=operation.destination,
            ) from exc
        LOGGER.debug("Moved %s to %s.", operation.source, operation.destination)

        if operation.debug_notes and self.write_debug_notes:
            try:
                operation.notes_path.write_text(operation.debug_notes + "\n", encoding="utf-8")
            except OSError as exc:
                raise FilesystemError(
                    f'Unable to write notes "{operation.notes_path}": {exc}',
                    path=operation.notes_path,
                ) from exc

    def _ensure_directory(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(
                f'Directory "{directory}" was not created', path=directory
            ) from exc


__all__ = ["OperationExecutor"]
