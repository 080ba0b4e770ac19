"""Planner for file moves."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, Mapping, Optional, Sequence

from boorusort.classification import ClassificationResult, resolve_folder_alias
from boorusort.config.models import DEFAULT_FOLDER_ALIASES

from .errors import OrganizationError
from .models import MoveOperation

LOGGER = logging.getLogger(__name__)

DEFAULT_EXISTS_FOLDER = "! Exists"
MAX_COLLISION_DEPTH = 32


class OrganizerPlanner:
    """Derive move operations from classification results.

    Args:
        folder_aliases: Preferred folder names for the first segment.
        exists_folder: Folder under the quarantine root receiving collisions.
        max_depth: Maximum number of collision retargets per file.
    """

    def __init__(
        self,
        *,
        folder_aliases: Optional[Mapping[str, str]] = None,
        exists_folder: str = DEFAULT_EXISTS_FOLDER,
        max_depth: int = MAX_COLLISION_DEPTH,
    ) -> None:
        self.folder_aliases = dict(
            DEFAULT_FOLDER_ALIASES if folder_aliases is None else folder_aliases
        )
        self.exists_folder = exists_folder
        self.max_depth = max_depth

    def plan_move(
        self,
        source: Path,
        result: ClassificationResult,
        *,
        target_root: Path,
        quarantine_root: Path,
        occupied: AbstractSet[Path] = frozenset(),
    ) -> MoveOperation:
        """Build the move for ``source`` according to ``result``.

        Error results go under the quarantine root, everything else under the
        target root.

        Args:
            source: File being sorted.
            result: Classification of the file.
            target_root: Destination root for classified files.
            quarantine_root: Root for ``!``-prefixed folders and collisions.
            occupied: Destinations already claimed by earlier planned moves.

        Returns:
            MoveOperation: The planned move.

        Raises:
            OrganizationError: If no free destination can be found.
        """
        root = quarantine_root if result.is_error else target_root
        segments = resolve_folder_alias(result.path_segments, root, self.folder_aliases)
        candidate = root.joinpath(*segments, source.name)

        destination = self._resolve_collision(
            candidate,
            roots=(quarantine_root, target_root),
            quarantine_root=quarantine_root,
            occupied=occupied,
        )
        return MoveOperation(
            source=source,
            destination=destination,
            status=result.status,
            debug_notes=result.debug_notes,
            reasoning=f"Move to folder '{'/'.join(segments) or '.'}'",
            conflict_applied=destination != candidate,
        )

    def _resolve_collision(
        self,
        candidate: Path,
        *,
        roots: Sequence[Path],
        quarantine_root: Path,
        occupied: AbstractSet[Path],
    ) -> Path:
        visited: set[Path] = set()
        current = candidate
        while current.exists() or current in occupied:
            if current in visited or len(visited) >= self.max_depth:
                raise OrganizationError(f"Unable to find a free destination for {candidate}")
            visited.add(current)
            LOGGER.info("File already exists: %s", current)
            current = quarantine_root / self.exists_folder / self._relative(current, roots)
        return current

    def _relative(self, path: Path, roots: Sequence[Path]) -> Path:
        """Return ``path`` relative to the most specific root containing it."""
        for root in sorted(roots, key=lambda value: len(value.parts), reverse=True):
            try:
                return path.relative_to(root)
            except ValueError:
                continue
        return Path(path.name)


__all__ = ["OrganizerPlanner", "DEFAULT_EXISTS_FOLDER", "MAX_COLLISION_DEPTH"]
