"""Move plan data models."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from boorusort.classification.models import ClassificationStatus


class MoveOperation(BaseModel):
    """Represents moving one file to its classified folder.

    Attributes:
        source: Current file path.
        destination: Final path after aliasing and collision handling.
        status: Classification status the destination was derived from.
        debug_notes: Diagnostic text written next to the moved file.
        reasoning: Short human-readable explanation for the move.
        conflict_applied: Indicates whether the destination was retargeted
            because of an existing file.
    """

    source: Path
    destination: Path
    status: ClassificationStatus = ClassificationStatus.RESOLVED
    debug_notes: Optional[str] = None
    reasoning: Optional[str] = None
    conflict_applied: bool = False

    @property
    def notes_path(self) -> Path:
        """Return the sidecar file that receives ``debug_notes``."""
        return self.destination.with_name(f"{self.destination.name}.txt")


__all__ = ["MoveOperation"]
