"""Classification result models."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

ERROR_MARKER = "!"


class ClassificationStatus(str, Enum):
    """Final state of a file's classification."""

    RESOLVED = "resolved"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    ERROR = "error"
    MULTIPLE_MATCHES = "multiple_matches"


# Folder used for each status that short-circuits classification.
STATUS_FOLDERS = {
    ClassificationStatus.UNKNOWN: "! Unknown rating",
    ClassificationStatus.NOT_FOUND: "! Not found",
    ClassificationStatus.INVALID: "! Invalid",
    ClassificationStatus.ERROR: "! Error",
    ClassificationStatus.MULTIPLE_MATCHES: "! Multiple matches",
}
CONFLICT_FOLDER = "! Conflict"


class ClassificationResult(BaseModel):
    """Destination folder computed for one file.

    Attributes:
        path_segments: Ordered folder names relative to the destination root.
        status: Classification state.
        debug_notes: Diagnostic text to keep next to the moved file.
    """

    model_config = ConfigDict(frozen=True)

    path_segments: List[str] = Field(default_factory=list)
    status: ClassificationStatus = ClassificationStatus.RESOLVED
    debug_notes: Optional[str] = None

    @classmethod
    def marker(
        cls, status: ClassificationStatus, debug_notes: Optional[str] = None
    ) -> "ClassificationResult":
        """Return a result routed to the distinguished folder of ``status``."""
        return cls(path_segments=[STATUS_FOLDERS[status]], status=status, debug_notes=debug_notes)

    @property
    def path(self) -> str:
        """Return the segments joined as a relative POSIX path."""
        return PurePath(*self.path_segments).as_posix() if self.path_segments else ""

    @property
    def is_error(self) -> bool:
        """Return True when the first segment carries the error marker."""
        return bool(self.path_segments) and self.path_segments[0].startswith(ERROR_MARKER)


__all__ = [
    "ClassificationStatus",
    "ClassificationResult",
    "STATUS_FOLDERS",
    "CONFLICT_FOLDER",
    "ERROR_MARKER",
]
