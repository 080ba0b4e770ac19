"""Resolution outcome models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolutionKind(str, Enum):
    """Terminal states of the per-file identification state machine."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    MULTIPLE_MATCHES = "multiple_matches"
    API_ERROR = "api_error"


class ResolutionMethod(str, Enum):
    """How a post id was obtained."""

    CACHE = "cache"
    HASH = "hash"
    VISUAL = "visual"


class ResolutionOutcome(BaseModel):
    """Result of identifying one local file against the catalog.

    Attributes:
        kind: Terminal state reached.
        post_id: Identified post for ``FOUND`` outcomes.
        method: Lookup that produced ``post_id``.
        candidates: Distinct post ids for ``MULTIPLE_MATCHES`` outcomes.
        message: Error text for ``API_ERROR`` outcomes.
        debug_notes: Diagnostic text written next to the moved file.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResolutionKind
    post_id: Optional[int] = None
    method: Optional[ResolutionMethod] = None
    candidates: List[int] = Field(default_factory=list)
    message: Optional[str] = None
    debug_notes: Optional[str] = None

    @classmethod
    def found(cls, post_id: int, method: ResolutionMethod) -> "ResolutionOutcome":
        return cls(kind=ResolutionKind.FOUND, post_id=post_id, method=method)

    @classmethod
    def not_found(cls) -> "ResolutionOutcome":
        return cls(kind=ResolutionKind.NOT_FOUND)

    @classmethod
    def multiple(cls, candidates: List[int], debug_notes: str) -> "ResolutionOutcome":
        return cls(
            kind=ResolutionKind.MULTIPLE_MATCHES,
            candidates=list(candidates),
            debug_notes=debug_notes,
        )

    @classmethod
    def api_error(cls, message: str) -> "ResolutionOutcome":
        return cls(kind=ResolutionKind.API_ERROR, message=message)

    @property
    def is_found(self) -> bool:
        return self.kind is ResolutionKind.FOUND


__all__ = ["ResolutionKind", "ResolutionMethod", "ResolutionOutcome"]
