"""Identification of local files as catalog posts."""

from .models import ResolutionKind, ResolutionMethod, ResolutionOutcome
from .resolver import IdentityResolver

__all__ = ["IdentityResolver", "ResolutionKind", "ResolutionMethod", "ResolutionOutcome"]
