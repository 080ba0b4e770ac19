"""Classification of posts into destination folders."""

from .aliases import resolve_folder_alias
from .engine import TagClassifier
from .models import (
    CONFLICT_FOLDER,
    ERROR_MARKER,
    STATUS_FOLDERS,
    ClassificationResult,
    ClassificationStatus,
)

__all__ = [
    "TagClassifier",
    "ClassificationResult",
    "ClassificationStatus",
    "CONFLICT_FOLDER",
    "ERROR_MARKER",
    "STATUS_FOLDERS",
    "resolve_folder_alias",
]
