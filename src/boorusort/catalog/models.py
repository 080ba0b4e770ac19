"""Catalog data models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Rating(str, Enum):
    """Content rating of a post, keyed by its single-letter API code."""

    EXPLICIT = "e"
    QUESTIONABLE = "q"
    SAFE = "s"

    @property
    def label(self) -> str:
        """Return the folder label for the rating."""
        return self.name.capitalize()

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["Rating"]:
        """Return the rating for ``code`` or ``None`` when it is unknown."""
        if not code:
            return None
        try:
            return cls(code)
        except ValueError:
            return None


class Post(BaseModel):
    """A catalog record as returned by the posts endpoint.

    Attributes:
        id: Unique post identifier.
        file_hash: MD5 digest of the post's file.
        file_url: Direct URL of the file, empty for deleted or hidden posts.
        rating: Raw rating code (``e``, ``q`` or ``s``).
        tags: Tags grouped by category name.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    file_hash: str = ""
    file_url: Optional[str] = None
    rating: Optional[str] = None
    tags: Dict[str, List[str]] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Post":
        """Build a post from the API's JSON representation."""
        file_info = payload.get("file") or {}
        raw_tags = payload.get("tags") or {}
        tags: dict[str, list[str]] = {}
        if isinstance(raw_tags, Mapping):
            for category, values in raw_tags.items():
                if isinstance(values, list):
                    tags[str(category)] = [str(value) for value in values]
        elif isinstance(raw_tags, str):
            tags["general"] = raw_tags.split()
        return cls(
            id=int(payload["id"]),
            file_hash=str(file_info.get("md5") or payload.get("md5") or ""),
            file_url=file_info.get("url"),
            rating=payload.get("rating"),
            tags=tags,
        )

    def to_api(self) -> dict[str, Any]:
        """Render the post back into the API's JSON shape."""
        return {
            "id": self.id,
            "file": {"md5": self.file_hash, "url": self.file_url},
            "rating": self.rating,
            "tags": {category: list(values) for category, values in self.tags.items()},
        }

    def flattened_tags(self) -> list[str]:
        """Return every tag across categories, deduplicated and sorted."""
        return sorted({tag for values in self.tags.values() for tag in values})


class SimilarMatch(BaseModel):
    """A candidate returned by the visual similarity endpoint."""

    model_config = ConfigDict(frozen=True)

    post_id: int
    score: Optional[float] = None
    file_url: Optional[str] = None


__all__ = ["Rating", "Post", "SimilarMatch"]
