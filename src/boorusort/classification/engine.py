"""Deterministic tag-to-folder classification.

A post's folder is built from an optional rating segment followed by an
optional interaction segment derived from subject-count and gender tags.
Posts that cannot be classified are routed to ``!``-prefixed folders with
diagnostic notes instead of raising.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, List, Optional, Sequence, Tuple

from boorusort.catalog import CatalogClient, CatalogError, Post, Rating
from boorusort.config.models import ClassificationOptions

from .models import CONFLICT_FOLDER, ClassificationResult, ClassificationStatus
from .vocabulary import (
    GROUP_TAG,
    SOLO_FOCUS_TAG,
    SOLO_TAG,
    match_genders,
    match_pairs,
    pair_name,
)

LOGGER = logging.getLogger(__name__)

SOLO_FOLDER = "Solo"
SOLO_FOCUS_FOLDER = "Solo focus"
GROUP_FOLDER = "Multiple characters"
UNKNOWN_FOLDER = "Unknown"

_Segment = Tuple[List[str], Optional[str]]


def _conflict_notes(title: str, matches: Sequence[str], tags: Sequence[str]) -> str:
    return f"{title}: \n" + "\n".join(matches) + "\n\nTags: " + " ".join(tags)


class TagClassifier:
    """Compute destination folders from post metadata.

    Args:
        options: Classification toggles and required-tag filters.
        client: Catalog client used by :meth:`categorize` to fetch posts.
    """

    def __init__(
        self,
        options: Optional[ClassificationOptions] = None,
        client: Optional[CatalogClient] = None,
    ) -> None:
        self.options = options or ClassificationOptions()
        self._client = client

    def categorize(self, post_id: int) -> ClassificationResult:
        """Fetch ``post_id`` and classify it.

        Args:
            post_id: Identifier returned by the identity resolver.

        Returns:
            ClassificationResult: Folder segments and status for the post.
        """
        if self._client is None:
            raise RuntimeError("TagClassifier.categorize requires a catalog client.")
        try:
            post = self._client.get_post(post_id)
        except CatalogError as exc:
            LOGGER.warning("API failure while fetching post %s: %s", post_id, exc)
            return ClassificationResult.marker(
                ClassificationStatus.NOT_FOUND, debug_notes=f"API failure: {exc}"
            )
        return self.classify(post)

    def classify(self, post: Optional[Post]) -> ClassificationResult:
        """Classify ``post`` without touching the network.

        Args:
            post: Post metadata, or ``None`` when the post does not exist.

        Returns:
            ClassificationResult: Folder segments and status for the post.
        """
        if post is None:
            return ClassificationResult.marker(ClassificationStatus.NOT_FOUND)

        tags = post.flattened_tags()
        tag_set = frozenset(tags)

        missing = self._missing_required(tag_set)
        if missing is not None:
            LOGGER.info("Post %s does not carry the required tags.", post.id)
            return ClassificationResult.marker(ClassificationStatus.INVALID, debug_notes=missing)

        segments: List[str] = []
        if self.options.by_rating:
            rating = Rating.from_code(post.rating)
            if rating is None:
                LOGGER.info("Post %s has an unknown rating: %r", post.id, post.rating)
                return ClassificationResult.marker(ClassificationStatus.UNKNOWN)
            segments.append(rating.label)

        status = ClassificationStatus.RESOLVED
        notes: Optional[str] = None
        if self.options.by_interaction:
            interaction, notes = self._interaction_segments(tag_set, tags)
            segments.extend(interaction)
            if notes is not None:
                status = ClassificationStatus.CONFLICT

        return ClassificationResult(path_segments=segments, status=status, debug_notes=notes)

    def _missing_required(self, tags: AbstractSet[str]) -> Optional[str]:
        """Return a note when the required-tags gate rejects ``tags``."""
        require_all = self.options.require_all_tags
        require_one = self.options.require_one_tag
        if require_all:
            missing = [tag for tag in require_all if tag not in tags]
            if missing:
                return "Missing required tags: " + " ".join(missing)
        if require_one:
            if not any(tag in tags for tag in require_one):
                return "None of the tags matched: " + " ".join(require_one)
        return None

    def _interaction_segments(self, tag_set: AbstractSet[str], tags: Sequence[str]) -> _Segment:
        genders = match_genders(tag_set)

        if SOLO_TAG in tag_set:
            if len(genders) > 1:
                notes = _conflict_notes("Multiple gender tags matched", genders, tags)
                return [SOLO_FOLDER, CONFLICT_FOLDER], notes
            if not genders:
                LOGGER.info("Missing gender tag on a solo post.")
                return [SOLO_FOLDER, UNKNOWN_FOLDER], None
            return [SOLO_FOLDER, genders[0]], None

        pairs = match_pairs(tag_set)

        if GROUP_TAG in tag_set:
            if len(pairs) == 1:
                return [GROUP_FOLDER, pairs[0]], None
            return [GROUP_FOLDER], None

        if not pairs and len(genders) == 2:
            inferred = pair_name(genders[0], genders[1])
            if inferred is not None:
                pairs = [inferred]

        if not pairs:
            LOGGER.info("Missing interaction tag.")
            return [UNKNOWN_FOLDER], None
        if len(pairs) > 1:
            notes = _conflict_notes("Multiple interaction tags matched", pairs, tags)
            return [CONFLICT_FOLDER], notes

        segments = [pairs[0]]
        if SOLO_FOCUS_TAG in tag_set:
            segments.append(SOLO_FOCUS_FOLDER)
            if len(genders) == 1:
                segments.append(genders[0])
        return segments, None


__all__ = ["TagClassifier", "SOLO_FOLDER", "SOLO_FOCUS_FOLDER", "GROUP_FOLDER", "UNKNOWN_FOLDER"]
