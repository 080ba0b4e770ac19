"""Identify local files as catalog posts.

Resolution runs in tiers: the in-memory hash index (warmed by a bulk lookup
before per-file processing), an individual hash query for hashes the bulk
lookup never covered, then an optional visual similarity search.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from boorusort.catalog import (
    CatalogClient,
    CatalogError,
    ConversionError,
    HashIndex,
    ImageConverter,
)

from .models import ResolutionMethod, ResolutionOutcome

LOGGER = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve a file's content hash to a post id.

    Args:
        client: Catalog client shared for the whole run.
        reverse_search: Whether the visual search fallback is enabled.
        converter: Image preparation used for visual searches.
        index: Hash index to use; built from the client's post cache by default.
        batch_size: Number of hashes per bulk lookup page.
    """

    def __init__(
        self,
        client: CatalogClient,
        *,
        reverse_search: bool = False,
        converter: Optional[ImageConverter] = None,
        index: Optional[HashIndex] = None,
        batch_size: int = 100,
    ) -> None:
        self._client = client
        self.reverse_search = reverse_search
        self._converter = converter or ImageConverter()
        self.index = index if index is not None else HashIndex.from_posts(client.cache)
        self._batch_size = max(1, batch_size)

    def prefetch(self, hashes: Sequence[str]) -> int:
        """Warm the hash index with bulk lookups.

        Skipped when the working set holds a single file or when posts were
        loaded from a dump.

        Returns:
            int: Number of pages requested.
        """
        if len(hashes) <= 1 or self._client.cache.dump_loaded:
            return 0

        unique = list(dict.fromkeys(value for value in hashes if value))
        pages = 0
        for start in range(0, len(unique), self._batch_size):
            page = unique[start : start + self._batch_size]
            pages += 1
            LOGGER.info("Bulk hash lookup page %d (%d hashes).", pages, len(page))
            try:
                posts = self._client.find_by_hashes(page)
            except CatalogError as exc:
                LOGGER.warning("API failure during bulk hash lookup page %d: %s", pages, exc)
                continue
            for post in posts:
                self.index.add(post)
            self.index.mark_covered(page)
        return pages

    def resolve(self, path: Path, file_hash: str) -> ResolutionOutcome:
        """Identify ``path`` whose MD5 digest is ``file_hash``.

        API failures never propagate; they become ``API_ERROR`` outcomes.
        """
        try:
            return self._resolve(path, file_hash)
        finally:
            self._converter.reset()

    def _resolve(self, path: Path, file_hash: str) -> ResolutionOutcome:
        post_id = self.index.get(file_hash)
        if post_id is not None:
            return ResolutionOutcome.found(post_id, ResolutionMethod.CACHE)

        hash_error: Optional[str] = None
        if not self.index.is_covered(file_hash):
            try:
                post = self._client.find_by_hash(file_hash)
            except CatalogError as exc:
                LOGGER.warning("API failure while looking up %s: %s", file_hash, exc)
                hash_error = f"API failure: {exc}"
            else:
                self.index.mark_covered([file_hash])
                if post is not None:
                    self.index.add(post)
                    return ResolutionOutcome.found(post.id, ResolutionMethod.HASH)

        LOGGER.info("Post by MD5 not found: %s", file_hash)

        if self.reverse_search:
            return self._visual_search(path)
        if hash_error is not None:
            return ResolutionOutcome.api_error(hash_error)
        return ResolutionOutcome.not_found()

    def _visual_search(self, path: Path) -> ResolutionOutcome:
        try:
            image_bytes = self._converter.prepare(path)
        except ConversionError as exc:
            LOGGER.warning("%s", exc)
            return ResolutionOutcome.api_error(str(exc))
        except OSError as exc:
            return ResolutionOutcome.api_error(f"Unable to read {path.name}: {exc}")

        try:
            matches = self._client.query_similar_image(image_bytes)
        except CatalogError as exc:
            LOGGER.warning("Reverse search failed for %s: %s", path.name, exc)
            return ResolutionOutcome.api_error(f"Reverse search failed: {exc}")

        post_ids = list(dict.fromkeys(match.post_id for match in matches))
        if not post_ids:
            return ResolutionOutcome.not_found()
        if len(post_ids) == 1:
            return ResolutionOutcome.found(post_ids[0], ResolutionMethod.VISUAL)

        notes = "Multiple posts matched: \n" + "\n".join(
            self._client.post_url(post_id) for post_id in post_ids
        )
        return ResolutionOutcome.multiple(post_ids, notes)


__all__ = ["IdentityResolver"]
