"""Process-lifetime caches for posts and content hashes."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .errors import CatalogError
from .models import Post

LOGGER = logging.getLogger(__name__)


class PostCache:
    """Append-only mapping of post id to post for the duration of a run."""

    def __init__(self, posts: Iterable[Post] = ()) -> None:
        self._posts: dict[int, Post] = {}
        self.dump_loaded = False
        for post in posts:
            self.add(post)

    def __len__(self) -> int:
        return len(self._posts)

    def __contains__(self, post_id: object) -> bool:
        return post_id in self._posts

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts.values())

    def get(self, post_id: int) -> Optional[Post]:
        """Return the cached post for ``post_id`` if present."""
        return self._posts.get(post_id)

    def add(self, post: Post) -> bool:
        """Insert ``post`` unless its id is already cached.

        Returns:
            bool: True when the post was inserted.
        """
        if post.id in self._posts:
            return False
        self._posts[post.id] = post
        return True

    def load_dump(self, path: Path) -> int:
        """Load a JSON posts dump wholesale into the cache.

        The dump may be an array of posts or an object keyed by post id.

        Returns:
            int: Number of posts inserted.

        Raises:
            CatalogError: If the file cannot be read or has the wrong shape.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogError(f"Unable to read posts dump {path}: {exc}") from exc

        if isinstance(data, dict):
            entries = list(data.values())
        elif isinstance(data, list):
            entries = data
        else:
            raise CatalogError(f"Posts dump {path} must contain an array or an object.")

        inserted = 0
        for entry in entries:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            if self.add(Post.from_api(entry)):
                inserted += 1

        self.dump_loaded = True
        LOGGER.info("Loaded %d posts from %s", inserted, path)
        return inserted

    def save_dump(self, path: Path) -> None:
        """Write the cache to ``path`` as a JSON object keyed by post id."""
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {str(post.id): post.to_api() for post in self._posts.values()}
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        LOGGER.info("Saved %d posts to %s", len(payload), path)


class HashIndex:
    """Map of content hash to post id, never evicted during a run.

    Besides the mapping itself the index remembers which hashes were already
    covered by a successful bulk lookup, so a miss on such a hash is final.
    """

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}
        self._covered: set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, file_hash: object) -> bool:
        return file_hash in self._ids

    def get(self, file_hash: str) -> Optional[int]:
        """Return the post id recorded for ``file_hash``."""
        return self._ids.get(file_hash)

    def add(self, post: Post) -> None:
        """Record ``post`` under its own file hash; the first id per hash wins."""
        if post.file_hash and post.file_hash not in self._ids:
            self._ids[post.file_hash] = post.id

    def mark_covered(self, hashes: Iterable[str]) -> None:
        """Remember that a bulk lookup already asked about ``hashes``."""
        self._covered.update(hashes)

    def is_covered(self, file_hash: str) -> bool:
        """Return True when a bulk lookup already asked about ``file_hash``."""
        return file_hash in self._covered

    @classmethod
    def from_posts(cls, posts: Iterable[Post]) -> "HashIndex":
        """Build an index from already known posts."""
        index = cls()
        for post in posts:
            index.add(post)
        return index


__all__ = ["PostCache", "HashIndex"]
