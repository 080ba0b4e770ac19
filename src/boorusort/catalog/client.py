"""HTTP client for the image-board posts and similarity endpoints."""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Iterable, Optional

import requests
from pydantic import ValidationError

from boorusort.config.models import ApiSettings

from .cache import PostCache
from .errors import MalformedResponseError, QueryError, ThrottleError, TransportError
from .models import Post, SimilarMatch

LOGGER = logging.getLogger(__name__)

MAX_TAG_TERMS = 6


class CatalogClient:
    """Query the remote catalog with pacing, one 429 retry and post caching.

    Every request goes through a single shared :class:`requests.Session`. At
    most one request is issued per wall-clock second; a request that would
    fall in the same second as the previous one waits for the next second.
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        *,
        cache: Optional[PostCache] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or ApiSettings()
        self._base_url = self._settings.base_url.rstrip("/")
        self.cache = cache if cache is not None else PostCache()
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._settings.user_agent})
        if self._settings.has_credentials:
            self._session.auth = (self._settings.login or "", self._settings.api_key or "")
        self._clock = clock
        self._sleep = sleep
        self._last_request: Optional[float] = None
        self.request_count = 0

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    def query_by_tags(self, expression: str) -> list[Post]:
        """Return posts matching a tag search expression.

        Args:
            expression: Whitespace-separated tag terms (at most six).

        Returns:
            list[Post]: Matching posts; cached posts for ``id:<n>`` terms.

        Raises:
            QueryError: If the expression holds more than six terms.
            TransportError: On network or HTTP failures.
            MalformedResponseError: If the body is not a JSON object or a post is malformed.
        """
        terms = expression.split()
        if len(terms) > MAX_TAG_TERMS:
            raise QueryError(f"You can only search up to {MAX_TAG_TERMS} tags.")

        for term in terms:
            if not term.startswith("id:"):
                continue
            try:
                post_id = int(term[3:])
            except ValueError:
                continue
            cached = self.cache.get(post_id)
            if cached is not None:
                return [cached]

        response = self._send("GET", "posts.json", params={"tags": " ".join(terms)})
        payload = self._decode(response)
        if not isinstance(payload, dict):
            raise MalformedResponseError("Data received from the posts endpoint is invalid.")

        posts: list[Post] = []
        for entry in payload.get("posts") or []:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            try:
                post = Post.from_api(entry)
            except (AttributeError, TypeError, ValueError, ValidationError) as exc:
                raise MalformedResponseError(
                    f"Post entry from the posts endpoint is invalid: {exc}"
                ) from exc
            self.cache.add(post)
            posts.append(post)
        return posts

    def query_similar_image(self, image_bytes: bytes) -> list[SimilarMatch]:
        """Submit image bytes to the visual similarity endpoint.

        Returns:
            list[SimilarMatch]: Candidates in the order returned by the API.

        Raises:
            TransportError: On network or HTTP failures.
            MalformedResponseError: If the body is not JSON or a candidate is malformed.
        """
        response = self._send(
            "POST",
            "iqdb_queries.json",
            files={"file": ("image.jpg", image_bytes)},
        )
        payload = self._decode(response)
        if isinstance(payload, dict):
            return []
        if not isinstance(payload, list):
            raise MalformedResponseError("Response from the similarity endpoint is invalid.")
        if not payload or not isinstance(payload[0], dict) or "post_id" not in payload[0]:
            return []

        matches: list[SimilarMatch] = []
        for entry in payload:
            if not isinstance(entry, dict) or "post_id" not in entry:
                continue
            try:
                match = self._parse_match(entry, sole=len(payload) == 1)
            except (AttributeError, TypeError, ValueError, ValidationError) as exc:
                raise MalformedResponseError(
                    f"Candidate from the similarity endpoint is invalid: {exc}"
                ) from exc
            if match is not None:
                matches.append(match)
        return matches

    @staticmethod
    def _parse_match(entry: dict[str, Any], *, sole: bool) -> Optional[SimilarMatch]:
        file_url = None
        embedded = (entry.get("post") or {}).get("posts")
        if isinstance(embedded, dict):
            file_url = embedded.get("file_url") or None
            # deleted or hidden posts only count when they are the sole match
            if not sole and not file_url:
                return None
        return SimilarMatch(
            post_id=int(entry["post_id"]), score=entry.get("score"), file_url=file_url
        )

    def get_post(self, post_id: int) -> Optional[Post]:
        """Return the post with ``post_id``, served from cache when possible."""
        posts = self.query_by_tags(f"id:{post_id} status:any")
        return posts[0] if posts else None

    def find_by_hash(self, file_hash: str) -> Optional[Post]:
        """Return the post whose file has the given MD5 digest."""
        posts = self.query_by_tags(f"md5:{file_hash} status:any")
        return posts[0] if posts else None

    def find_by_hashes(self, hashes: Iterable[str]) -> list[Post]:
        """Return every post whose file matches one of ``hashes``."""
        joined = ",".join(hashes)
        if not joined:
            return []
        return self.query_by_tags(f"md5:{joined} status:any")

    def post_url(self, post_id: int) -> str:
        """Return the public URL of a post."""
        return f"{self._base_url}/posts/{post_id}"

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Transport                                                          #
    # ------------------------------------------------------------------ #

    def _wait_for_slot(self) -> None:
        if self._last_request is None:
            return
        now = self._clock()
        if math.floor(now) == math.floor(self._last_request):
            self._sleep(math.floor(now) + 1 - now)

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> requests.Response:
        url = f"{self._base_url}/{endpoint}"
        for attempt in range(2):
            self._wait_for_slot()
            try:
                response = self._session.request(
                    method, url, timeout=self._settings.timeout_seconds, **kwargs
                )
            except requests.RequestException as exc:
                raise TransportError(f"Request to {endpoint} failed: {exc}") from exc
            finally:
                self._last_request = self._clock()
                self.request_count += 1

            if response.status_code == 429:
                if attempt == 0:
                    LOGGER.warning("Throttled by %s; retrying in 1 second.", endpoint)
                    self._sleep(1)
                    continue
                raise ThrottleError(
                    f"Request to {endpoint} was throttled twice.", status_code=429
                )

            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise TransportError(str(exc), status_code=response.status_code) from exc
            return response

        raise ThrottleError(f"Request to {endpoint} was throttled twice.", status_code=429)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Response is not valid JSON: {exc}") from exc


__all__ = ["CatalogClient", "MAX_TAG_TERMS"]
