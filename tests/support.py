"""Helpers shared by the test modules: fake HTTP sessions and payload builders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

import requests
from PIL import Image

BASE_URL = "https://e621.net"

Handler = Callable[[str, str, dict[str, Any]], requests.Response]
Scripted = Union[requests.Response, Exception]


def make_response(
    payload: Any = None,
    *,
    status: int = 200,
    url: str = f"{BASE_URL}/posts.json",
    raw: Optional[bytes] = None,
) -> requests.Response:
    """Return a real ``requests.Response`` carrying ``payload`` as JSON."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    response._content = raw if raw is not None else json.dumps(payload).encode("utf-8")
    return response


def post_payload(
    post_id: int,
    md5: str,
    *,
    rating: Optional[str] = "s",
    general: Iterable[str] = (),
    file_url: Optional[str] = None,
) -> dict[str, Any]:
    """Return a post in the API's JSON shape."""
    return {
        "id": post_id,
        "file": {
            "md5": md5,
            "url": f"{BASE_URL}/data/{md5}.png" if file_url is None else file_url,
        },
        "rating": rating,
        "tags": {"general": list(general), "species": [], "character": []},
    }


class FakeSession(requests.Session):
    """Session answering from a script of responses or a routing handler."""

    def __init__(self, script: Union[Iterable[Scripted], Handler] = ()) -> None:
        super().__init__()
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self._handler: Optional[Handler] = script if callable(script) else None
        self._script: list[Scripted] = [] if callable(script) else list(script)

    def request(  # type: ignore[override]
        self, method: str, url: str, **kwargs: Any
    ) -> requests.Response:
        self.calls.append((method, url, kwargs))
        if self._handler is not None:
            return self._handler(method, url, kwargs)
        if not self._script:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeCatalog:
    """Routing handler emulating the posts and similarity endpoints."""

    def __init__(self, posts: Iterable[dict[str, Any]] = (), similar: Any = None) -> None:
        self.posts = list(posts)
        self.similar = similar if similar is not None else {"posts": []}

    def __call__(self, method: str, url: str, kwargs: dict[str, Any]) -> requests.Response:
        if url.endswith("/iqdb_queries.json"):
            return make_response(self.similar, url=url)

        matches = self.posts
        for term in kwargs["params"]["tags"].split():
            if term.startswith("md5:"):
                hashes = set(term[4:].split(","))
                matches = [post for post in matches if post["file"]["md5"] in hashes]
            elif term.startswith("id:"):
                matches = [post for post in matches if str(post["id"]) == term[3:]]
        return make_response({"posts": matches}, url=url)


class FakeClock:
    """Deterministic clock advanced by the fake sleep."""

    def __init__(self, start: float = 1000.25) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def write_image(
    path: Path,
    *,
    mode: str = "RGB",
    size: tuple[int, int] = (8, 8),
    fmt: str = "PNG",
    color: Any = None,
) -> Path:
    """Write a small generated image to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if color is None:
        color = {"RGBA": (200, 10, 10, 128), "L": 128, "P": 1}.get(mode, (200, 10, 10))
    Image.new(mode, size, color).save(path, fmt)
    return path
