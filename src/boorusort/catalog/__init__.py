"""Remote catalog access: HTTP client, caches and image preparation."""

from .cache import HashIndex, PostCache
from .client import MAX_TAG_TERMS, CatalogClient
from .convert import ImageConverter
from .errors import (
    CatalogError,
    ConversionError,
    MalformedResponseError,
    QueryError,
    ThrottleError,
    TransportError,
)
from .models import Post, Rating, SimilarMatch

__all__ = [
    "CatalogClient",
    "MAX_TAG_TERMS",
    "HashIndex",
    "PostCache",
    "ImageConverter",
    "CatalogError",
    "ConversionError",
    "MalformedResponseError",
    "QueryError",
    "ThrottleError",
    "TransportError",
    "Post",
    "Rating",
    "SimilarMatch",
]
