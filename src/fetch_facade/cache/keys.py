"""
Cache key derivation.
"""
import hashlib
from typing import Optional
from urllib.parse import quote

from ..request_builder import build_url, serialize_body_for_key
from ..types import QueryParams, RequestConfig


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sorted_query(params: Optional[QueryParams]) -> str:
    if not params:
        return ""
    return "&".join(
        f"{quote(str(k), safe='')}={quote(_format_value(v), safe='')}"
        for k, v in sorted(params.items())
        if v is not None
    )


def hash_body(data: object) -> str:
    """Short sha256 fingerprint of a request body."""
    return hashlib.sha256(serialize_body_for_key(data).encode("utf-8")).hexdigest()[:16]


def generate_cache_key(config: RequestConfig) -> str:
    """
    Default cache key: ``METHOD:URL[?sorted params][:#body-hash]``.

    The URL is resolved against ``base_url`` so two clients hitting the same
    endpoint through different relative paths share entries. The body hash is
    only added for non-GET requests that carry a body.
    """
    method = config.resolved_method
    key = f"{method}:{build_url(config.base_url, config.url)}"

    query = _sorted_query(config.params)
    if query:
        key += f"?{query}"

    if method != "GET" and config.data is not None:
        key += f":#{hash_body(config.data)}"

    return key
