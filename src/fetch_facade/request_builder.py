"""
Request builder utilities for fetch_facade.
"""
import json
import logging
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlencode, urljoin, urlparse

from .types import QueryParams, RequestConfig

logger = logging.getLogger("fetch_facade.request_builder")


def is_absolute_url(url: str) -> bool:
    """True when ``url`` carries its own scheme and host."""
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def _format_param(value: Union[str, int, float, bool]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_params(params: Optional[QueryParams]) -> str:
    """Encode query params in insertion order, skipping None values."""
    if not params:
        return ""
    return urlencode(
        {k: _format_param(v) for k, v in params.items() if v is not None}
    )


def build_url(
    base_url: Optional[str],
    url: str,
    params: Optional[QueryParams] = None,
) -> str:
    """Build full URL from base and path."""
    if is_absolute_url(url) or not base_url:
        full_url = url
    elif url.startswith("/"):
        # Preserve the base_url path and append (avoid double slashes)
        parsed = urlparse(base_url)
        base_path = parsed.path.rstrip("/")
        full_url = f"{parsed.scheme}://{parsed.netloc}{base_path}{url}"
    elif url:
        # urljoin replaces the last segment if base doesn't end with /
        if not base_url.endswith("/"):
            base_url = base_url + "/"
        full_url = urljoin(base_url, url)
    else:
        full_url = base_url

    query_str = encode_params(params)
    if query_str:
        separator = "&" if "?" in full_url else "?"
        full_url = f"{full_url}{separator}{query_str}"

    return full_url


def _has_header(headers: Dict[str, str], name: str) -> bool:
    return name.lower() in {k.lower() for k in headers}


def build_headers(config: RequestConfig) -> Dict[str, str]:
    """Build request headers, inferring content-type from the body when unset."""
    result = dict(config.headers or {})
    data = config.data

    if data is not None and not _has_header(result, "content-type"):
        if isinstance(data, str):
            result["Content-Type"] = "text/plain"
        elif isinstance(data, (bytes, bytearray)):
            result["Content-Type"] = "application/octet-stream"
        else:
            result["Content-Type"] = "application/json"

    if not _has_header(result, "accept"):
        result["Accept"] = "application/json, text/plain, */*"

    return result


def build_body(data: Any, headers: Dict[str, str]) -> Optional[Union[str, bytes]]:
    """Serialize the request body according to its content-type."""
    if data is None:
        return None

    if isinstance(data, (str, bytes)):
        return data
    if isinstance(data, bytearray):
        return bytes(data)

    content_type = next(
        (v for k, v in headers.items() if k.lower() == "content-type"), ""
    )
    if "application/x-www-form-urlencoded" in content_type and isinstance(data, dict):
        return urlencode({k: v for k, v in data.items() if v is not None})

    return json.dumps(data)


def serialize_body_for_key(data: Any) -> str:
    """Stable text form of a body, used for cache fingerprints."""
    if isinstance(data, str):
        return data
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    try:
        return json.dumps(data, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return repr(data)


def split_url(url: str) -> Tuple[str, str]:
    """Split ``url`` into (without query, query)."""
    index = url.find("?")
    if index == -1:
        return url, ""
    return url[:index], url[index + 1:]
