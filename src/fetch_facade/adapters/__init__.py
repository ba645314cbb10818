"""
Transport adapters for fetch_facade.
"""
from .base import AdapterPort
from .factory import (
    create_adapter,
    get_available_adapters,
    register_adapter,
    unregister_adapter,
)
from .httpx_adapter import (
    HttpxAdapter,
    create_httpx_adapter,
    is_ssl_verify_disabled_by_env,
    parse_response_body,
)

__all__ = [
    "AdapterPort",
    "HttpxAdapter",
    "create_httpx_adapter",
    "is_ssl_verify_disabled_by_env",
    "parse_response_body",
    "create_adapter",
    "register_adapter",
    "unregister_adapter",
    "get_available_adapters",
]
