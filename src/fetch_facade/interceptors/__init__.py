"""
Interceptor chains and ready-made interceptors.
"""
from .chain import Interceptor, InterceptorChain, maybe_await, new_id_counter
from .common import (
    create_auth_interceptor,
    create_base_url_interceptor,
    create_log_interceptors,
)

__all__ = [
    "Interceptor",
    "InterceptorChain",
    "maybe_await",
    "new_id_counter",
    "create_auth_interceptor",
    "create_base_url_interceptor",
    "create_log_interceptors",
]
