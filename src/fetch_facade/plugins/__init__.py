"""
Client plugins.

A plugin is any object with a ``name`` and an ``install(client)`` method.
"""
from .cache import CacheNamespace, CachePlugin, create_cache_plugin
from .logger import LoggingPlugin, create_logging_plugin
from .retry import RetryNamespace, RetryPlugin, create_retry_plugin

__all__ = [
    "CacheNamespace",
    "CachePlugin",
    "create_cache_plugin",
    "RetryNamespace",
    "RetryPlugin",
    "create_retry_plugin",
    "LoggingPlugin",
    "create_logging_plugin",
]
