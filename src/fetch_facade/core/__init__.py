"""
Core modules for fetch_facade.
"""
from .client import HttpClient, create_http_client
from .pipeline import RequestPipeline

__all__ = [
    "HttpClient",
    "create_http_client",
    "RequestPipeline",
]
