"""
Framework integrations for fetch_facade.
"""
from .fastapi import (
    HttpClientService,
    create_lifespan,
    get_client,
)

__all__ = [
    "HttpClientService",
    "create_lifespan",
    "get_client",
]
