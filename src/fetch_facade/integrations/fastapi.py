"""
FastAPI integration for fetch_facade.

Provides lifespan management, dependency injection, and service patterns.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, Optional

from fastapi import FastAPI, Request

from ..cache.types import CacheStore
from ..config import ClientConfig
from ..core.client import HttpClient
from ..types import Plugin

logger = logging.getLogger("fetch_facade.integrations.fastapi")


@dataclass
class HttpClientService:
    """
    Application-scoped registry of named clients.

    Example:
        service = HttpClientService()
        await service.register("users", ClientConfig(base_url="https://users.internal"))
        client = service.get("users")
    """

    clients: Dict[str, HttpClient] = field(default_factory=dict)

    async def register(
        self,
        name: str,
        config: Optional[ClientConfig] = None,
        plugins: Optional[Iterable[Plugin]] = None,
        cache_store: Optional[CacheStore] = None,
    ) -> HttpClient:
        """
        Register a named client. An existing client with the same name is
        closed and replaced.

        Args:
            name: Unique name for the client.
            config: Client configuration.
            plugins: Plugins installed in order.
            cache_store: Backing store for the response cache.

        Returns:
            The registered HttpClient.
        """
        if name in self.clients:
            logger.warning(f"HttpClientService.register: replacing client '{name}'")
            await self.close(name)

        client = HttpClient(config, cache_store=cache_store)
        for plugin in plugins or []:
            client.use(plugin)
        self.clients[name] = client
        logger.info(f"Registered http client: {name}")
        return client

    def get(self, name: str) -> HttpClient:
        """
        Get a registered client by name.

        Raises:
            KeyError: If client is not registered.
        """
        client = self.clients.get(name)
        if client is None:
            raise KeyError(f"Client '{name}' not registered")
        return client

    def has(self, name: str) -> bool:
        return name in self.clients

    async def close(self, name: str) -> None:
        """Close and remove a specific client."""
        client = self.clients.pop(name, None)
        if client is not None:
            await client.close()
            logger.info(f"Closed http client: {name}")

    async def close_all(self) -> None:
        """Close all registered clients (called on shutdown)."""
        for name in list(self.clients):
            await self.close(name)
        logger.info("All http clients closed")


SetupFn = Callable[[HttpClientService], Awaitable[Any]]


def create_lifespan(
    setup: Optional[SetupFn] = None,
) -> Callable[[FastAPI], Any]:
    """
    Factory to create a FastAPI lifespan context manager.

    Args:
        setup: Async function to register clients during startup.
               Receives the HttpClientService instance.

    Example:
        async def setup_clients(service: HttpClientService):
            await service.register(
                "users",
                ClientConfig(base_url="https://users.internal"),
                plugins=[create_retry_plugin()],
            )

        app = FastAPI(lifespan=create_lifespan(setup_clients))
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = HttpClientService()

        if setup is not None:
            await setup(service)

        app.state.http_clients = service
        try:
            yield
        finally:
            await service.close_all()

    return lifespan


def get_client(name: str) -> Callable[[Request], HttpClient]:
    """
    FastAPI dependency returning a named client.

    Example:
        @app.get("/users/{user_id}")
        async def read_user(user_id: int, client: HttpClient = Depends(get_client("users"))):
            response = await client.get(f"/users/{user_id}")
            return response.data
    """

    def _get_client(request: Request) -> HttpClient:
        service: HttpClientService = request.app.state.http_clients
        return service.get(name)

    return _get_client
