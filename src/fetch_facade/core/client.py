"""
HttpClient facade.
"""
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..adapters.base import AdapterPort
from ..adapters.factory import create_adapter
from ..cache.manager import CacheManager
from ..cache.types import CacheStore
from ..cancel import CancelToken
from ..config import (
    ClientConfig,
    DEFAULT_CLIENT_CONFIG,
    merge_client_config,
    validate_client_config,
)
from ..events import EventBus, EventType
from ..interceptors.chain import (
    FulfilledHandler,
    Interceptor,
    InterceptorChain,
    RejectedHandler,
    new_id_counter,
)
from ..retry.config import async_sleep
from ..retry.manager import RetryManager
from ..types import AdapterInfo, EventHandler, HttpResponse, InterceptorKind, Plugin, RequestConfig
from .pipeline import RequestPipeline

logger = logging.getLogger("fetch_facade.client")


class HttpClient:
    """
    Unified async HTTP client.

    All calls go through one ``RequestPipeline``; the transport is whatever
    adapter the client was built with.

    Example:
        async with HttpClient(ClientConfig(base_url="https://api.example.com")) as client:
            client.on("error", lambda payload: print(payload.error))
            response = await client.get("/users/1")
            print(response.data)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        cache_store: Optional[CacheStore] = None,
        sleep: Callable[[float], Awaitable[None]] = async_sleep,
    ) -> None:
        self._config = merge_client_config(DEFAULT_CLIENT_CONFIG, config)
        validate_client_config(self._config)

        adapter = self._config.adapter or DEFAULT_CLIENT_CONFIG.adapter
        self._adapter = create_adapter(adapter)
        self._is_custom_adapter = isinstance(adapter, AdapterPort)

        ids = new_id_counter()
        self._request_interceptors = InterceptorChain(ids)
        self._response_interceptors = InterceptorChain(ids)
        self._events = EventBus()
        # The managers own the client-level cache and retry settings
        self._cache_manager = CacheManager(self._config.cache, store=cache_store)
        self._retry_manager = RetryManager(self._config.retry, sleep=sleep)
        self._config = replace(self._config, cache=None, retry=None)
        self._pipeline = RequestPipeline(
            adapter=self._adapter,
            request_interceptors=self._request_interceptors,
            response_interceptors=self._response_interceptors,
            cache=self._cache_manager,
            retry=self._retry_manager,
            events=self._events,
            defaults=self._config,
        )
        self._plugins: Dict[str, Plugin] = {}
        self._closed = False

        # Namespaces attached by the cache and retry plugins
        self.cache: Optional[Any] = None
        self.retry: Optional[Any] = None

        logger.debug(
            f"HttpClient: adapter={self._adapter.name}, base_url={self._config.base_url}"
        )

    async def request(self, config: RequestConfig) -> HttpResponse[Any]:
        """Make a generic HTTP request."""
        if self._closed:
            raise RuntimeError("Client has been closed")
        return await self._pipeline.request(config)

    def _with(self, url: str, method: str, config: Optional[RequestConfig], **changes: Any) -> RequestConfig:
        base = config if config is not None else RequestConfig()
        return replace(base, url=url, method=method, **changes)

    async def get(self, url: str, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """GET request."""
        return await self.request(self._with(url, "GET", config))

    async def head(self, url: str, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """HEAD request."""
        return await self.request(self._with(url, "HEAD", config))

    async def options(self, url: str, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """OPTIONS request."""
        return await self.request(self._with(url, "OPTIONS", config))

    async def delete(self, url: str, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """DELETE request."""
        return await self.request(self._with(url, "DELETE", config))

    async def post(self, url: str, data: Any = None, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """POST request."""
        return await self.request(self._with(url, "POST", config, data=data))

    async def put(self, url: str, data: Any = None, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """PUT request."""
        return await self.request(self._with(url, "PUT", config, data=data))

    async def patch(self, url: str, data: Any = None, config: Optional[RequestConfig] = None) -> HttpResponse[Any]:
        """PATCH request."""
        return await self.request(self._with(url, "PATCH", config, data=data))

    # Interceptors

    @staticmethod
    def _as_interceptor(
        on_fulfilled: Union[Interceptor, FulfilledHandler, None],
        on_rejected: Optional[RejectedHandler],
    ) -> Interceptor:
        if isinstance(on_fulfilled, Interceptor):
            return on_fulfilled
        return Interceptor(on_fulfilled=on_fulfilled, on_rejected=on_rejected)

    def add_request_interceptor(
        self,
        on_fulfilled: Union[Interceptor, FulfilledHandler, None] = None,
        on_rejected: Optional[RejectedHandler] = None,
    ) -> int:
        """Register a request interceptor. Returns its id."""
        return self._request_interceptors.add(self._as_interceptor(on_fulfilled, on_rejected))

    def add_response_interceptor(
        self,
        on_fulfilled: Union[Interceptor, FulfilledHandler, None] = None,
        on_rejected: Optional[RejectedHandler] = None,
    ) -> int:
        """Register a response interceptor. Returns its id."""
        return self._response_interceptors.add(self._as_interceptor(on_fulfilled, on_rejected))

    def remove_interceptor(self, kind: InterceptorKind, interceptor_id: int) -> None:
        """Remove an interceptor by id. No-op when it is not registered."""
        if kind == "request":
            self._request_interceptors.remove(interceptor_id)
        elif kind == "response":
            self._response_interceptors.remove(interceptor_id)
        else:
            raise ValueError(f"Invalid interceptor kind: {kind!r}. Must be 'request' or 'response'")

    # Events

    def on(self, event: Union[EventType, str], handler: EventHandler) -> Callable[[], None]:
        return self._events.on(event, handler)

    def off(self, event: Union[EventType, str], handler: EventHandler) -> None:
        self._events.off(event, handler)

    def once(self, event: Union[EventType, str], handler: EventHandler) -> Callable[[], None]:
        return self._events.once(event, handler)

    # Configuration

    def create_cancel_token(self) -> CancelToken:
        return CancelToken()

    def get_defaults(self) -> ClientConfig:
        """Copy of the current client defaults, cache and retry included."""
        return replace(
            merge_client_config(self._config, None),
            cache=self._cache_manager.get_config(),
            retry=self._retry_manager.get_config(),
        )

    def set_defaults(self, config: ClientConfig) -> None:
        """
        Layer ``config`` on top of the current defaults.

        Takes effect for requests started afterwards. The adapter cannot be
        changed after construction.
        """
        if config.adapter is not None and config.adapter != self._config.adapter:
            raise ValueError("adapter cannot be changed after the client is created")
        merged = merge_client_config(self.get_defaults(), config)
        validate_client_config(merged)
        if config.cache is not None:
            self._cache_manager.update_config(config.cache)
        if config.retry is not None:
            self._retry_manager.update_config(config.retry)
        self._config = replace(merged, cache=None, retry=None)
        self._pipeline.defaults = self._config

    def get_adapter_info(self) -> AdapterInfo:
        return AdapterInfo(name=self._adapter.name, is_custom=self._is_custom_adapter)

    # Plugins

    def use(self, plugin: Plugin) -> "HttpClient":
        """Install ``plugin``. A second plugin with the same name is skipped."""
        if plugin.name in self._plugins:
            logger.warning(f"HttpClient.use: plugin '{plugin.name}' is already installed, skipping")
            return self
        plugin.install(self)
        self._plugins[plugin.name] = plugin
        logger.debug(f"HttpClient.use: installed plugin '{plugin.name}'")
        return self

    def has_plugin(self, name: str) -> bool:
        return name in self._plugins

    @property
    def plugins(self) -> List[str]:
        return list(self._plugins)

    # Internals exposed for plugins and integrations

    @property
    def adapter(self) -> AdapterPort:
        return self._adapter

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def cache_manager(self) -> CacheManager:
        return self._cache_manager

    @property
    def retry_manager(self) -> RetryManager:
        return self._retry_manager

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close the client and its adapter."""
        if self._closed:
            return
        self._closed = True
        await self._adapter.close()

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        await self.close()


def create_http_client(
    config: Optional[ClientConfig] = None,
    *,
    cache_store: Optional[CacheStore] = None,
    sleep: Callable[[float], Awaitable[None]] = async_sleep,
    **options: Any,
) -> HttpClient:
    """
    Create an HTTP client.

    ``options`` are ``ClientConfig`` fields layered on top of ``config``.

    Example:
        client = create_http_client(base_url="https://api.example.com", timeout=5)
    """
    if options:
        config = merge_client_config(config or ClientConfig(), ClientConfig(**options))
    return HttpClient(config, cache_store=cache_store, sleep=sleep)
