"""
httpx transport adapter.
"""
import asyncio
import logging
import os
import uuid
from typing import Any, Dict, Optional

import httpx

from ..console import mask_url
from ..errors import (
    DEFAULT_CANCEL_REASON,
    create_cancel_error,
    create_network_error,
    create_status_error,
    create_timeout_error,
)
from ..request_builder import build_body, build_headers, build_url
from ..types import HttpResponse, RequestConfig
from .base import AdapterPort

logger = logging.getLogger("fetch_facade.adapters.httpx")


def is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    return node_tls == "0" or ssl_cert_verify == "0"


async def parse_response_body(response: httpx.Response, response_type: Optional[str]) -> Any:
    """Decode ``response`` according to ``response_type``."""
    if response_type == "stream":
        return response.aiter_bytes()
    if response_type in ("blob", "arraybuffer"):
        return response.content
    if response_type == "text":
        return response.text

    # json (default): fall back to text for non-JSON bodies
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxAdapter(AdapterPort):
    """
    Transport backed by ``httpx.AsyncClient``.

    Each request runs in its own task so it can be aborted by the request's
    cancel token or by ``cancel(request_id)``. An injected client is never
    closed by the adapter.

    Example:
        adapter = HttpxAdapter()
        response = await adapter.request(RequestConfig(url="https://api.example.com/users"))
        await adapter.close()
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        name: str = "httpx",
        **client_kwargs: Any,
    ) -> None:
        self._name = name
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            # NODE_TLS_REJECT_UNAUTHORIZED=0 or SSL_CERT_VERIFY=0 will disable SSL verification
            client_kwargs.setdefault("verify", not is_ssl_verify_disabled_by_env())
            client_kwargs.setdefault("follow_redirects", True)
            self._client = httpx.AsyncClient(**client_kwargs)
            self._owns_client = True
        self._inflight: Dict[str, "asyncio.Task[HttpResponse[Any]]"] = {}
        self._cancel_reasons: Dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def request(self, config: RequestConfig) -> HttpResponse[Any]:
        token = config.cancel_token
        if token is not None:
            token.throw_if_requested(config)

        request_id = config.request_id or uuid.uuid4().hex
        task = asyncio.ensure_future(self._send(config))
        self._inflight[request_id] = task
        unsubscribe = token.on_cancel(lambda _reason: task.cancel()) if token is not None else None

        try:
            return await task
        except asyncio.CancelledError:
            if token is not None and token.is_cancelled:
                logger.debug(f"HttpxAdapter.request: {request_id} cancelled by token")
                raise create_cancel_error(token.reason, config) from None
            if request_id in self._cancel_reasons:
                logger.debug(f"HttpxAdapter.request: {request_id} cancelled by adapter")
                raise create_cancel_error(self._cancel_reasons[request_id], config) from None
            raise
        finally:
            if unsubscribe is not None:
                unsubscribe()
            self._inflight.pop(request_id, None)
            self._cancel_reasons.pop(request_id, None)

    async def _send(self, config: RequestConfig) -> HttpResponse[Any]:
        method = config.resolved_method
        url = build_url(config.base_url, config.url, config.params)
        headers = build_headers(config)
        content = build_body(config.data, headers)
        timeout = config.timeout if config.timeout is not None else httpx.USE_CLIENT_DEFAULT
        stream = config.response_type == "stream"

        logger.debug(f"HttpxAdapter._send: {method} {mask_url(url)}")

        try:
            request = self._client.build_request(
                method, url, headers=headers, content=content, timeout=timeout
            )
            response = await self._client.send(request, stream=stream)
        except httpx.TimeoutException as e:
            raise create_timeout_error(config, config.timeout, cause=e) from e
        except httpx.TransportError as e:
            raise create_network_error(config, cause=e) from e

        logger.debug(f"HttpxAdapter._send: {method} {mask_url(url)} -> {response.status_code}")

        if stream and not response.is_success:
            await response.aread()
            await response.aclose()
            data = await parse_response_body(response, "text")
        else:
            data = await parse_response_body(response, config.response_type)

        result = HttpResponse(
            data=data,
            status=response.status_code,
            status_text=response.reason_phrase or "",
            headers=dict(response.headers),
            config=config,
            raw=response,
        )
        if not result.ok:
            raise create_status_error(result)
        return result

    def cancel(self, request_id: Optional[str] = None) -> None:
        if request_id is None:
            targets = list(self._inflight.items())
        elif request_id in self._inflight:
            targets = [(request_id, self._inflight[request_id])]
        else:
            return

        for target_id, task in targets:
            self._cancel_reasons[target_id] = DEFAULT_CANCEL_REASON
            task.cancel()

    def in_flight(self) -> int:
        """Number of requests currently running."""
        return len(self._inflight)

    async def close(self) -> None:
        self.cancel()
        if self._owns_client:
            await self._client.aclose()


def create_httpx_adapter(client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any) -> HttpxAdapter:
    """Create an httpx adapter."""
    return HttpxAdapter(client, **client_kwargs)
