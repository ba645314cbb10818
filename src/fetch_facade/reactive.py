"""
Reactive request handles.

A ``RequestHandle`` wraps one endpoint of an ``HttpClient`` and keeps an
observable state (``data``, ``loading``, ``error``, ``finished``,
``cancelled``) that UI layers or long-running tasks can subscribe to.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

from .cancel import CancelToken
from .core.client import HttpClient
from .errors import HttpError, normalize_error
from .types import HttpResponse, RequestConfig

logger = logging.getLogger("fetch_facade.reactive")

T = TypeVar("T")

SUPERSEDED_REASON = "New request initiated"
USER_CANCEL_REASON = "Request cancelled by user"


@dataclass(frozen=True)
class RequestState(Generic[T]):
    """Snapshot of a handle's state."""

    data: Optional[T] = None
    loading: bool = False
    error: Optional[HttpError] = None
    finished: bool = False
    cancelled: bool = False


StateListener = Callable[[RequestState[Any]], None]
UrlSource = Union[str, Callable[[], str]]


class RequestHandle(Generic[T]):
    """
    Observable wrapper around repeated calls to one endpoint.

    Starting a new ``execute`` cancels the previous in-flight call; results
    of a superseded call never touch the state. ``dispose()`` (or leaving an
    ``async with`` block) cancels whatever is still running.

    Example:
        async with use_get(client, "/users/1", immediate=False) as users:
            users.subscribe(lambda state: print(state.loading, state.data))
            await users.execute()
    """

    def __init__(
        self,
        client: HttpClient,
        url: UrlSource,
        config: Optional[RequestConfig] = None,
        *,
        initial_data: Optional[T] = None,
        on_success: Optional[Callable[[T, HttpResponse[T]], None]] = None,
        on_error: Optional[Callable[[HttpError], None]] = None,
        on_finally: Optional[Callable[[], None]] = None,
        reset_on_execute: bool = True,
    ) -> None:
        self._client = client
        self._url = url
        self._config = config or RequestConfig()
        self._initial_data = initial_data
        self._on_success = on_success
        self._on_error = on_error
        self._on_finally = on_finally
        self._reset_on_execute = reset_on_execute

        self._state: RequestState[T] = RequestState(data=initial_data)
        self._listeners: List[StateListener] = []
        self._token: Optional[CancelToken] = None
        self._last_config: Optional[RequestConfig] = None
        self._generation = 0
        self.task: Optional["asyncio.Future[HttpResponse[T]]"] = None

    @property
    def state(self) -> RequestState[T]:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Call ``listener(state)`` after every state change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("RequestHandle: state listener raised")

    def _resolve_url(self) -> str:
        return self._url() if callable(self._url) else self._url

    async def execute(self, config: Optional[RequestConfig] = None) -> HttpResponse[T]:
        """
        Run the request, cancelling any previous in-flight call.

        Args:
            config: Overrides for this call; unset fields come from the
                handle's config

        Returns:
            The response

        Raises:
            HttpError: When the request fails or is cancelled
        """
        self._generation += 1
        generation = self._generation

        if self._token is not None:
            self._token.cancel(SUPERSEDED_REASON)
        token = self._client.create_cancel_token()
        self._token = token

        base = self._config if config is None else _overlay(self._config, config)
        request_config = replace(base, url=self._resolve_url(), cancel_token=token)
        self._last_config = config

        if self._reset_on_execute:
            self._update(loading=True, finished=False, error=None, cancelled=False)
        else:
            self._update(loading=True, finished=False, cancelled=False)

        try:
            response = await self._client.request(request_config)
        except Exception as e:
            error = normalize_error(e, request_config)
            if self._owns(generation):
                if error.is_cancel_error:
                    self._update(error=error, cancelled=True, loading=False, finished=True)
                else:
                    self._update(error=error, loading=False, finished=True)
                    if self._on_error is not None:
                        self._on_error(error)
                if self._on_finally is not None:
                    self._on_finally()
            if error is e:
                raise
            raise error from e

        if self._owns(generation):
            self._update(data=response.data, error=None, loading=False, finished=True)
            if self._on_success is not None:
                self._on_success(response.data, response)
            if self._on_finally is not None:
                self._on_finally()
        return response

    def _owns(self, generation: int) -> bool:
        # Superseded or user-cancelled calls leave the state alone
        return generation == self._generation and not self._state.cancelled

    def cancel(self) -> None:
        """Cancel the in-flight call, if any."""
        if self._token is None or self._token.is_cancelled:
            return
        self._token.cancel(USER_CANCEL_REASON)
        self._update(cancelled=True, loading=False, finished=True)

    def reset(self) -> None:
        """Return to the initial state. Does not cancel an in-flight call."""
        self._generation += 1
        self._token = None
        self._last_config = None
        self._update(
            data=self._initial_data, loading=False, error=None, finished=False, cancelled=False
        )

    async def refresh(self) -> HttpResponse[T]:
        """Re-run the last ``execute`` with the same overrides."""
        if self._token is None:
            raise RuntimeError("No previous request to refresh")
        return await self.execute(self._last_config)

    def start(self) -> "asyncio.Future[HttpResponse[T]]":
        """Schedule ``execute()`` on the running loop. The outcome lands in ``state``."""
        self.task = asyncio.ensure_future(self.execute())
        self.task.add_done_callback(_consume_outcome)
        return self.task

    def dispose(self) -> None:
        self.cancel()
        self._listeners.clear()

    async def __aenter__(self) -> "RequestHandle[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


def _consume_outcome(task: "asyncio.Future[Any]") -> None:
    # The error is already recorded in the handle state
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"RequestHandle: background request failed: {task.exception()}")


def _overlay(base: RequestConfig, override: RequestConfig) -> RequestConfig:
    """Per-call overrides on top of the handle config; None inherits."""
    changes = {
        name: value
        for name, value in vars(override).items()
        if value is not None and name not in ("url", "metadata")
    }
    changes["metadata"] = {**base.metadata, **override.metadata}
    if base.headers and override.headers:
        changes["headers"] = {**base.headers, **override.headers}
    return replace(base, **changes)


def use_request(
    client: HttpClient,
    url: UrlSource,
    config: Optional[RequestConfig] = None,
    *,
    immediate: bool = True,
    initial_data: Any = None,
    on_success: Optional[Callable[[Any, HttpResponse[Any]], None]] = None,
    on_error: Optional[Callable[[HttpError], None]] = None,
    on_finally: Optional[Callable[[], None]] = None,
    reset_on_execute: bool = True,
) -> RequestHandle[Any]:
    """
    Create a request handle.

    With ``immediate=True`` the first call is scheduled right away, which
    requires a running event loop.
    """
    handle: RequestHandle[Any] = RequestHandle(
        client,
        url,
        config,
        initial_data=initial_data,
        on_success=on_success,
        on_error=on_error,
        on_finally=on_finally,
        reset_on_execute=reset_on_execute,
    )
    if immediate:
        handle.start()
    return handle


def _with_method(config: Optional[RequestConfig], method: str, data: Any = None) -> RequestConfig:
    base = config or RequestConfig()
    if data is not None:
        return replace(base, method=method, data=data)
    return replace(base, method=method)


def use_get(client: HttpClient, url: UrlSource, config: Optional[RequestConfig] = None, **options: Any) -> RequestHandle[Any]:
    return use_request(client, url, _with_method(config, "GET"), **options)


def use_post(
    client: HttpClient, url: UrlSource, data: Any = None, config: Optional[RequestConfig] = None, **options: Any
) -> RequestHandle[Any]:
    options.setdefault("immediate", False)
    return use_request(client, url, _with_method(config, "POST", data), **options)


def use_put(
    client: HttpClient, url: UrlSource, data: Any = None, config: Optional[RequestConfig] = None, **options: Any
) -> RequestHandle[Any]:
    options.setdefault("immediate", False)
    return use_request(client, url, _with_method(config, "PUT", data), **options)


def use_patch(
    client: HttpClient, url: UrlSource, data: Any = None, config: Optional[RequestConfig] = None, **options: Any
) -> RequestHandle[Any]:
    options.setdefault("immediate", False)
    return use_request(client, url, _with_method(config, "PATCH", data), **options)


def use_delete(client: HttpClient, url: UrlSource, config: Optional[RequestConfig] = None, **options: Any) -> RequestHandle[Any]:
    options.setdefault("immediate", False)
    return use_request(client, url, _with_method(config, "DELETE"), **options)
