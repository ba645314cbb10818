"""
Cooperative request cancellation.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from .errors import DEFAULT_CANCEL_REASON, HttpError, create_cancel_error
from .types import RequestConfig

logger = logging.getLogger("fetch_facade.cancel")

CancelCallback = Callable[[str], None]


class CancelToken:
    """
    One-shot cancellation signal shared between a caller and a transport.

    ``cancel()`` is idempotent: the first call records the reason and
    notifies subscribers, later calls do nothing. Transports either poll
    ``is_cancelled`` / ``throw_if_requested()`` or subscribe with
    ``on_cancel``.

    Example:
        token = CancelToken()
        task = asyncio.create_task(client.get("/slow", RequestConfig(cancel_token=token)))
        token.cancel("user navigated away")
        await task  # raises HttpError(is_cancel_error=True)
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._callbacks: List[CancelCallback] = []
        self._event = asyncio.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Trigger the token. Subsequent calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason or DEFAULT_CANCEL_REASON
        self._event.set()

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(self._reason)
            except Exception:
                logger.exception("CancelToken: on_cancel callback raised")

    def on_cancel(self, callback: CancelCallback) -> Callable[[], None]:
        """
        Run ``callback(reason)`` when the token is cancelled.

        Runs immediately if the token is already cancelled.

        Returns:
            Function that removes the callback
        """
        if self._cancelled:
            callback(self._reason or DEFAULT_CANCEL_REASON)
            return lambda: None

        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def to_error(self, config: Optional[RequestConfig] = None) -> HttpError:
        return create_cancel_error(self._reason, config)

    def throw_if_requested(self, config: Optional[RequestConfig] = None) -> None:
        """Raise the cancel ``HttpError`` if the token has been triggered."""
        if self._cancelled:
            raise self.to_error(config)

    async def wait(self, config: Optional[RequestConfig] = None) -> None:
        """Block until cancelled, then raise the cancel ``HttpError``."""
        await self._event.wait()
        raise self.to_error(config)

    @classmethod
    def combine(cls, *tokens: "CancelToken") -> "CancelToken":
        """A token cancelled as soon as any of ``tokens`` is."""
        combined = cls()
        for token in tokens:
            token.on_cancel(combined.cancel)
        return combined

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self._cancelled}, reason={self._reason!r})"


def create_cancel_token() -> CancelToken:
    """Create a new cancel token."""
    return CancelToken()


def create_timeout_token(seconds: float, reason: Optional[str] = None) -> CancelToken:
    """
    Create a token that cancels itself after ``seconds``.

    Must be called from inside a running event loop.
    """
    loop = asyncio.get_running_loop()
    token = CancelToken()
    message = reason or f"Timeout of {seconds}s exceeded"
    handle = loop.call_later(seconds, token.cancel, message)
    token.on_cancel(lambda _reason: handle.cancel())
    return token


async def cancellable_sleep(
    seconds: float,
    token: Optional[CancelToken],
    config: Optional[RequestConfig] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Run ``sleep(seconds)``; raise the cancel error early if ``token`` fires."""
    if token is None:
        await sleep(seconds)
        return

    token.throw_if_requested(config)
    sleeper = asyncio.ensure_future(sleep(seconds))
    waiter = asyncio.ensure_future(token.wait(config))
    try:
        done, _ = await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        if waiter in done:
            waiter.result()
    finally:
        for task in (sleeper, waiter):
            if not task.done():
                task.cancel()
