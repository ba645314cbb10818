"""
Request/response interceptor chains.
"""
import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Tuple, TypeVar, Union

logger = logging.getLogger("fetch_facade.interceptors")

T = TypeVar("T")

FulfilledHandler = Callable[[Any], Union[Any, Awaitable[Any]]]
RejectedHandler = Callable[[BaseException], Union[Any, Awaitable[Any]]]


@dataclass
class Interceptor:
    """
    A request- or response-stage transform.

    ``on_fulfilled`` receives the previous value and returns the next one;
    when omitted the value passes through. ``on_rejected`` receives the
    error from an earlier stage and may return a value to recover or raise;
    when omitted the error passes through. Both may be sync or async.
    """

    on_fulfilled: Optional[FulfilledHandler] = None
    on_rejected: Optional[RejectedHandler] = None


async def maybe_await(value: Union[T, Awaitable[T]]) -> T:
    """Await ``value`` if it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def new_id_counter() -> Iterator[int]:
    """Monotonic interceptor ids shared by both chains of one client."""
    return itertools.count(1)


class InterceptorChain:
    """
    Ordered interceptor registry.

    Entries keep registration order; ids are never reused. Runs iterate a
    ``snapshot()`` taken at the start of the run, so adding or removing an
    interceptor only affects runs that start afterwards.
    """

    def __init__(self, ids: Optional[Iterator[int]] = None) -> None:
        self._ids = ids if ids is not None else new_id_counter()
        self._entries: List[Tuple[int, Interceptor]] = []

    def add(self, interceptor: Interceptor) -> int:
        """Register ``interceptor``. Returns its id."""
        interceptor_id = next(self._ids)
        self._entries.append((interceptor_id, interceptor))
        return interceptor_id

    def remove(self, interceptor_id: int) -> bool:
        """Remove by id. Returns False (and does nothing) when absent."""
        for index, (entry_id, _) in enumerate(self._entries):
            if entry_id == interceptor_id:
                del self._entries[index]
                return True
        return False

    def snapshot(self) -> List[Interceptor]:
        return [interceptor for _, interceptor in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(self.snapshot())

    async def run_request(self, value: Any) -> Any:
        """
        Pass a request config through every interceptor in order.

        If an ``on_fulfilled`` raises, the same interceptor's ``on_rejected``
        may recover with a replacement value; otherwise the error propagates
        and the rest of the chain is skipped.
        """
        for interceptor in self.snapshot():
            if interceptor.on_fulfilled is None:
                continue
            try:
                value = await maybe_await(interceptor.on_fulfilled(value))
            except Exception as error:
                if interceptor.on_rejected is None:
                    raise
                logger.debug(f"InterceptorChain.run_request: recovering {type(error).__name__}")
                value = await maybe_await(interceptor.on_rejected(error))
        return value

    async def run_response(self, value: Any = None, error: Optional[BaseException] = None) -> Any:
        """
        Pass a response (or a failure) through every interceptor in order.

        Each step holds either a value or an error. A value goes to
        ``on_fulfilled``; an error goes to ``on_rejected``, which may return
        a value to recover. An error left at the end of the chain is raised.
        """
        for interceptor in self.snapshot():
            handler = interceptor.on_fulfilled if error is None else interceptor.on_rejected
            if handler is None:
                continue
            try:
                value = await maybe_await(handler(value if error is None else error))
                error = None
            except Exception as next_error:
                error = next_error

        if error is not None:
            raise error
        return value
