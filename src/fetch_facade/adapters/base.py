"""
Abstract base class for transport adapters.

Defines the interface every transport implements. The request pipeline only
talks to this interface, so swapping adapters never changes pipeline
behavior.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..types import HttpResponse, RequestConfig


class AdapterPort(ABC):
    """
    Abstract transport.

    Implementations perform the actual I/O for one fully resolved
    ``RequestConfig`` and must:
    - raise ``HttpError`` with ``code='HTTP_<status>'`` for non-2xx responses
    - observe ``config.cancel_token`` and abort the I/O when it fires,
      raising an ``HttpError`` with ``is_cancel_error=True``
    - return headers with lower-cased keys (``HttpResponse`` does this)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Adapter name (e.g., 'httpx').

        Returns:
            String identifier for this adapter.
        """
        ...

    @abstractmethod
    async def request(self, config: RequestConfig) -> HttpResponse[Any]:
        """
        Perform one request.

        Args:
            config: Fully merged request configuration.

        Returns:
            The response for a 2xx status.

        Raises:
            HttpError: For non-2xx responses, network failures, timeouts
                and cancellation.
        """
        ...

    @abstractmethod
    def cancel(self, request_id: Optional[str] = None) -> None:
        """
        Cancel one in-flight request, or all of them when ``request_id`` is
        None.
        """
        ...

    def is_supported(self) -> bool:
        """Whether this transport can run in the current environment."""
        return True

    async def close(self) -> None:
        """Release transport resources."""
        return None
