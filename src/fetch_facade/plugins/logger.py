"""
Logging plugin: rich request/response panels plus retry and cache notices.
"""
import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from rich.console import Console

from ..console import mask_url, print_panel
from ..events import CacheEventPayload, EventType, RetryEventPayload
from ..interceptors.common import create_log_interceptors

if TYPE_CHECKING:
    from ..core.client import HttpClient

logger = logging.getLogger("fetch_facade.plugins.logging")


class LoggingPlugin:
    """Dump traffic of a client to a rich console."""

    name = "logging"

    def __init__(
        self,
        log_requests: bool = True,
        log_responses: bool = True,
        log_errors: bool = True,
        log_retries: bool = True,
        log_cache: bool = False,
        target: Optional[Console] = None,
    ) -> None:
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_errors = log_errors
        self.log_retries = log_retries
        self.log_cache = log_cache
        self.target = target
        self.interceptor_ids: List[int] = []
        self._unsubscribers: List[Callable[[], None]] = []

    def install(self, client: "HttpClient") -> None:
        request_interceptor, response_interceptor = create_log_interceptors(
            log_requests=self.log_requests,
            log_responses=self.log_responses,
            log_errors=self.log_errors,
            target=self.target,
        )
        self.interceptor_ids = [
            client.add_request_interceptor(request_interceptor),
            client.add_response_interceptor(response_interceptor),
        ]

        if self.log_retries:
            self._unsubscribers.append(client.on(EventType.RETRY, self._on_retry))
        if self.log_cache:
            self._unsubscribers.append(client.on(EventType.CACHE_HIT, self._on_cache("hit")))
            self._unsubscribers.append(client.on(EventType.CACHE_MISS, self._on_cache("miss")))

    def uninstall(self, client: "HttpClient") -> None:
        """Remove everything ``install`` registered."""
        client.remove_interceptor("request", self.interceptor_ids[0])
        client.remove_interceptor("response", self.interceptor_ids[1])
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_retry(self, payload: RetryEventPayload) -> None:
        logger.warning(
            f"retry {payload.attempt} for {payload.config.method} {mask_url(payload.config.url)} "
            f"in {payload.delay_seconds}s ({payload.error.code})"
        )
        print_panel(
            f"[bold yellow]Retry {payload.attempt}[/bold yellow] after {payload.error.code}, "
            f"waiting {payload.delay_seconds}s",
            title="[bold yellow]Retry[/bold yellow]",
            target=self.target,
        )

    def _on_cache(self, outcome: str) -> Callable[[CacheEventPayload], None]:
        def handler(payload: CacheEventPayload) -> None:
            logger.info(f"cache {outcome}: {payload.key}")

        return handler


def create_logging_plugin(
    log_requests: bool = True,
    log_responses: bool = True,
    log_errors: bool = True,
    log_retries: bool = True,
    log_cache: bool = False,
    target: Optional[Console] = None,
) -> LoggingPlugin:
    """Create the logging plugin."""
    return LoggingPlugin(
        log_requests=log_requests,
        log_responses=log_responses,
        log_errors=log_errors,
        log_retries=log_retries,
        log_cache=log_cache,
        target=target,
    )
