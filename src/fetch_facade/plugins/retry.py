"""
Retry plugin.
"""
import logging
from typing import TYPE_CHECKING, Optional

from ..config import ClientConfig
from ..retry.config import merge_retry_config
from ..retry.types import RetryConfig

if TYPE_CHECKING:
    from ..core.client import HttpClient

logger = logging.getLogger("fetch_facade.plugins.retry")


class RetryNamespace:
    """Helpers exposed as ``client.retry``."""

    def __init__(self, client: "HttpClient") -> None:
        self._client = client

    def update_config(self, config: RetryConfig) -> None:
        self._client.set_defaults(ClientConfig(retry=config))

    def get_config(self) -> RetryConfig:
        return self._client.get_defaults().retry


class RetryPlugin:
    """Apply a retry policy to every request of a client."""

    name = "retry"

    def __init__(self, config: Optional[RetryConfig] = None) -> None:
        # Installing the plugin without options still retries
        self.config = merge_retry_config(RetryConfig(retries=3), config)

    def install(self, client: "HttpClient") -> None:
        client.set_defaults(ClientConfig(retry=self.config))
        client.retry = RetryNamespace(client)
        logger.debug(
            f"RetryPlugin.install: retries={self.config.retries}, strategy={self.config.strategy}"
        )


def create_retry_plugin(config: Optional[RetryConfig] = None) -> RetryPlugin:
    """
    Create the retry plugin.

    Example:
        client.use(create_retry_plugin(create_exponential_retry_config(retries=5)))
    """
    return RetryPlugin(config)
