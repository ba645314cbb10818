"""
Adapter registry and factory.
"""
import logging
from typing import Any, Callable, Dict, List, Union

from .base import AdapterPort
from .httpx_adapter import HttpxAdapter

logger = logging.getLogger("fetch_facade.adapters")

AdapterFactory = Callable[..., AdapterPort]

# "fetch" is accepted as an alias so configs written for the browser client work unchanged
_ADAPTERS: Dict[str, AdapterFactory] = {
    "httpx": HttpxAdapter,
    "fetch": HttpxAdapter,
}


def register_adapter(name: str, factory: AdapterFactory) -> None:
    """Register (or replace) a named adapter factory."""
    if not name:
        raise ValueError("Adapter name must be a non-empty string")
    _ADAPTERS[name.lower()] = factory
    logger.debug(f"register_adapter: registered '{name}'")


def unregister_adapter(name: str) -> None:
    _ADAPTERS.pop(name.lower(), None)


def get_available_adapters() -> List[str]:
    """Names accepted by ``create_adapter``."""
    return sorted(_ADAPTERS)


def create_adapter(adapter: Union[str, AdapterPort] = "httpx", **kwargs: Any) -> AdapterPort:
    """
    Resolve an adapter name or instance.

    Args:
        adapter: Registered adapter name, or an ``AdapterPort`` instance
            which is returned as-is
        **kwargs: Passed to the adapter factory

    Returns:
        The adapter instance

    Raises:
        ValueError: Unknown adapter name
        TypeError: Object that does not implement ``AdapterPort``
    """
    if isinstance(adapter, AdapterPort):
        return adapter

    if isinstance(adapter, str):
        factory = _ADAPTERS.get(adapter.lower())
        if factory is None:
            raise ValueError(
                f"Unknown adapter '{adapter}'. Available: {', '.join(get_available_adapters())}"
            )
        instance = factory(**kwargs)
        if not instance.is_supported():
            raise ValueError(f"Adapter '{adapter}' is not supported in this environment")
        return instance

    raise TypeError(f"Expected an adapter name or AdapterPort instance, got {type(adapter).__name__}")
