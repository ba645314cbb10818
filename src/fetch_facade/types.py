"""
Type definitions for fetch_facade.
"""
from dataclasses import dataclass, field, replace
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    Literal,
    Optional,
    Protocol,
    TypeVar,
    Union,
    runtime_checkable,
)

if TYPE_CHECKING:
    from .cancel import CancelToken
    from .cache.types import CacheConfig
    from .retry.types import RetryConfig


T = TypeVar("T")

# HTTP methods
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# How the transport should decode the response body
ResponseType = Literal["json", "text", "blob", "arraybuffer", "stream"]

RESPONSE_TYPES = ("json", "text", "blob", "arraybuffer", "stream")

# Interceptor chain selector for remove_interceptor()
InterceptorKind = Literal["request", "response"]

QueryParams = Dict[str, Union[str, int, float, bool, None]]


@dataclass
class RequestConfig:
    """One logical request.

    Every field except ``url`` is optional; ``None`` means "inherit from the
    client defaults" when the config goes through ``merge_request_config``.
    """

    url: str = ""
    method: Optional[HttpMethod] = None
    base_url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    params: Optional[QueryParams] = None
    data: Any = None
    timeout: Optional[float] = None
    response_type: Optional[ResponseType] = None
    with_credentials: Optional[bool] = None
    cache: Optional["CacheConfig"] = None
    retry: Optional["RetryConfig"] = None
    cancel_token: Optional["CancelToken"] = None
    request_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def resolved_method(self) -> str:
        """Upper-cased method, defaulting to GET."""
        return (self.method or "GET").upper()

    def copy(self, **changes: Any) -> "RequestConfig":
        """Return a shallow copy with ``changes`` applied."""
        return replace(self, **changes)


@dataclass(frozen=True)
class HttpResponse(Generic[T]):
    """A completed request. Immutable once constructed."""

    data: T
    status: int
    status_text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    config: Optional[RequestConfig] = None
    raw: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.status, int) or not 100 <= self.status <= 599:
            raise ValueError(f"Invalid HTTP status: {self.status!r}")
        object.__setattr__(
            self, "headers", {str(k).lower(): v for k, v in (self.headers or {}).items()}
        )

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form used by out-of-process cache stores.

        The raw transport handle and non-serializable config parts are dropped.
        """
        config = self.config
        return {
            "data": self.data,
            "status": self.status,
            "status_text": self.status_text,
            "headers": dict(self.headers),
            "config": {
                "url": config.url,
                "method": config.resolved_method,
                "base_url": config.base_url,
                "params": config.params,
            }
            if config is not None
            else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "HttpResponse[Any]":
        """Rebuild a response produced by ``to_dict``."""
        config_data = payload.get("config")
        config = RequestConfig(**config_data) if config_data else None
        return cls(
            data=payload.get("data"),
            status=payload["status"],
            status_text=payload.get("status_text", ""),
            headers=payload.get("headers") or {},
            config=config,
        )


@dataclass(frozen=True)
class AdapterInfo:
    """Which transport a client is bound to."""

    name: str
    is_custom: bool


@runtime_checkable
class Plugin(Protocol):
    """Plugin contract: receives the live client on install."""

    name: str

    def install(self, client: Any) -> None:
        """Install the plugin into ``client``."""
        ...


EventHandler = Callable[[Any], None]
