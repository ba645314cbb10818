"""
Unified async HTTP client facade.

One request API (``HttpClient``) over a pluggable transport, with
interceptors, response caching, retry with backoff, cooperative
cancellation and pipeline events.
"""
from .types import (
    AdapterInfo,
    HttpMethod,
    HttpResponse,
    Plugin,
    RequestConfig,
    ResponseType,
)
from .errors import (
    ErrorCode,
    HttpError,
    create_cancel_error,
    create_network_error,
    create_status_error,
    create_timeout_error,
    normalize_error,
)
from .events import (
    CacheEventPayload,
    ErrorEventPayload,
    EventBus,
    EventType,
    RequestEventPayload,
    ResponseEventPayload,
    RetryEventPayload,
)
from .cancel import CancelToken, create_cancel_token, create_timeout_token
from .interceptors import (
    Interceptor,
    InterceptorChain,
    create_auth_interceptor,
    create_base_url_interceptor,
    create_log_interceptors,
)
from .cache import (
    CacheConfig,
    CacheManager,
    CacheStore,
    MemoryCacheStore,
    RedisCacheStore,
    generate_cache_key,
)
from .retry import (
    BackoffStrategy,
    RetryConfig,
    RetryManager,
    compute_backoff,
    create_custom_retry_config,
    create_exponential_retry_config,
    create_fixed_retry_config,
    create_linear_retry_config,
)
from .adapters import AdapterPort, HttpxAdapter, create_adapter, register_adapter
from .config import (
    ClientConfig,
    DEFAULT_CLIENT_CONFIG,
    client_config_from_mapping,
    merge_client_config,
    merge_headers,
    merge_request_config,
    validate_client_config,
)
from .core import HttpClient, RequestPipeline, create_http_client
from .plugins import create_cache_plugin, create_logging_plugin, create_retry_plugin
from .reactive import (
    RequestHandle,
    RequestState,
    use_delete,
    use_get,
    use_patch,
    use_post,
    use_put,
    use_request,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "AdapterInfo",
    "HttpMethod",
    "HttpResponse",
    "Plugin",
    "RequestConfig",
    "ResponseType",
    # Errors
    "ErrorCode",
    "HttpError",
    "create_cancel_error",
    "create_network_error",
    "create_status_error",
    "create_timeout_error",
    "normalize_error",
    # Events
    "EventBus",
    "EventType",
    "RequestEventPayload",
    "ResponseEventPayload",
    "ErrorEventPayload",
    "RetryEventPayload",
    "CacheEventPayload",
    # Cancellation
    "CancelToken",
    "create_cancel_token",
    "create_timeout_token",
    # Interceptors
    "Interceptor",
    "InterceptorChain",
    "create_auth_interceptor",
    "create_base_url_interceptor",
    "create_log_interceptors",
    # Cache
    "CacheConfig",
    "CacheManager",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "generate_cache_key",
    # Retry
    "BackoffStrategy",
    "RetryConfig",
    "RetryManager",
    "compute_backoff",
    "create_fixed_retry_config",
    "create_linear_retry_config",
    "create_exponential_retry_config",
    "create_custom_retry_config",
    # Adapters
    "AdapterPort",
    "HttpxAdapter",
    "create_adapter",
    "register_adapter",
    # Config
    "ClientConfig",
    "DEFAULT_CLIENT_CONFIG",
    "client_config_from_mapping",
    "merge_client_config",
    "merge_headers",
    "merge_request_config",
    "validate_client_config",
    # Client
    "HttpClient",
    "RequestPipeline",
    "create_http_client",
    # Plugins
    "create_cache_plugin",
    "create_logging_plugin",
    "create_retry_plugin",
    # Reactive
    "RequestHandle",
    "RequestState",
    "use_request",
    "use_get",
    "use_post",
    "use_put",
    "use_patch",
    "use_delete",
]
