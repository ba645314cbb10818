"""
Request orchestration pipeline.
"""
import logging
import uuid
from typing import Any, Optional

from ..adapters.base import AdapterPort
from ..cache.manager import CacheManager
from ..cancel import cancellable_sleep
from ..config import ClientConfig, DEFAULT_CLIENT_CONFIG, merge_request_config
from ..errors import HttpError, normalize_error
from ..events import (
    CacheEventPayload,
    ErrorEventPayload,
    EventBus,
    EventType,
    RequestEventPayload,
    ResponseEventPayload,
    RetryEventPayload,
)
from ..interceptors.chain import InterceptorChain
from ..retry.manager import RetryManager
from ..types import HttpResponse, RequestConfig

logger = logging.getLogger("fetch_facade.pipeline")


class RequestPipeline:
    """
    Runs one logical request through every stage, in order:

    1. merge the call's config onto the client defaults
    2. emit ``request``
    3. request interceptors (registration order)
    4. cache lookup for cacheable methods when caching is enabled; a hit
       emits ``cache-hit`` and returns at once, a miss emits ``cache-miss``
    5. transport call wrapped by the retry manager
    6. response interceptors (registration order); a transport failure goes
       through their ``on_rejected`` handlers and may be recovered
    7. cache write of the post-interceptor response
    8. emit ``response`` and return

    Any unrecovered failure is normalized to ``HttpError``, emitted as
    ``error`` and raised.

    The interceptor chains and the event bus are shared with the owning
    client and are read fresh on every run.
    """

    def __init__(
        self,
        adapter: AdapterPort,
        request_interceptors: InterceptorChain,
        response_interceptors: InterceptorChain,
        cache: CacheManager,
        retry: RetryManager,
        events: EventBus,
        defaults: Optional[ClientConfig] = None,
    ) -> None:
        self.adapter = adapter
        self.request_interceptors = request_interceptors
        self.response_interceptors = response_interceptors
        self.cache = cache
        self.retry = retry
        self.events = events
        self.defaults = defaults if defaults is not None else DEFAULT_CLIENT_CONFIG

    async def request(self, config: RequestConfig) -> HttpResponse[Any]:
        merged = merge_request_config(self.defaults, config)
        if merged.request_id is None:
            merged.request_id = uuid.uuid4().hex
        current = merged

        self.events.emit(EventType.REQUEST, RequestEventPayload(config=merged))
        logger.debug(f"RequestPipeline.request: {merged.method} {merged.url} ({merged.request_id})")

        try:
            processed = await self.request_interceptors.run_request(merged)
            if not isinstance(processed, RequestConfig):
                raise TypeError(
                    f"Request interceptor returned {type(processed).__name__}, expected RequestConfig"
                )
            current = processed

            use_cache = self.cache.applies_to(processed)
            if use_cache:
                key = self.cache.generate_key(processed)
                cached = await self.cache.get(processed)
                if cached is not None:
                    self.events.emit(
                        EventType.CACHE_HIT,
                        CacheEventPayload(config=processed, key=key, response=cached),
                    )
                    return cached
                self.events.emit(EventType.CACHE_MISS, CacheEventPayload(config=processed, key=key))

            response: Optional[HttpResponse[Any]] = None
            failure: Optional[HttpError] = None
            try:
                response = await self.retry.execute_with_retry(
                    lambda: self._attempt(processed),
                    processed.retry,
                    on_retry=lambda error, attempt, delay: self.events.emit(
                        EventType.RETRY,
                        RetryEventPayload(
                            config=processed, error=error, attempt=attempt, delay_seconds=delay
                        ),
                    ),
                    sleep=lambda seconds: cancellable_sleep(
                        seconds, processed.cancel_token, processed, self.retry.sleep
                    ),
                )
            except HttpError as e:
                failure = e

            final = await self.response_interceptors.run_response(response, failure)

            if use_cache and isinstance(final, HttpResponse) and self.cache.should_store(processed, final):
                await self.cache.set(processed, final)

            self.events.emit(EventType.RESPONSE, ResponseEventPayload(config=processed, response=final))
            return final
        except Exception as e:
            error = normalize_error(e, current)
            logger.debug(f"RequestPipeline.request: {current.request_id} failed with {error.code}")
            self.events.emit(EventType.ERROR, ErrorEventPayload(config=current, error=error))
            if error is e:
                raise
            raise error from e

    async def _attempt(self, config: RequestConfig) -> HttpResponse[Any]:
        """One transport call. Every failure leaves as ``HttpError``."""
        token = config.cancel_token
        if token is not None:
            token.throw_if_requested(config)
        try:
            return await self.adapter.request(config)
        except HttpError:
            raise
        except Exception as e:
            raise normalize_error(e, config) from e
