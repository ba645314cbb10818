"""
Ready-made interceptors: auth header injection, base URL defaulting and
rich request/response logging.
"""
import logging
import re
from typing import Awaitable, Callable, Optional, Pattern, Sequence, Tuple, Union

from rich.console import Console

from ..console import console, format_body, mask_headers, mask_url, print_panel, print_syntax_panel
from ..errors import HttpError
from ..request_builder import build_url, is_absolute_url
from ..types import HttpResponse, RequestConfig
from .chain import Interceptor, maybe_await

logger = logging.getLogger("fetch_facade.interceptors")

TokenGetter = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]


def create_auth_interceptor(
    get_token: TokenGetter,
    token_type: str = "Bearer",
    header_name: str = "Authorization",
    url_patterns: Optional[Sequence[Union[str, Pattern[str]]]] = None,
) -> Interceptor:
    """
    Request interceptor that adds ``<token_type> <token>`` to ``header_name``.

    When ``url_patterns`` is given only matching URLs get the header. A
    failing or empty ``get_token`` leaves the request unauthenticated.
    """
    patterns = [re.compile(p) if isinstance(p, str) else p for p in (url_patterns or [])]

    async def add_auth(config: RequestConfig) -> RequestConfig:
        if patterns and not any(p.search(config.url) for p in patterns):
            return config

        try:
            token = await maybe_await(get_token())
        except Exception as e:
            logger.warning(f"create_auth_interceptor: failed to get auth token: {e}")
            return config

        if not token:
            return config
        value = f"{token_type} {token}" if token_type else token
        return config.copy(headers={**(config.headers or {}), header_name: value})

    return Interceptor(on_fulfilled=add_auth)


def create_base_url_interceptor(base_url: str) -> Interceptor:
    """Request interceptor that fills in ``base_url`` for relative URLs."""

    def apply_base_url(config: RequestConfig) -> RequestConfig:
        if config.base_url or is_absolute_url(config.url):
            return config
        return config.copy(base_url=base_url)

    return Interceptor(on_fulfilled=apply_base_url)


def create_log_interceptors(
    log_requests: bool = True,
    log_responses: bool = True,
    log_errors: bool = True,
    target: Optional[Console] = None,
) -> Tuple[Interceptor, Interceptor]:
    """
    Request and response interceptors that dump traffic as rich panels.

    Authorization-style headers are masked. Errors are printed and then
    re-raised unchanged.

    Returns:
        (request_interceptor, response_interceptor)
    """

    def on_request(config: RequestConfig) -> RequestConfig:
        if log_requests:
            url = mask_url(build_url(config.base_url, config.url, config.params))
            print_panel(
                f"[bold cyan]{config.resolved_method}[/bold cyan] {url}",
                title="[bold blue]Request[/bold blue]",
                target=target,
            )
            (target or console).print("[bold]Headers:[/bold]", mask_headers(config.headers))
            if config.data is not None:
                print_syntax_panel(
                    format_body(config.data), title="[bold]Request Body[/bold]", target=target
                )
        return config

    def on_response(response: HttpResponse) -> HttpResponse:
        if log_responses:
            color = "green" if response.ok else "red"
            url = ""
            if response.config is not None:
                url = mask_url(build_url(response.config.base_url, response.config.url))
            print_panel(
                f"[bold {color}]{response.status}[/bold {color}] {response.status_text}",
                title=f"[bold blue]Response[/bold blue] ({url})",
                target=target,
            )
            if response.data is not None and not isinstance(response.data, (bytes, bytearray)):
                print_syntax_panel(
                    format_body(response.data), title="[bold]Response Body[/bold]", target=target
                )
        return response

    def on_error(error: BaseException) -> HttpResponse:
        if log_errors:
            code = error.code if isinstance(error, HttpError) else type(error).__name__
            print_panel(
                f"[bold red]{code}[/bold red] {error}",
                title="[bold red]Request Failed[/bold red]",
                target=target,
            )
        raise error

    return (
        Interceptor(on_fulfilled=on_request, on_rejected=on_error),
        Interceptor(on_fulfilled=on_response, on_rejected=on_error),
    )
