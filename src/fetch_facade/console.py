"""
Rich console helpers for request/response dumps.

Sensitive values are masked before anything is printed.
"""
import json
import re
from typing import Any, Dict, Iterable, Optional
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

console = Console()

SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key", "x-auth-token"}
)

SENSITIVE_PARAMS = frozenset({"key", "token", "secret", "password", "apikey", "api_key", "auth"})


def mask_sensitive(value: Optional[str], show_chars: int = 4, placeholder: str = "<none>") -> str:
    """
    Mask sensitive values for logging.

    Args:
        value: Value to mask
        show_chars: Number of characters to show before masking
        placeholder: Placeholder for null/empty values

    Returns:
        str: Masked value
    """
    if not value:
        return placeholder
    if len(value) <= show_chars:
        return "*" * len(value)
    return value[:show_chars] + "***"


def mask_url(url: Optional[str]) -> str:
    """Hide the password and sensitive query parameters of ``url``."""
    if not url:
        return "<none>"

    try:
        parsed = urlparse(url)
        netloc = parsed.netloc
        if parsed.password:
            netloc = netloc.replace(f":{parsed.password}@", ":****@")

        query = parsed.query
        if query:
            params = parse_qs(query, keep_blank_values=True)
            for param in SENSITIVE_PARAMS:
                if param in params:
                    params[param] = ["****"]
            query = urlencode(params, doseq=True)

        return urlunparse((parsed.scheme, netloc, parsed.path, parsed.params, query, parsed.fragment))
    except ValueError:
        # Regex fallback if URL parsing fails
        result = re.sub(r"(://[^:]+:)[^@]+(@)", r"\1****\2", url)
        return re.sub(
            r"([?&](key|token|secret|password|apikey|api_key|auth)=)[^&]+",
            r"\1****",
            result,
            flags=re.IGNORECASE,
        )


def mask_headers(
    headers: Optional[Dict[str, str]],
    sensitive: Iterable[str] = SENSITIVE_HEADERS,
    show_chars: int = 15,
) -> Dict[str, str]:
    """Copy of ``headers`` with credential-bearing values masked."""
    names = {name.lower() for name in sensitive}
    return {
        key: mask_sensitive(value, show_chars) if key.lower() in names else value
        for key, value in (headers or {}).items()
    }


def format_body(data: Any) -> str:
    """Format a body for display."""
    if isinstance(data, (bytes, bytearray)):
        return f"<{len(data)} bytes>"
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, indent=2, default=str)
    except (TypeError, ValueError):
        return repr(data)


def print_panel(content: Any, title: Optional[str] = None, target: Optional[Console] = None) -> None:
    """Print ``content`` inside a bordered panel."""
    (target or console).print(Panel(content, title=title, expand=False))


def print_syntax_panel(
    code: str,
    lexer: str = "json",
    title: Optional[str] = None,
    target: Optional[Console] = None,
    theme: str = "monokai",
) -> None:
    """Print syntax-highlighted ``code`` inside a panel."""
    syntax = Syntax(code, lexer, theme=theme, word_wrap=True)
    (target or console).print(Panel(syntax, title=title, expand=False))

