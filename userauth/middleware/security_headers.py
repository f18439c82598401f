"""Security headers middleware (raw ASGI).

API responses carry bearer tokens and profile data, so besides the usual
hardening headers every response is marked non-cacheable. Headers the
endpoint already set are left untouched.
"""

from typing import Callable

API_SECURITY_HEADERS: tuple[tuple[str, str], ...] = (
    ("Cache-Control", "no-store"),
    ("Pragma", "no-cache"),
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "DENY"),
    ("Referrer-Policy", "no-referrer"),
    ("Strict-Transport-Security", "max-age=31536000; includeSubDomains"),
    ("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'"),
)


def SecurityHeadersMiddleware(
    app: Callable, headers: tuple[tuple[str, str], ...] = API_SECURITY_HEADERS
) -> Callable:
    """Add headers to every HTTP response unless already present."""
    encoded = [(name.lower().encode(), value.encode()) for name, value in headers]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        async def send_with_headers(message: dict) -> None:
            if message["type"] == "http.response.start":
                current = list(message.get("headers", []))
                present = {name.lower() for name, _ in current}
                current.extend(pair for pair in encoded if pair[0] not in present)
                message["headers"] = current
            await send(message)

        await app(scope, receive, send_with_headers)

    return asgi_app
