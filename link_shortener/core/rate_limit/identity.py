"""Client identification for rate limiting."""

import ipaddress

from starlette.types import Scope

from link_shortener.core.rate_limit.limiter import UNKNOWN_IDENTITY


def client_identity(scope: Scope) -> str:
    """Identify clients by IP address for rate limiting.

    The first address in ``X-Forwarded-For`` wins when it is a valid IP,
    otherwise the socket peer address is used. Clients that cannot be
    identified share the ``"unknown"`` identity.

    Args:
        scope: ASGI connection scope

    Returns:
        The client identity string
    """
    for name, value in scope.get("headers", []):
        if name == b"x-forwarded-for":
            forwarded_for = value.decode("latin1").split(",")[0].strip()
            try:
                ipaddress.ip_address(forwarded_for)
                return forwarded_for
            except ValueError:
                break

    client = scope.get("client")
    if client and client[0]:
        return client[0]
    return UNKNOWN_IDENTITY
