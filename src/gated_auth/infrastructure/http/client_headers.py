"""Client context extraction from inbound HTTP requests."""

from __future__ import annotations

from dataclasses import dataclass

from starlette.requests import Request

from gated_auth.domain.auth.client_context import resolve_client_ip, resolve_user_agent


@dataclass(frozen=True)
class ClientContext:
    """Resolved client address and user agent for one request."""

    ip_address: str | None
    user_agent: str | None


def client_context_from_request(request: Request) -> ClientContext:
    """Resolve client IP by header priority and read the user agent."""

    headers = request.headers
    peer_address = request.client.host if request.client is not None else None
    return ClientContext(
        ip_address=resolve_client_ip(
            cf_connecting_ip=headers.get("cf-connecting-ip"),
            x_real_ip=headers.get("x-real-ip"),
            x_forwarded_for=headers.get("x-forwarded-for"),
            peer_address=peer_address,
        ),
        user_agent=resolve_user_agent(headers.get("user-agent")),
    )
