"""Client address and user-agent resolution from request header candidates."""

from __future__ import annotations


def resolve_client_ip(
    *,
    cf_connecting_ip: str | None,
    x_real_ip: str | None,
    x_forwarded_for: str | None,
    peer_address: str | None,
) -> str | None:
    """Return the first non-empty client address by header priority.

    Priority: CDN client header, generic real-IP header, first hop of the
    forwarded-for chain, then the transport peer address.
    """

    forwarded_first_hop = None
    if x_forwarded_for is not None:
        forwarded_first_hop = x_forwarded_for.split(",")[0]

    for candidate in (cf_connecting_ip, x_real_ip, forwarded_first_hop, peer_address):
        if candidate is None:
            continue
        stripped = candidate.strip()
        if stripped:
            return stripped
    return None


def resolve_user_agent(user_agent: str | None) -> str | None:
    if user_agent is None or not user_agent.strip():
        return None
    return user_agent
