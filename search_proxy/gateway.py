"""Request contract for the search proxy.

Validation and forwarding are plain functions over small immutable values,
so they can be exercised without a server or a network.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

ALLOWED_METHOD = "GET"


class InboundRequest(BaseModel):
    """What the proxy needs to know about a client request."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    query: str = Field(default="", description="Raw query string, without the leading '?'")


class OutboundRequest(BaseModel):
    """Request to issue against the upstream provider."""

    model_config = ConfigDict(frozen=True)

    method: str = ALLOWED_METHOD
    url: str
    headers: Dict[str, str] = Field(repr=False)


class Rejection(BaseModel):
    """Local refusal, answered without contacting the upstream."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str


METHOD_NOT_ALLOWED = Rejection(status_code=405, body="Method not allowed")
NOT_FOUND = Rejection(status_code=404, body="Not found")


def check_request(inbound: InboundRequest, route: str) -> Optional[Rejection]:
    """Return the rejection for ``inbound``, or None when it may be forwarded.

    The method is checked before the path, so a non-GET request is a 405
    whatever path it targets.
    """
    if inbound.method.upper() != ALLOWED_METHOD:
        return METHOD_NOT_ALLOWED
    if inbound.path != route:
        return NOT_FOUND
    return None


def build_upstream_request(inbound: InboundRequest, base_url: str, api_key: str) -> OutboundRequest:
    """Point ``inbound`` at the upstream, keeping its query string verbatim."""
    url = f"{base_url}?{inbound.query}" if inbound.query else base_url
    # Pexels takes the bare key, no "Bearer" scheme.
    return OutboundRequest(url=url, headers={"Authorization": api_key})


__all__ = [
    "ALLOWED_METHOD",
    "InboundRequest",
    "METHOD_NOT_ALLOWED",
    "NOT_FOUND",
    "OutboundRequest",
    "Rejection",
    "build_upstream_request",
    "check_request",
]
