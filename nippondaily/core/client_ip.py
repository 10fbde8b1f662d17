"""Client identifier extraction for rate limiting.

Best-effort only: the headers below are trivially spoofable by a client that
talks to the app directly, so the identifier partitions quota but is not an
authentication boundary. No IP syntax validation is performed.
"""

from __future__ import annotations

from typing import Mapping

from fastapi import Request

UNKNOWN_CLIENT = "unknown"

# Checked in order after x-forwarded-for; first non-empty value wins.
SINGLE_VALUE_HEADERS: tuple[str, ...] = (
    "cf-connecting-ip",
    "fly-client-ip",
    "true-client-ip",
)


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        # Plain dicts are case-sensitive; Starlette Headers are not.
        for key, candidate in headers.items():
            if key.lower() == name:
                value = candidate
                break
    return (value or "").strip()


def get_client_identifier(headers: Mapping[str, str], socket_address: str | None = None) -> str:
    """Derive the rate-limit identifier for a request.

    Order: first entry of ``x-forwarded-for``, then ``cf-connecting-ip``,
    ``fly-client-ip``, ``true-client-ip``, then the socket peer address,
    falling back to ``"unknown"``. Empty values fall through to the next
    source.

    Args:
        headers: Request headers (any case).
        socket_address: Remote address of the TCP peer, if known.

    Returns:
        Identifier string, never empty.
    """

    forwarded_for = _header(headers, "x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    for name in SINGLE_VALUE_HEADERS:
        value = _header(headers, name)
        if value:
            return value

    if socket_address and socket_address.strip():
        return socket_address.strip()

    return UNKNOWN_CLIENT


def client_identifier_from_request(request: Request) -> str:
    socket_address = request.client.host if request.client else None
    return get_client_identifier(request.headers, socket_address)
