"""Client identity resolution from proxy headers and the socket address.

The service is expected to run behind a single reverse proxy that appends the
real client address to X-Forwarded-For, so the last entry of that header is
the one to trust. Without the header, the raw connection address is used.
"""

from __future__ import annotations

import ipaddress

from guestbook.schemas.guest import ClientIdentity

UNKNOWN_IDENTITY = "unknown"


def _forwarded_candidate(forwarded_for: str | None) -> str:
    if not forwarded_for:
        return ""
    return forwarded_for.split(",")[-1].strip()


def _strip_port(remote_addr: str) -> str:
    """Drop the ``:port`` suffix and IPv6 brackets from ``host:port``."""
    if ":" not in remote_addr:
        return remote_addr
    host, _, _port = remote_addr.rpartition(":")
    return host.strip("[]")


def resolve_identity(
    forwarded_for: str | None, remote_addr: str | None
) -> ClientIdentity | None:
    """Derive the submitting client's address.

    Args:
        forwarded_for: Raw X-Forwarded-For header value (may be empty or a
            comma-separated list).
        remote_addr: Connection address as ``host:port`` (``[v6]:port`` for
            IPv6).

    Returns:
        The parsed address, or None when nothing parseable is available.

    Examples:
        >>> resolve_identity("1.2.3.4, 5.6.7.8", "10.0.0.1:80")
        IPv4Address('5.6.7.8')
        >>> resolve_identity("", "[::1]:54321")
        IPv6Address('::1')
        >>> resolve_identity(None, "garbage") is None
        True
    """
    candidate = _forwarded_candidate(forwarded_for)
    if not candidate:
        candidate = _strip_port((remote_addr or "").strip())

    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        return None


def format_remote_addr(host: str | None, port: int | None) -> str:
    """Rebuild ``host:port`` from an ASGI client tuple."""
    if not host:
        return ""
    if ":" in host:
        host = f"[{host}]"
    return f"{host}:{port}" if port is not None else host


def describe_identity(identity: ClientIdentity | None) -> str:
    """Textual form of an identity, with a placeholder when it is unknown."""
    return str(identity) if identity is not None else UNKNOWN_IDENTITY
