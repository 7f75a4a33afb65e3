"""Client network address resolution.

The rate limit key is derived from the address returned here. Proxy headers
take precedence over the direct connection address:

1. ``Client-IP``
2. first entry of ``X-Forwarded-For``
3. the socket peer address

Anything that does not parse as an IPv4 or IPv6 address collapses to
``0.0.0.0``, so spoofed garbage shares one bucket instead of minting new ones.
"""

import ipaddress
from typing import Mapping, Optional

UNKNOWN_ADDRESS = "0.0.0.0"

CLIENT_IP_HEADER = "client-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def normalize_address(candidate: Optional[str]) -> str:
    """Return the canonical form of an IP address, or ``0.0.0.0`` if invalid.

    >>> normalize_address(" 203.0.113.7 ")
    '203.0.113.7'
    >>> normalize_address("not-an-ip")
    '0.0.0.0'
    """
    if not candidate:
        return UNKNOWN_ADDRESS
    try:
        return str(ipaddress.ip_address(candidate.strip()))
    except ValueError:
        return UNKNOWN_ADDRESS


def resolve_client_address(headers: Mapping[str, str], remote_addr: Optional[str] = None) -> str:
    client_ip = _header(headers, CLIENT_IP_HEADER)
    if client_ip:
        return normalize_address(client_ip)

    forwarded_for = _header(headers, FORWARDED_FOR_HEADER)
    if forwarded_for:
        return normalize_address(forwarded_for.split(",")[0])

    return normalize_address(remote_addr)
