"""SSRF gate: decide whether a URL is safe for the server to fetch.

The static check never touches the network.  Pass ``resolve_dns=True`` to also
resolve domain names and reject those that point into private address space
(the fetch step does this by default).
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

_BLOCKED_HOSTNAMES: frozenset[str] = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "[::1]",
    },
)

# link-local, class-A private, class-C private
_BLOCKED_HOST_PREFIXES: tuple[str, ...] = ("169.254.", "10.", "192.168.")

# Shorthand / integer IPv4 forms accepted by inet_aton ("127.1", "2130706433", "0x7f.1")
_NUMERIC_HOST_RE = re.compile(r"^[0-9a-fA-FxX.]+$")

IpAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def _is_class_b_private(hostname: str) -> bool:
    """Return True for dotted-quad hosts in 172.16.0.0 - 172.31.255.255."""
    parts = hostname.split(".")
    if len(parts) != 4:
        return False
    try:
        octets = [int(p) for p in parts]
    except ValueError:
        return False
    return octets[0] == 172 and 16 <= octets[1] <= 31


def _parse_ip_literal(hostname: str) -> IpAddress | None:
    try:
        return ipaddress.ip_address(hostname)
    except ValueError:
        pass
    if not _NUMERIC_HOST_RE.match(hostname) or not any(c.isdigit() for c in hostname):
        return None
    try:
        return ipaddress.IPv4Address(socket.inet_aton(hostname))
    except OSError:
        return None


def is_public_address(ip: IpAddress) -> bool:
    """Return False for loopback, private, link-local and other non-routable addresses."""
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return not (
        ip.is_loopback
        or ip.is_private
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_multicast
        or ip.is_reserved
    )


def _resolves_to_public(hostname: str) -> bool:
    try:
        infos = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError, OSError) as exc:
        logger.debug("DNS resolution failed for %s: %s", hostname, exc)
        return False
    if not infos:
        return False
    for _family, _type, _proto, _canon, sockaddr in infos:
        try:
            ip = ipaddress.ip_address(str(sockaddr[0]).split("%", 1)[0])
        except ValueError:
            continue
        if not is_public_address(ip):
            logger.warning("Host %s resolves to non-public address %s", hostname, ip)
            return False
    return True


def is_safe_url(url: str, *, resolve_dns: bool = False) -> bool:
    """Return True if *url* may be fetched without reaching internal networks.

    Only ``http``/``https`` URLs are allowed.  Loopback, link-local and private
    hosts are rejected, both by name and as IP literals.  Never raises.
    """
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except (ValueError, AttributeError):
        return False

    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        return False
    if not hostname:
        return False

    hostname = hostname.lower().rstrip(".")
    if hostname in _BLOCKED_HOSTNAMES:
        return False
    if hostname.startswith(_BLOCKED_HOST_PREFIXES):
        return False
    if _is_class_b_private(hostname):
        return False

    ip = _parse_ip_literal(hostname)
    if ip is not None:
        return is_public_address(ip)
    # unparseable IPv6 literal (zone ids and the like)
    if ":" in hostname:
        return False

    if resolve_dns:
        return _resolves_to_public(hostname)
    return True
