"""HTTP client for user-supplied origins that refuses non-public addresses.

Pages and sitemaps are fetched server-side from URLs the user types in, so the
resolved IP of every connection (including redirect hops) is checked at
connect time rather than before the request.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from typing import TYPE_CHECKING, cast

import httpcore
import httpx

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain"})

_SocketOption = (
    tuple[int, int, int] | tuple[int, int, bytes | bytearray] | tuple[int, int, None, int]
)


def is_public_ip(ip_text: str) -> bool:
    """Return True when an IP address is globally routable."""
    ip = ipaddress.ip_address(ip_text)
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


class PublicOnlyBackend(httpcore.AsyncNetworkBackend):
    """Network backend that only connects to public IP addresses."""

    def __init__(self) -> None:
        self._inner = cast("httpcore.AsyncNetworkBackend", httpcore.AnyIOBackend())

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: Iterable[_SocketOption] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        if host.strip().lower() in _BLOCKED_HOSTNAMES:
            msg = f"Blocked hostname {host!r}"
            raise httpcore.ConnectError(msg)

        loop = asyncio.get_running_loop()
        try:
            addr_infos = await loop.getaddrinfo(host, port, proto=socket.IPPROTO_TCP)
        except socket.gaierror as exc:
            msg = f"DNS resolution failed for {host!r}"
            raise httpcore.ConnectError(msg) from exc

        if not addr_infos:
            msg = f"DNS resolution returned no results for {host!r}"
            raise httpcore.ConnectError(msg)

        for _family, _type, _proto, _canonname, sockaddr in addr_infos:
            ip_text = str(sockaddr[0])
            if not is_public_ip(ip_text):
                logger.warning("Refused connection to %s: resolves to %s", host, ip_text)
                msg = f"{host!r} resolves to non-public address {ip_text}"
                raise httpcore.ConnectError(msg)

        # Connect to the address that was validated, not a fresh resolution.
        validated_ip = str(addr_infos[0][4][0])
        return await self._inner.connect_tcp(
            validated_ip,
            port,
            timeout=timeout,
            local_address=local_address,
            socket_options=socket_options,
        )

    async def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: Iterable[_SocketOption] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        msg = "Unix socket connections are not allowed"
        raise httpcore.ConnectError(msg)

    async def sleep(self, seconds: float) -> None:
        await self._inner.sleep(seconds)


def build_origin_client(
    *,
    timeout: float,
    block_private_addresses: bool = True,
) -> httpx.AsyncClient:
    """Create the client used for page and sitemap requests.

    Redirects are followed. The caller owns the client and must close it.
    """
    transport = httpx.AsyncHTTPTransport()
    if block_private_addresses:
        # Relies on httpx's internal _pool attribute (httpx 0.28.x).
        transport._pool = httpcore.AsyncConnectionPool(
            network_backend=PublicOnlyBackend(),
        )
    return httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        follow_redirects=True,
    )
