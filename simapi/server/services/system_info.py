"""
Diagnostic payload attached to every successful simulation response.

Tells the caller which instance served the request: host identity, its
addresses, runtime versions and the request itself. Name resolution
failures leave the address fields empty instead of failing the request.
"""

from __future__ import annotations

import platform
import socket
from datetime import datetime
from typing import List, Optional

import fastapi
from starlette.requests import Request

from simapi.server.config import get_settings
from simapi.server.schemas import RequestInfo, SystemInfo


def _host_addresses() -> List[str]:
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None)
    except (socket.gaierror, OSError):
        return []
    addresses: List[str] = []
    for family, _, _, _, sockaddr in infos:
        if family not in (socket.AF_INET, socket.AF_INET6):
            continue
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)
    return addresses


def _first(addresses: List[str], family: int) -> Optional[str]:
    for address in addresses:
        is_v6 = ":" in address
        if (family == socket.AF_INET6) == is_v6:
            return address
    return None


def request_info(request: Request) -> RequestInfo:
    return RequestInfo(
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None,
        headers=dict(request.headers),
    )


def get_system_info(request: Optional[Request] = None) -> SystemInfo:
    """Collect the diagnostic payload for the current host."""
    settings = get_settings()
    addresses = _host_addresses()
    return SystemInfo(
        hostname=socket.gethostname(),
        os_platform=platform.platform(),
        ip_address_v4=_first(addresses, socket.AF_INET),
        ip_address_v6=_first(addresses, socket.AF_INET6),
        ip_addresses_all=",".join(addresses) or None,
        app_name=settings.app_name,
        python_version=platform.python_version(),
        fastapi_version=fastapi.__version__,
        environment=settings.environment,
        now=datetime.now().astimezone().isoformat(),
        request=request_info(request) if request is not None else None,
    )
